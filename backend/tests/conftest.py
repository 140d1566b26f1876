"""
Pytest fixtures for VanSales backend tests.

Provides the test app (in-memory SQLite), per-test table wipe, users of
each role, a pinned catalog and an httpx mock transport that stands in for
BigCommerce and the spreadsheet webhook.
"""

import json

import bcrypt
import httpx
import pytest

from vansales import create_app
from vansales.extensions import db
from vansales.models import User, Product, ROLE_ADMIN, ROLE_AGENT

PASSWORD = "demo1234"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BIGCOMMERCE_STORE_HASH': '',
        'BIGCOMMERCE_ACCESS_TOKEN': '',
        'BIGCOMMERCE_API_BASE': 'https://bc.test',
        'GOOGLE_SHEETS_WEBHOOK_URL': '',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        app.config['OUTBOUND_HTTP_TRANSPORT'] = None


def _make_user(db_session, username, name, role, **kwargs):
    # Low bcrypt cost keeps the suite fast; verify_password accepts any cost
    user = User(
        username=username,
        name=name,
        role=role,
        password_hash=bcrypt.hashpw(PASSWORD.encode('utf-8'), bcrypt.gensalt(rounds=4)).decode('utf-8'),
        **kwargs,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def admin(db_session):
    return _make_user(db_session, "admin@vansales.com", "System Admin", ROLE_ADMIN)


@pytest.fixture(scope='function')
def agent(db_session):
    return _make_user(db_session, "agent1@vansales.com", "John Doe", ROLE_AGENT)


@pytest.fixture(scope='function')
def other_agent(db_session):
    return _make_user(db_session, "agent3@vansales.com", "Sam Other", ROLE_AGENT)


@pytest.fixture(scope='function')
def disabled_agent(db_session):
    return _make_user(db_session, "agent2@vansales.com", "Jane Smith", ROLE_AGENT, is_enabled=False)


@pytest.fixture(scope='function')
def product(db_session):
    """Pinned product without variants."""
    product = Product(
        bigcommerce_id=1001,
        sku="TL-IMP-001",
        name="Pro-Grade Impact Driver",
        price_cents=1000,
        stock_level=45,
        is_pinned=True,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def variant_product(db_session):
    """Pinned product with two size variants."""
    product = Product(
        bigcommerce_id=2002,
        sku="SH-TEE",
        name="Work Shirt",
        price_cents=1500,
        stock_level=0,
        is_pinned=True,
        variants=[
            {
                "id": 11, "sku": "SH-TEE-S", "price": "15.00", "inventory_level": 5,
                "option_values": [{"id": 101, "option_id": 7, "label": "Small", "option_display_name": "Size"}],
            },
            {
                "id": 12, "sku": "SH-TEE-L", "price": "17.50", "inventory_level": 3,
                "option_values": [{"id": 102, "option_id": 7, "label": "Large", "option_display_name": "Size"}],
            },
        ],
    )
    db_session.add(product)
    db_session.commit()
    return product


def auth_headers(user) -> dict:
    """Helper to create the identity header for a user."""
    return {'X-User-Id': str(user.id)}


@pytest.fixture(scope='function')
def as_user():
    return auth_headers


class FakeRemote:
    """
    Records outbound requests and answers them from per-path handlers.

    Handlers are keyed by (method, path); unmatched requests get a 404.
    """

    def __init__(self):
        self.requests = []
        self.routes = {}

    def on(self, method, path, status=200, body=None, exc=None):
        self.routes[(method, path)] = (status, body, exc)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body, exc = self.routes.get((request.method, request.url.path), (404, {"title": "Not Found"}, None))
        if exc is not None:
            raise exc
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def json_body(self, method, path, index=-1):
        return json.loads(self.calls(method, path)[index].content)


@pytest.fixture(scope='function')
def remote(app, db_session):
    """Route every outbound httpx call through a FakeRemote."""
    fake = FakeRemote()
    app.config['OUTBOUND_HTTP_TRANSPORT'] = httpx.MockTransport(fake)
    return fake


@pytest.fixture(scope='function')
def bigcommerce_configured(db_session):
    from vansales.services import settings_service
    settings_service.set_setting("bigcommerce_config", {"storeHash": "abc123", "token": "tok"})


@pytest.fixture(scope='function')
def sheets_configured(db_session):
    from vansales.services import settings_service
    settings_service.set_setting("google_sheets_webhook", "https://sheets.test/hook")
