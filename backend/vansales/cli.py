# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/vansales/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init [--username admin@vansales.com --password demo1234]
#   Create tables and the first administrator (idempotent).
# - python -m flask system seed-demo
#   Demo agents (one disabled) and a few catalog products.
#
# Users:
# - python -m flask users list [--role agent]
# - python -m flask users create --username agent3@vansales.com --name "Agent Three" --role agent
#
# Catalog:
# - python -m flask catalog resync
#   Refresh pinned products from BigCommerce.
#
# Orders:
# - python -m flask orders pending
#   List orders still waiting for a successful BigCommerce sync.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, Product, ROLES, ROLE_ADMIN, ROLE_AGENT
from .services import order_service, catalog_service
from .services.auth_service import create_user
from .services.bigcommerce_client import GatewayNotConfiguredError
from .validation import ValidationError, ConflictError

DEMO_PASSWORD = "demo1234"


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@click.option('--username', default='admin@vansales.com', help='Administrator username')
@click.option('--name', default='System Admin', help='Administrator display name')
@click.option('--password', default=DEMO_PASSWORD, help='Administrator password')
@with_appcontext
def init_system(username, name, password):
    """
    Create all tables and the first administrator.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing VanSales backend...")
    db.create_all()
    click.echo("PASS Tables created")

    existing_admin = db.session.query(User).filter_by(role=ROLE_ADMIN).first()
    if existing_admin:
        click.echo(f"WARN  Administrator '{existing_admin.username}' already exists, skipping...")
        return

    try:
        user = create_user(username=username, password=password, name=name, role=ROLE_ADMIN)
    except (ValidationError, ConflictError) as e:
        click.echo(f"FAIL Failed to create administrator: {e}")
        raise SystemExit(1)

    click.echo(f"PASS Created administrator: {user.username}")


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Create demo agents and catalog products (skips existing rows)."""
    demo_users = [
        ("agent1@vansales.com", "John Doe", True),
        ("agent2@vansales.com", "Jane Smith", False),
    ]
    for username, name, enabled in demo_users:
        if db.session.query(User).filter_by(username=username).first():
            click.echo(f"WARN  User '{username}' already exists, skipping...")
            continue
        user = create_user(username=username, password=DEMO_PASSWORD, name=name, role=ROLE_AGENT)
        user.is_enabled = enabled
        db.session.commit()
        click.echo(f"PASS Created agent: {username} ({'enabled' if enabled else 'disabled'})")

    demo_products = [
        (1001, "Pro-Grade Impact Driver", "TL-IMP-001", 18999, 45, True),
        (1002, "Precision Socket Set (50pc)", "TL-SOC-050", 12950, 12, True),
        (1003, "Hydraulic Floor Jack 3T", "EQ-JK-3000", 24900, 8, False),
    ]
    for bc_id, name, sku, price_cents, stock, pinned in demo_products:
        if db.session.query(Product).filter_by(bigcommerce_id=bc_id).first():
            click.echo(f"WARN  Product {bc_id} already exists, skipping...")
            continue
        db.session.add(Product(
            bigcommerce_id=bc_id,
            name=name,
            sku=sku,
            price_cents=price_cents,
            stock_level=stock,
            is_pinned=pinned,
            variants=[],
        ))
        db.session.commit()
        click.echo(f"PASS Created product: {sku} {name}")


@click.group('users')
def users_group():
    """User inspection and creation commands."""


@users_group.command('list')
@click.option('--role', type=click.Choice(ROLES), help='Filter by role')
@with_appcontext
def list_users(role):
    """List users with role and status."""
    query = db.session.query(User)
    if role:
        query = query.filter_by(role=role)
    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Username':<30} {'Name':<25} {'Role':<7} {'Enabled':<8} {'Search'}")
    click.echo("="*90)
    for user in users:
        click.echo(
            f"{user.id:<5} {user.username:<30} {user.name:<25} {user.role:<7} "
            f"{'Yes' if user.is_enabled else 'No':<8} {'Yes' if user.allow_bigcommerce_search else 'No'}"
        )
    click.echo("="*90 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Login name')
@click.option('--name', prompt=True, help='Display name')
@click.option('--role', type=click.Choice(ROLES), default=ROLE_AGENT, show_default=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_user_command(username, name, role, password):
    """Create a user."""
    try:
        user = create_user(username=username, password=password, name=name, role=role)
    except (ValidationError, ConflictError) as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    click.echo(f"PASS Created user: {user.username} (ID: {user.id}) with role '{user.role}'")


@click.group('catalog')
def catalog_group():
    """Catalog maintenance commands."""


@catalog_group.command('resync')
@with_appcontext
def resync_command():
    """Refresh pinned products from BigCommerce."""
    try:
        result = catalog_service.resync_pinned_products()
    except GatewayNotConfiguredError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    click.echo(f"{'WARN ' if result['errors'] else 'PASS'} {result['message']}")


@click.group('orders')
def orders_group():
    """Order inspection commands."""


@orders_group.command('pending')
@with_appcontext
def pending_orders_command():
    """List orders waiting for a successful BigCommerce sync."""
    orders = order_service.list_pending_orders()["items"]
    if not orders:
        click.echo("No pending orders.")
        return
    for order in orders:
        click.echo(
            f"#{order['id']:<6} {order['date']} {order['customer_name']:<30} "
            f"{order['total']:>10}  {order['sync_error'] or 'not attempted'}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(orders_group)
