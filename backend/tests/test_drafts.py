"""
Offline drafts and resubmission.

Drafts are saved without contacting BigCommerce and later completed through
submit-draft, which also retries orders whose sync failed.
"""

import pytest

from vansales.extensions import db
from vansales.models import Order, STATUS_DRAFT, STATUS_PENDING_SYNC, STATUS_SYNCED

from test_order_workflow import ADDRESS, ORDERS_PATH, order_payload


@pytest.fixture
def save_draft(client, agent, as_user):
    def _save(payload, user=None):
        return client.post("/api/orders/draft", json=payload, headers=as_user(user or agent))
    return _save


def test_draft_saved_without_address_or_gateway(save_draft, product, bigcommerce_configured, remote):
    resp = save_draft(order_payload(product, billing_address=None))

    assert resp.status_code == 201
    order = resp.get_json()["order"]
    assert order["status"] == STATUS_DRAFT
    assert order["billing_address"] is None
    assert order["sync_error"] is None
    assert remote.requests == []


def test_draft_still_validates_lines(save_draft, product):
    resp = save_draft(order_payload(product, billing_address=None, total="99.00"))

    assert resp.status_code == 400
    assert db.session.query(Order).count() == 0


def test_draft_listing_scoped_to_owner(client, save_draft, agent, other_agent, admin, product, as_user):
    save_draft(order_payload(product, billing_address=None))
    save_draft(order_payload(product, billing_address=None, customer_name="Other Shop"), user=other_agent)

    mine = client.get("/api/orders/drafts", headers=as_user(agent)).get_json()
    assert [o["customer_name"] for o in mine["items"]] == ["Acme Hardware Ltd"]

    everything = client.get("/api/orders/drafts", headers=as_user(admin)).get_json()
    assert everything["count"] == 2


def test_submit_draft_syncs(client, save_draft, agent, product, bigcommerce_configured, remote, as_user):
    remote.on("POST", ORDERS_PATH, body={"id": 321})
    order_id = save_draft(order_payload(product, billing_address=None)).get_json()["order"]["id"]

    resp = client.post(
        f"/api/orders/{order_id}/submit-draft",
        json={"billing_address": ADDRESS, "bigcommerce_customer_id": 42},
        headers=as_user(agent),
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["bigcommerce"] == {"success": True, "order_id": 321, "error": None}
    assert body["order"]["status"] == STATUS_SYNCED
    assert body["order"]["bigcommerce_customer_id"] == 42

    sent = remote.json_body("POST", ORDERS_PATH)
    assert sent["customer_id"] == 42
    assert sent["billing_address"]["street_1"] == "1 Main St"


def test_submit_draft_requires_address(client, save_draft, agent, product, bigcommerce_configured, remote, as_user):
    order_id = save_draft(order_payload(product, billing_address=None)).get_json()["order"]["id"]

    resp = client.post(f"/api/orders/{order_id}/submit-draft", json={}, headers=as_user(agent))

    assert resp.status_code == 400
    assert db.session.get(Order, order_id).status == STATUS_DRAFT
    assert remote.requests == []


def test_retry_failed_sync(client, agent, product, bigcommerce_configured, remote, as_user):
    remote.on("POST", ORDERS_PATH, status=500, body="temporarily unavailable")
    first = client.post("/api/orders", json=order_payload(product), headers=as_user(agent)).get_json()
    assert first["order"]["status"] == STATUS_PENDING_SYNC

    remote.on("POST", ORDERS_PATH, body={"id": 777})
    resp = client.post(f"/api/orders/{first['order']['id']}/submit-draft", json={}, headers=as_user(agent))

    assert resp.status_code == 200
    order = resp.get_json()["order"]
    assert order["status"] == STATUS_SYNCED
    assert order["bigcommerce_order_id"] == 777
    assert order["sync_error"] is None
    assert len(remote.calls("POST", ORDERS_PATH)) == 2


def test_synced_order_cannot_be_resubmitted(client, agent, product, bigcommerce_configured, remote, as_user):
    remote.on("POST", ORDERS_PATH, body={"id": 1})
    order_id = client.post("/api/orders", json=order_payload(product), headers=as_user(agent)).get_json()["order"]["id"]

    resp = client.post(f"/api/orders/{order_id}/submit-draft", json={}, headers=as_user(agent))

    assert resp.status_code == 409
    assert len(remote.calls("POST", ORDERS_PATH)) == 1


def test_other_agent_cannot_submit_draft(client, save_draft, other_agent, product, as_user):
    order_id = save_draft(order_payload(product, billing_address=None)).get_json()["order"]["id"]

    resp = client.post(
        f"/api/orders/{order_id}/submit-draft",
        json={"billing_address": ADDRESS},
        headers=as_user(other_agent),
    )
    assert resp.status_code == 403


def test_unknown_draft(client, agent, as_user):
    assert client.post("/api/orders/9999/submit-draft", json={}, headers=as_user(agent)).status_code == 404
