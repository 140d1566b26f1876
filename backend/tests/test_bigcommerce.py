"""
BigCommerce client mapping, error handling and the proxy routes.
"""

import httpx
import pytest

from vansales.services.bigcommerce_client import (
    BigCommerceClient,
    GatewayError,
    map_address,
    map_customer,
    map_product,
    strip_html,
)

BC = "/stores/abc123"


def make_client(remote):
    return BigCommerceClient("abc123", "tok", base_url="https://bc.test", transport=httpx.MockTransport(remote))


class TestMapping:

    def test_strip_html(self):
        assert strip_html("<p>Hello <em>there</em></p>") == "Hello there"
        assert strip_html(None) == ""

    def test_map_product_drops_base_variant(self):
        mapped = map_product({
            "id": 7,
            "name": "Drill",
            "sku": "DR-1",
            "price": 99.5,
            "inventory_level": 3,
            "description": "<p>Cordless</p>",
            "images": [{"url_standard": "https://cdn.test/drill.jpg"}],
            "variants": [
                {"id": 70, "sku": "DR-1", "price": 99.5, "option_values": []},
                {
                    "id": 71, "sku": "DR-1-B", "price": None, "calculated_price": 101,
                    "inventory_level": 2,
                    "option_values": [{"id": 5, "option_id": 6, "label": "Blue", "option_display_name": "Colour"}],
                },
            ],
        })
        assert mapped["bigcommerce_id"] == 7
        assert mapped["price"] == "99.5"
        assert mapped["image"] == "https://cdn.test/drill.jpg"
        assert mapped["description"] == "Cordless"
        assert mapped["is_pinned"] is False
        assert [v["id"] for v in mapped["variants"]] == [71]
        assert mapped["variants"][0]["price"] == "101"
        assert mapped["variants"][0]["stock_level"] == 2

    def test_map_customer(self):
        assert map_customer({"id": 1, "first_name": "Ada", "last_name": "Lovelace", "email": "a@l.test"})["name"] == "Ada Lovelace"

    def test_map_address(self):
        mapped = map_address({"id": 3, "customer_id": 1, "address1": "1 Main St", "postal_code": "97477"})
        assert mapped["address1"] == "1 Main St"
        assert mapped["postal_code"] == "97477"
        assert mapped["address2"] == ""


class TestClient:

    def test_search_products(self, remote):
        remote.on("GET", f"{BC}/v3/catalog/products", body={"data": [{"id": 1, "name": "Drill", "price": 5}]})

        products = make_client(remote).search_products("drill")

        assert [p["name"] for p in products] == ["Drill"]
        request = remote.requests[0]
        assert request.url.params["keyword"] == "drill"
        assert request.headers["X-Auth-Token"] == "tok"

    def test_customer_search_by_email_or_name(self, remote):
        remote.on("GET", f"{BC}/v3/customers", body={"data": []})
        client = make_client(remote)

        client.search_customers("ada@l.test")
        client.search_customers("Ada")

        assert remote.requests[0].url.params["email:in"] == "ada@l.test"
        assert remote.requests[1].url.params["name:like"] == "Ada"

    def test_customer_addresses(self, remote):
        remote.on("GET", f"{BC}/v3/customers/addresses", body={"data": [{"id": 9, "customer_id": 4, "address1": "x"}]})

        addresses = make_client(remote).get_customer_addresses(4)

        assert addresses[0]["id"] == 9
        assert remote.requests[0].url.params["customer_id:in"] == "4"

    def test_error_carries_status_and_body(self, remote):
        remote.on("POST", f"{BC}/v2/orders", status=400, body="bad address")

        with pytest.raises(GatewayError) as excinfo:
            make_client(remote).create_order({})

        assert excinfo.value.status_code == 400
        assert excinfo.value.body == "bad address"
        assert str(excinfo.value) == "BigCommerce API error 400: bad address"

    def test_missing_product(self, remote):
        remote.on("GET", f"{BC}/v3/catalog/products/5", body={"data": None})

        with pytest.raises(GatewayError):
            make_client(remote).get_product(5)


class TestProxyRoutes:

    def test_product_search(self, client, admin, bigcommerce_configured, remote, as_user):
        remote.on("GET", f"{BC}/v3/catalog/products", body={"data": [{"id": 1, "name": "Drill", "price": 5}]})

        resp = client.get("/api/bigcommerce/products/search?query=drill", headers=as_user(admin))

        assert resp.status_code == 200
        assert resp.get_json()["count"] == 1

    def test_empty_query(self, client, admin, bigcommerce_configured, as_user):
        resp = client.get("/api/bigcommerce/products/search?query=%20", headers=as_user(admin))
        assert resp.status_code == 400

    def test_upstream_error_is_502(self, client, agent, bigcommerce_configured, remote, as_user):
        remote.on("GET", f"{BC}/v3/customers", status=503, body="maintenance")

        resp = client.get("/api/bigcommerce/customers/search?query=acme", headers=as_user(agent))

        assert resp.status_code == 502
        assert resp.get_json()["status_code"] == 503

    def test_addresses(self, client, agent, bigcommerce_configured, remote, as_user):
        remote.on("GET", f"{BC}/v3/customers/addresses", body={"data": [{"id": 2, "customer_id": 8, "address1": "1 Main St"}]})

        resp = client.get("/api/bigcommerce/customers/8/addresses", headers=as_user(agent))

        assert resp.status_code == 200
        assert resp.get_json()["items"][0]["address1"] == "1 Main St"


class TestUnbuildableRequests:

    def test_malformed_base_url(self, remote):
        client = BigCommerceClient("abc123", "tok", base_url="https://bc.test:notaport", transport=httpx.MockTransport(remote))

        with pytest.raises(GatewayError, match="could not be built"):
            client.search_products("drill")

    def test_non_ascii_token(self, remote):
        client = BigCommerceClient("abc123", "tök", base_url="https://bc.test", transport=httpx.MockTransport(remote))

        with pytest.raises(GatewayError, match="could not be built"):
            client.create_order({})
        assert remote.requests == []

    def test_order_id_must_be_integer(self, remote):
        remote.on("POST", f"{BC}/v2/orders", body={"id": "42"})

        with pytest.raises(GatewayError, match="integer order id"):
            make_client(remote).create_order({})
