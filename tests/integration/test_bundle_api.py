"""
Tests de integración de la API HTTP.

Levantan la aplicación completa (lifespan, middleware, manejadores de
errores) sobre SQLite en memoria con el TestClient de FastAPI.
"""

import base64
import hashlib
import hmac
import json

import pytest
from fastapi.testclient import TestClient

from niche_bundler.core.config import reload_settings
from niche_bundler.db.connection import ConnDB, set_db_connection
from niche_bundler.main import create_application

SHOP = "example.myshopify.com"


@pytest.fixture
def client():
    set_db_connection(ConnDB(database_url="sqlite+aiosqlite:///:memory:"))
    with TestClient(create_application()) as test_client:
        yield test_client
    set_db_connection(None)


@pytest.fixture
def webhook_secret(monkeypatch):
    monkeypatch.setenv("SHOPIFY_WEBHOOK_SECRET", "shpss_integration")
    reload_settings()
    yield "shpss_integration"
    monkeypatch.delenv("SHOPIFY_WEBHOOK_SECRET")
    reload_settings()


def create_bundle(client, payload, **overrides):
    response = client.post("/api/bundles", json={**payload, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["bundle"]


@pytest.mark.integration
class TestBundleCrud:
    def test_create_and_fetch(self, client, bundle_payload):
        bundle = create_bundle(client, bundle_payload)

        assert bundle["id"] is not None
        assert bundle["active"] is True
        assert bundle["discount_type"] == "percentage"
        assert bundle["products"][0]["variant_id"] == "2001"

        response = client.get(f"/api/bundles/{bundle['id']}")
        assert response.status_code == 200
        assert response.json()["bundle"]["handle"] == "protein-starter-pack"

    def test_numeric_ids_are_stored_as_strings(self, client, bundle_payload):
        products = [{"product_id": 1001, "variant_id": 2001, "title": "Whey", "price": 10}]
        bundle = create_bundle(client, bundle_payload, products=products)

        assert bundle["products"][0]["product_id"] == "1001"
        assert bundle["products"][0]["quantity"] == 1

    def test_list_by_shop(self, client, bundle_payload):
        create_bundle(client, bundle_payload)
        create_bundle(client, bundle_payload, shop_domain="other.myshopify.com")

        response = client.get("/api/bundles", params={"shop": SHOP})

        assert response.status_code == 200
        assert [b["shop_domain"] for b in response.json()["bundles"]] == [SHOP]

    def test_duplicate_handle_is_conflict(self, client, bundle_payload):
        create_bundle(client, bundle_payload)

        response = client.post("/api/bundles", json=bundle_payload)

        assert response.status_code == 409
        assert response.json()["error"] is True

    @pytest.mark.parametrize(
        "overrides",
        [
            {"products": []},
            {"discount_type": "bogo"},
            {"discount_value": -1},
            {"discount_value": 120},
            {"handle": "Not A Slug"},
            {"discount_value": 12.345},
            {"discount_value": 123456789.5},
        ],
    )
    def test_invalid_payload_is_unprocessable(self, client, bundle_payload, overrides):
        response = client.post("/api/bundles", json={**bundle_payload, **overrides})

        assert response.status_code == 422
        assert response.json()["error_type"] == "validation_error"

    def test_missing_bundle_is_not_found(self, client):
        response = client.get("/api/bundles/999")

        assert response.status_code == 404
        assert response.json()["error_type"] == "application_error"

    def test_discount_with_cents_is_kept(self, client, bundle_payload):
        bundle = create_bundle(client, bundle_payload, discount_type="fixed", discount_value=12.34)

        assert bundle["discount_value"] == 12.34
        response = client.put(f"/api/bundles/{bundle['id']}", json={"discount_value": 1.005})
        assert response.status_code == 422

    def test_partial_update(self, client, bundle_payload):
        bundle = create_bundle(client, bundle_payload)

        response = client.put(f"/api/bundles/{bundle['id']}", json={"discount_type": "fixed", "discount_value": 5})

        assert response.status_code == 200
        updated = response.json()["bundle"]
        assert (updated["discount_type"], updated["discount_value"]) == ("fixed", 5.0)
        assert updated["title"] == bundle["title"]

    def test_deactivate_hides_from_handle_lookup(self, client, bundle_payload):
        bundle = create_bundle(client, bundle_payload)
        assert client.get("/api/bundles/handle/protein-starter-pack").status_code == 200

        response = client.post(f"/api/bundles/{bundle['id']}/deactivate")
        assert response.json()["bundle"]["active"] is False

        assert client.get("/api/bundles/handle/protein-starter-pack").status_code == 404
        assert client.get(f"/api/bundles/{bundle['id']}").status_code == 200

    def test_delete(self, client, bundle_payload):
        bundle = create_bundle(client, bundle_payload)

        response = client.delete(f"/api/bundles/{bundle['id']}")

        assert response.json() == {"success": True}
        assert client.get(f"/api/bundles/{bundle['id']}").status_code == 404
        assert client.delete(f"/api/bundles/{bundle['id']}").status_code == 404


@pytest.mark.integration
class TestPricing:
    def test_percentage_bundle(self, client):
        """Escenario A: 10×2 + 5×1 con 20% → 25.00 / 5.00 / 20.00."""
        products = [{"price": 10, "quantity": 2}, {"price": 5, "quantity": 1}]
        response = client.post(
            "/api/bundle-price",
            json={"products": products, "discount_type": "percentage", "discount_value": 20},
        )

        assert response.status_code == 200
        assert response.json() == {
            "original_price": "25.00",
            "discount_amount": "5.00",
            "final_price": "20.00",
            "products": products,
        }

    def test_fixed_discount_larger_than_total(self, client):
        response = client.post(
            "/api/bundle-price",
            json={"products": [{"price": 3}], "discount_type": "fixed", "discount_value": 10},
        )

        assert response.json()["discount_amount"] == "10.00"
        assert response.json()["final_price"] == "0.00"

    def test_garbage_items_are_normalized(self, client):
        response = client.post(
            "/api/bundle-price",
            json={"products": [{"price": "abc", "quantity": 2}, {"price": 4, "quantity": 0}]},
        )

        assert response.status_code == 200
        assert response.json()["original_price"] == "4.00"
        assert response.json()["discount_amount"] == "0.00"

    def test_huge_price_is_priced(self, client):
        response = client.post(
            "/api/bundle-price",
            json={"products": [{"price": 1e30, "quantity": 1}], "discount_type": "percentage", "discount_value": 10},
        )

        assert response.status_code == 200
        assert response.json()["original_price"] == "1" + "0" * 30 + ".00"
        assert response.json()["final_price"] == "9" + "0" * 29 + ".00"

    @pytest.mark.parametrize("body", [{}, {"products": "nope"}, {"products": {"price": 1}}])
    def test_products_must_be_a_list(self, client, body):
        response = client.post("/api/bundle-price", json=body)

        assert response.status_code == 422


@pytest.mark.integration
class TestStorefrontData:
    def test_only_active_bundles(self, client, bundle_payload):
        active = create_bundle(client, bundle_payload)
        hidden = create_bundle(client, bundle_payload, handle="hidden-pack")
        client.post(f"/api/bundles/{hidden['id']}/deactivate")

        response = client.get("/bundle-data", params={"shop": SHOP})

        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [active["id"]]


@pytest.mark.integration
class TestWebhooks:
    def test_app_uninstalled_removes_shop_bundles(self, client, bundle_payload):
        create_bundle(client, bundle_payload)
        create_bundle(client, bundle_payload, handle="second-pack")
        create_bundle(client, bundle_payload, shop_domain="other.myshopify.com")

        response = client.post(
            "/api/webhooks/app/uninstalled",
            content=b"{}",
            headers={"X-Shopify-Shop-Domain": SHOP, "X-Shopify-Topic": "app/uninstalled"},
        )

        assert response.status_code == 200
        assert response.json() == {"received": True, "shop_domain": SHOP, "deleted_bundles": 2}
        assert len(client.get("/api/bundles").json()["bundles"]) == 1

    def test_app_uninstalled_without_shop(self, client):
        response = client.post("/api/webhooks/app/uninstalled", content=b"{}")

        assert response.status_code == 422

    def test_invalid_signature_is_rejected(self, client, webhook_secret):
        response = client.post(
            "/api/webhooks/app/uninstalled",
            content=b"{}",
            headers={"X-Shopify-Shop-Domain": SHOP, "X-Shopify-Hmac-Sha256": "bm9wZQ=="},
        )

        assert response.status_code == 401

    def test_valid_signature_is_accepted(self, client, webhook_secret):
        body = json.dumps({"myshopify_domain": SHOP}).encode()
        signature = base64.b64encode(hmac.new(webhook_secret.encode(), body, hashlib.sha256).digest()).decode()

        response = client.post(
            "/api/webhooks/app/uninstalled",
            content=body,
            headers={"X-Shopify-Hmac-Sha256": signature},
        )

        assert response.status_code == 200
        assert response.json()["shop_domain"] == SHOP

    def test_non_object_payload_is_unprocessable(self, client):
        response = client.post("/api/webhooks/app/uninstalled", content=b"[]")

        assert response.status_code == 422
        assert response.json()["error_type"] == "validation_error"

    @pytest.mark.parametrize("path", ["/webhooks/products/update", "/webhooks/inventory_levels/update"])
    def test_acknowledged_topics(self, client, path):
        response = client.post(path, content=b'{"id": 1}', headers={"X-Shopify-Shop-Domain": SHOP})

        assert response.status_code == 200
        assert response.content == b""


@pytest.mark.integration
class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["message"].endswith("is running")

    def test_version(self, client):
        response = client.get("/version")

        assert response.status_code == 200
        assert "version" in response.json()

    def test_request_id_header(self, client):
        response = client.get("/ping")

        assert response.headers["X-Request-ID"]
        assert "X-Process-Time" in response.headers
