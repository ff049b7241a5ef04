"""Fixtures del widget: storefront simulado con httpx.MockTransport."""

import httpx
import pytest

from niche_bundler.widget.element import WidgetElement

API_URL = "https://bundler.example.com/api"
STOREFRONT = "https://example.myshopify.com"

BUNDLE_JSON = {
    "id": 7,
    "title": "Protein Starter Pack",
    "handle": "protein-starter-pack",
    "products": [
        {
            "product_id": "1001",
            "variant_id": "2001",
            "title": "Whey Protein",
            "price": 10.0,
            "quantity": 2,
            "image": "https://cdn.example.com/whey.png",
        },
        {"product_id": "1002", "variant_id": None, "title": "Shaker Bottle", "price": 5.0, "quantity": 1},
    ],
    "discount_type": "percentage",
    "discount_value": 20.0,
    "active": True,
    "shop_domain": "example.myshopify.com",
    "created_at": "2024-05-01T10:00:00+00:00",
    "updated_at": "2024-05-01T10:00:00+00:00",
}

PRICE_JSON = {"original_price": "25.00", "discount_amount": "5.00", "final_price": "20.00", "products": []}


class FakeStorefront:
    """Simula la API de bundles y el carrito de Shopify."""

    def __init__(self, bundle_status=200, price_status=200, cart_statuses=(200,)):
        self.bundle_status = bundle_status
        self.price_status = price_status
        self.cart_statuses = list(cart_statuses)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.startswith("/api/bundles/handle/"):
            if self.bundle_status != 200:
                return httpx.Response(self.bundle_status, json={"error": "Bundle not found"})
            return httpx.Response(200, json={"bundle": BUNDLE_JSON})

        if path == "/api/bundle-price":
            return httpx.Response(self.price_status, json=PRICE_JSON)

        if path == "/cart/add.js":
            # El último status se repite para las llamadas siguientes
            status = self.cart_statuses.pop(0) if len(self.cart_statuses) > 1 else self.cart_statuses[0]
            return httpx.Response(status, json={})

        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url=STOREFRONT)

    def paths(self):
        return [(request.method, request.url.path) for request in self.requests]


class RecordingSleep:
    """Reemplazo de asyncio.sleep que solo registra los delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def api_url():
    return API_URL


@pytest.fixture
def storefront_url():
    return STOREFRONT


@pytest.fixture
def storefront_factory():
    """Crea storefronts simulados con los status indicados."""
    return FakeStorefront


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def make_element():
    """Crea placeholders ``niche-bundle-widget``; ``None`` omite el atributo."""

    def _make(handle="protein-starter-pack", api_url=API_URL):
        attributes = {"class": "niche-bundle-widget"}
        if handle is not None:
            attributes["data-bundle-handle"] = handle
        if api_url is not None:
            attributes["data-api-url"] = api_url
        return WidgetElement.from_attributes(attributes)

    return _make
