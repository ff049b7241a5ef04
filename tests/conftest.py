"""Fixtures compartidos por los tests unitarios y de integración."""

from decimal import Decimal

import pytest
import pytest_asyncio

from niche_bundler.db.bundle_repository import BundleRepository
from niche_bundler.db.connection import ConnDB, set_db_connection
from niche_bundler.domain.models.bundle import BundleDomain, BundleLineItemDomain
from niche_bundler.domain.value_objects import DiscountSpec, DiscountType

MEMORY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
SHOP = "example.myshopify.com"


@pytest.fixture
def bundle_payload():
    """Payload de creación válido (escenario A: 10×2 + 5×1, 20%)."""
    return {
        "title": "Protein Starter Pack",
        "handle": "protein-starter-pack",
        "products": [
            {
                "product_id": "1001",
                "variant_id": "2001",
                "title": "Whey Protein",
                "price": 10,
                "quantity": 2,
                "image": "https://cdn.example.com/whey.png",
            },
            {"product_id": "1002", "title": "Shaker Bottle", "price": 5, "quantity": 1},
        ],
        "discount_type": "percentage",
        "discount_value": 20,
        "shop_domain": SHOP,
    }


@pytest.fixture
def sample_bundle():
    """Bundle de dominio equivalente a ``bundle_payload``."""
    return BundleDomain(
        id=1,
        title="Protein Starter Pack",
        handle="protein-starter-pack",
        products=[
            BundleLineItemDomain(
                product_id="1001",
                variant_id="2001",
                title="Whey Protein",
                price=Decimal("10"),
                quantity=2,
                image="https://cdn.example.com/whey.png",
            ),
            BundleLineItemDomain(product_id="1002", title="Shaker Bottle", price=Decimal("5"), quantity=1),
        ],
        discount=DiscountSpec(type=DiscountType.PERCENTAGE, value=Decimal("20")),
        shop_domain=SHOP,
    )


@pytest_asyncio.fixture
async def memory_db():
    """Conexión SQLite en memoria con tablas creadas, instalada como conexión global."""
    conn_db = ConnDB(database_url=MEMORY_DATABASE_URL, echo=False)
    await conn_db.initialize(create_tables=True)
    set_db_connection(conn_db)
    yield conn_db
    await conn_db.close()
    set_db_connection(None)


@pytest_asyncio.fixture
async def repository(memory_db):
    return BundleRepository(memory_db)
