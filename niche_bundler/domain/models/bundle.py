"""
Bundle domain model (Aggregate Root).

Represents a merchant-defined bundle: an ordered list of line items sold
together with one discount, owned by exactly one shop.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from niche_bundler.domain.value_objects.discount import DiscountSpec


@dataclass(frozen=True)
class BundleLineItemDomain:
    """
    One product/variant entry inside a bundle.

    Line items have no identity of their own; they are embedded in their
    bundle and keep insertion order (render order only, not price).

    Attributes:
        product_id: Shopify product ID
        title: Product title shown in the widget
        price: Unit price (non-negative)
        quantity: Units of this product in the bundle (at least 1)
        variant_id: Shopify variant ID, preferred over product_id for the cart
        image: Optional image URL
    """

    product_id: str
    title: str
    price: Decimal
    quantity: int = 1
    variant_id: str | None = None
    image: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.price, Decimal):
            object.__setattr__(self, "price", Decimal(str(self.price)))

        if not self.product_id:
            raise ValueError("Line item requires a product_id")

        if not self.price.is_finite() or self.price < 0:
            raise ValueError(f"Line item price cannot be negative: {self.price}")

        if self.quantity < 1:
            raise ValueError(f"Line item quantity must be at least 1: {self.quantity}")

    @property
    def cart_id(self) -> str:
        """ID sent to the cart: the variant when present, otherwise the product."""
        return self.variant_id or self.product_id

    def to_cart_item(self) -> dict[str, Any]:
        return {"id": self.cart_id, "quantity": self.quantity or 1}

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "title": self.title,
            "price": float(self.price),
            "image": self.image,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BundleLineItemDomain":
        return cls(
            product_id=str(data["product_id"]),
            variant_id=str(data["variant_id"]) if data.get("variant_id") else None,
            title=data.get("title") or "",
            price=Decimal(str(data.get("price", 0))),
            image=data.get("image") or None,
            quantity=int(data.get("quantity") or 1),
        )


@dataclass
class BundleDomain:
    """
    Domain model representing a bundle (Aggregate Root).

    Attributes:
        title: Bundle title
        handle: URL-safe slug, unique per shop
        products: Non-empty ordered line items
        discount: Discount applied to the bundle total
        shop_domain: Owning shop (e.g. "example.myshopify.com")
        active: Inactive bundles are hidden from the storefront
        id: Bundle ID (None until persisted)
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    title: str
    handle: str
    products: list[BundleLineItemDomain]
    discount: DiscountSpec
    shop_domain: str
    active: bool = True
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.products:
            raise ValueError("A bundle must contain at least one product")

        if not self.handle:
            raise ValueError("A bundle requires a handle")

    @property
    def items_count(self) -> int:
        return len(self.products)

    def cart_items(self) -> list[dict[str, Any]]:
        """One cart entry per line item, in bundle order."""
        return [product.to_cart_item() for product in self.products]

    def deactivate(self) -> None:
        self.active = False

    def to_dict(self) -> dict[str, Any]:
        """Flat representation used on the wire."""
        return {
            "id": self.id,
            "title": self.title,
            "handle": self.handle,
            "products": [product.to_dict() for product in self.products],
            **self.discount.to_dict(),
            "active": self.active,
            "shop_domain": self.shop_domain,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BundleDomain":
        """Build from the flat wire representation."""
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            handle=data["handle"],
            products=[BundleLineItemDomain.from_dict(item) for item in data.get("products") or []],
            discount=DiscountSpec(type=data["discount_type"], value=Decimal(str(data["discount_value"]))),
            shop_domain=data.get("shop_domain") or "",
            active=bool(data.get("active", True)),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
