"""
Widget rendering.

``WidgetView`` is what the controller draws on. ``HtmlWidgetView`` keeps an
in-memory model of the widget markup (three panels, product rows, price
texts and the add-to-cart button) and serializes it to escaped HTML.
"""

import html
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from niche_bundler.domain.models.bundle import BundleDomain
from niche_bundler.domain.value_objects import PriceResult
from niche_bundler.domain.value_objects.money import CENTS


class WidgetView(ABC):
    """Rendering surface for one widget."""

    @property
    @abstractmethod
    def is_attached(self) -> bool:
        """False once the widget has been removed from the page."""

    @abstractmethod
    def show_loading(self) -> None: ...

    @abstractmethod
    def show_content(self, bundle: BundleDomain, price: PriceResult, currency_symbol: str) -> None: ...

    @abstractmethod
    def show_error(self) -> None: ...

    @abstractmethod
    def set_button(self, label: str, enabled: bool) -> None: ...

    @abstractmethod
    def navigate(self, path: str) -> None: ...


@dataclass
class ProductRow:
    title: str
    price_text: str
    image: Optional[str] = None


def format_unit_price(price: Decimal, currency_symbol: str) -> str:
    return f"{currency_symbol}{price.quantize(CENTS, rounding=ROUND_HALF_UP):.2f}"


class HtmlWidgetView(WidgetView):
    """In-memory widget markup."""

    def __init__(self):
        self.loading_visible = True
        self.content_visible = False
        self.error_visible = False

        self.title = ""
        self.rows: List[ProductRow] = []
        self.original_price_text = ""
        self.discount_amount_text = ""
        self.final_price_text = ""

        self.button_label = ""
        self.button_enabled = False

        self.location: Optional[str] = None
        self._attached = True

    @property
    def is_attached(self) -> bool:
        return self._attached

    def detach(self) -> None:
        self._attached = False

    def show_loading(self) -> None:
        self.loading_visible = True
        self.content_visible = False
        self.error_visible = False

    def show_content(self, bundle: BundleDomain, price: PriceResult, currency_symbol: str) -> None:
        self.loading_visible = False
        self.content_visible = True
        self.error_visible = False

        self.title = bundle.title
        self.rows = [
            ProductRow(
                title=product.title,
                price_text=format_unit_price(product.price, currency_symbol),
                image=product.image,
            )
            for product in bundle.products
        ]
        self.original_price_text = price.original_price.display(currency_symbol)
        self.discount_amount_text = price.discount_amount.display(currency_symbol)
        self.final_price_text = price.final_price.display(currency_symbol)

    def show_error(self) -> None:
        self.loading_visible = False
        self.content_visible = False
        self.error_visible = True

    def set_button(self, label: str, enabled: bool) -> None:
        self.button_label = label
        self.button_enabled = enabled

    def navigate(self, path: str) -> None:
        self.location = path

    def to_html(self) -> str:
        """Serialize the current markup. All text and attribute values are escaped."""
        esc = html.escape

        def display(visible: bool) -> str:
            return "block" if visible else "none"

        rows = []
        for row in self.rows:
            image = (
                f'<img src="{esc(row.image)}" alt="{esc(row.title)}" class="bundle-product-image">' if row.image else ""
            )
            rows.append(
                '<div class="bundle-product-item">'
                f"{image}"
                '<div class="bundle-product-details">'
                f'<h3 class="bundle-product-title">{esc(row.title)}</h3>'
                f'<p class="bundle-product-price">{esc(row.price_text)}</p>'
                "</div></div>"
            )

        disabled = "" if self.button_enabled else " disabled"
        return (
            f'<div class="bundle-loading" style="display: {display(self.loading_visible)}"></div>'
            f'<div class="bundle-content" style="display: {display(self.content_visible)}">'
            f'<h2 class="bundle-title">{esc(self.title)}</h2>'
            f'<div class="bundle-products">{"".join(rows)}</div>'
            f"<span data-original-price>{esc(self.original_price_text)}</span>"
            f"<span data-discount-amount>{esc(self.discount_amount_text)}</span>"
            f"<span data-final-price>{esc(self.final_price_text)}</span>"
            f'<button class="bundle-add-to-cart"{disabled}>{esc(self.button_label)}</button>'
            "</div>"
            f'<div class="bundle-error" style="display: {display(self.error_visible)}"></div>'
        )
