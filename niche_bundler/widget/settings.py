"""
Storefront widget settings.

Labels, delays and cart endpoints used by ``BundleWidgetController``.
Defaults match the storefront theme; currency follows the API settings.
"""

from pydantic import BaseModel, Field

from niche_bundler.core.config import get_settings


class WidgetSettings(BaseModel):
    """Per-widget presentation and timing settings."""

    currency_symbol: str = Field(default="$")

    add_label: str = Field(default="Add Bundle to Cart")
    adding_label: str = Field(default="Adding...")
    added_label: str = Field(default="Added to Cart!")
    add_error_label: str = Field(default="Error - Try Again")

    # Seconds between "Added" and navigating to the cart page
    navigate_delay: float = Field(default=0.5, ge=0)
    # Seconds before an add-to-cart error label reverts
    error_revert_delay: float = Field(default=2.0, ge=0)

    cart_add_path: str = Field(default="/cart/add.js")
    cart_page_path: str = Field(default="/cart")
    request_timeout: float = Field(default=10.0, gt=0)

    model_config = {"frozen": True}

    @classmethod
    def from_app_settings(cls) -> "WidgetSettings":
        """Widget settings using the configured currency symbol."""
        return cls(currency_symbol=get_settings().CURRENCY_SYMBOL)
