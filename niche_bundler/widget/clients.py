"""
HTTP clients used by the storefront widget.

``BundleApiClient`` talks to the Niche Bundler API (bundle lookup and
pricing); ``CartClient`` talks to the storefront cart. Both share an
``httpx.AsyncClient`` supplied by the caller and raise application
exceptions instead of returning partial data.
"""

import json
import logging
from typing import Any, Dict, List
from urllib.parse import quote

import httpx

from niche_bundler.domain.models.bundle import BundleDomain
from niche_bundler.domain.value_objects import PriceResult
from niche_bundler.utils.error_handler import BundleNotFoundException, StorefrontTransportException
from niche_bundler.widget.settings import WidgetSettings

logger = logging.getLogger(__name__)


async def _send(http: httpx.AsyncClient, method: str, url: str, timeout: float, **kwargs) -> httpx.Response:
    try:
        return await http.request(method, url, timeout=timeout, **kwargs)
    except httpx.TimeoutException as e:
        raise StorefrontTransportException(f"Request timed out after {timeout}s", url=url) from e
    except httpx.HTTPError as e:
        raise StorefrontTransportException(f"Request failed: {str(e)}", url=url) from e


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StorefrontTransportException(
            "Response is not valid JSON", url=str(response.request.url), response_code=response.status_code
        ) from e


class BundleApiClient:
    """Client for the public bundle endpoints."""

    def __init__(self, api_url: str, http: httpx.AsyncClient, timeout: float = 10.0):
        """
        Args:
            api_url: API base URL from the widget's ``data-api-url`` (e.g. ``https://app.example.com/api``)
            http: Shared async HTTP client
            timeout: Per-request timeout in seconds
        """
        self.api_url = api_url.rstrip("/")
        self.http = http
        self.timeout = timeout

    async def fetch_bundle(self, handle: str) -> BundleDomain:
        """
        Fetch the active bundle published under ``handle``.

        Raises:
            BundleNotFoundException: If the API answers 404
            StorefrontTransportException: On network errors, other non-success
                statuses or an unreadable payload
        """
        url = f"{self.api_url}/bundles/handle/{quote(handle, safe='')}"
        response = await _send(self.http, "GET", url, self.timeout)

        if response.status_code == 404:
            raise BundleNotFoundException(handle=handle)
        if not response.is_success:
            raise StorefrontTransportException(
                f"Bundle lookup failed with status {response.status_code}",
                url=url,
                response_code=response.status_code,
            )

        data = _json(response)
        try:
            return BundleDomain.from_dict(data["bundle"])
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise StorefrontTransportException(f"Invalid bundle payload: {e}", url=url) from e

    async def calculate_price(self, bundle: BundleDomain) -> PriceResult:
        """
        Ask the API for the bundle's price breakdown.

        Raises:
            StorefrontTransportException: On network errors, non-success statuses
                or an unreadable payload
        """
        url = f"{self.api_url}/bundle-price"
        body = {
            "products": [product.to_dict() for product in bundle.products],
            **bundle.discount.to_dict(),
        }
        response = await _send(self.http, "POST", url, self.timeout, json=body)

        if not response.is_success:
            raise StorefrontTransportException(
                f"Price calculation failed with status {response.status_code}",
                url=url,
                response_code=response.status_code,
            )

        data = _json(response)
        try:
            return PriceResult.from_dict(data)
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise StorefrontTransportException(f"Invalid price payload: {e}", url=url) from e


class CartClient:
    """Client for the storefront cart (``/cart/add.js``)."""

    def __init__(self, http: httpx.AsyncClient, settings: WidgetSettings):
        self.http = http
        self.settings = settings

    async def add_items(self, items: List[Dict[str, Any]]) -> None:
        """
        Add ``items`` (``{"id", "quantity"}`` entries) to the cart in one request.

        Raises:
            StorefrontTransportException: On network errors or non-success statuses
        """
        url = self.settings.cart_add_path
        response = await _send(self.http, "POST", url, self.settings.request_timeout, json={"items": items})

        if not response.is_success:
            raise StorefrontTransportException(
                f"Cart add failed with status {response.status_code}",
                url=url,
                response_code=response.status_code,
            )

        logger.debug(f"Cart add ok: {len(items)} items")
