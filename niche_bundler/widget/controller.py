"""
Bundle widget controller.

Drives one widget through its state machine: loads the bundle and its
server-computed price, renders it, and handles add-to-cart clicks with the
delayed navigation / error revert. Every outcome goes through
``transition``; view calls are skipped once the view is detached.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import httpx

from niche_bundler.utils.error_handler import (
    AppException,
    BundleNotFoundException,
    StorefrontTransportException,
    WidgetConfigurationException,
)
from niche_bundler.widget.clients import BundleApiClient, CartClient
from niche_bundler.widget.element import WidgetElement
from niche_bundler.widget.settings import WidgetSettings
from niche_bundler.widget.states import WidgetEvent, WidgetPhase, WidgetState, transition
from niche_bundler.widget.view import WidgetView

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class BundleWidgetController:
    """
    One storefront widget.

    Operations on a single controller are sequential; controllers share
    nothing except the HTTP client.
    """

    def __init__(
        self,
        element: WidgetElement,
        view: WidgetView,
        http: httpx.AsyncClient,
        settings: Optional[WidgetSettings] = None,
        sleep: Optional[Sleep] = None,
    ):
        """
        Args:
            element: Placeholder carrying ``data-bundle-handle`` and ``data-api-url``
            view: Rendering surface
            http: Shared async HTTP client (its base URL is the storefront origin)
            settings: Labels, delays and cart paths
            sleep: Delay function, ``asyncio.sleep`` by default
        """
        self.element = element
        self.view = view
        self.settings = settings or WidgetSettings.from_app_settings()
        self.sleep: Sleep = sleep or asyncio.sleep

        self.api: Optional[BundleApiClient] = (
            BundleApiClient(element.api_url, http, timeout=self.settings.request_timeout) if element.api_url else None
        )
        self.cart = CartClient(http, self.settings)

        self.state = WidgetState.initial(self.settings)
        self.history: List[WidgetPhase] = [self.state.phase]

    @property
    def phase(self) -> WidgetPhase:
        return self.state.phase

    def _apply(self, event: WidgetEvent, **kwargs) -> WidgetState:
        self.state = transition(self.state, event, settings=self.settings, **kwargs)
        self.history.append(self.state.phase)
        logger.debug(f"Widget '{self.element.bundle_handle}': {event.value} -> {self.state.phase.value}")
        return self.state

    def _render(self, draw: Callable[[WidgetView], None]) -> None:
        if not self.view.is_attached:
            logger.debug(f"Widget '{self.element.bundle_handle}' detached, skipping render")
            return
        draw(self.view)

    def _render_button(self) -> None:
        self._render(lambda view: view.set_button(self.state.button_label, self.state.button_enabled))

    async def start(self) -> WidgetState:
        """
        Load the bundle and its price, then render it.

        A widget without handle or API URL goes straight to ``Error`` without
        any network call. Any load failure ends in ``Error``. Only an ``Idle``
        widget starts; later calls return the current state.
        """
        if not self.state.can(WidgetEvent.START):
            logger.debug(f"Start ignored in phase {self.state.phase.value}")
            return self.state

        missing = self.element.missing_attributes()
        if missing:
            error = WidgetConfigurationException(missing_attributes=missing)
            logger.warning(f"⚠️ {error.message}")
            self._apply(WidgetEvent.CONFIG_MISSING, error=error.message)
            self._render(lambda view: view.show_error())
            return self.state

        handle = self.element.bundle_handle
        self._apply(WidgetEvent.START)
        self._render(lambda view: view.show_loading())

        try:
            bundle = await self.api.fetch_bundle(handle)
            price = await self.api.calculate_price(bundle)
        except (BundleNotFoundException, StorefrontTransportException) as e:
            logger.warning(f"❌ Bundle widget '{handle}' failed to load: {e}")
            self._apply(WidgetEvent.LOAD_FAILED, error=str(e))
            self._render(lambda view: view.show_error())
            return self.state

        self._apply(WidgetEvent.LOADED, bundle=bundle, price=price)
        self._render(lambda view: view.show_content(bundle, price, self.settings.currency_symbol))
        self._render_button()
        logger.info(f"✅ Bundle widget '{handle}' ready: final {price.final_price.to_fixed()}")
        return self.state

    async def add_to_cart(self) -> WidgetState:
        """
        Handle an add-to-cart click.

        Clicks are ignored unless the button is enabled (``Ready`` or
        ``AddError``). On success the page navigates to the cart after
        ``navigate_delay``; on failure the label reverts after
        ``error_revert_delay`` unless another click happened meanwhile.
        Returns once the delayed follow-up has run.
        """
        if not self.state.can(WidgetEvent.ADD_TO_CART):
            logger.debug(f"Add to cart ignored in phase {self.state.phase.value}")
            return self.state

        self._apply(WidgetEvent.ADD_TO_CART)
        self._render_button()

        try:
            await self.cart.add_items(self.state.bundle.cart_items())
        except AppException as e:
            logger.warning(f"⚠️ Add to cart failed for '{self.element.bundle_handle}': {e}")
            self._apply(WidgetEvent.ADD_FAILED, error=str(e))
            self._render_button()

            await self.sleep(self.settings.error_revert_delay)
            if self.state.phase == WidgetPhase.ADD_ERROR:
                self._apply(WidgetEvent.REVERT)
                self._render_button()
            return self.state

        self._apply(WidgetEvent.ADD_SUCCEEDED)
        self._render_button()

        await self.sleep(self.settings.navigate_delay)
        self._render(lambda view: view.navigate(self.settings.cart_page_path))
        return self.state
