"""
Widget bootstrap.

Discovery (``find_widget_elements``) and start-up (``bootstrap_widgets``)
are separate steps: the caller decides which elements to hand over.
"""

import asyncio
import logging
from typing import Callable, Iterable, List, Optional

import httpx

from niche_bundler.widget.controller import BundleWidgetController, Sleep
from niche_bundler.widget.element import WidgetElement
from niche_bundler.widget.settings import WidgetSettings
from niche_bundler.widget.states import WidgetPhase
from niche_bundler.widget.view import HtmlWidgetView, WidgetView

logger = logging.getLogger(__name__)


def find_widget_elements(elements: Iterable[WidgetElement]) -> List[WidgetElement]:
    """Elements carrying the ``niche-bundle-widget`` class, in page order."""
    return [element for element in elements if element.is_widget]


async def bootstrap_widgets(
    elements: Iterable[WidgetElement],
    http: httpx.AsyncClient,
    view_factory: Callable[[WidgetElement], WidgetView] = lambda element: HtmlWidgetView(),
    settings: Optional[WidgetSettings] = None,
    sleep: Optional[Sleep] = None,
) -> List[BundleWidgetController]:
    """
    Build one controller per element and start them concurrently.

    A widget that fails unexpectedly does not stop the others; the failure
    is logged and its controller is still returned.

    Returns:
        Controllers in the order of ``elements``
    """
    settings = settings or WidgetSettings.from_app_settings()
    controllers = [
        BundleWidgetController(element, view_factory(element), http, settings=settings, sleep=sleep)
        for element in elements
    ]

    results = await asyncio.gather(*(controller.start() for controller in controllers), return_exceptions=True)
    for controller, result in zip(controllers, results):
        if isinstance(result, Exception):
            logger.error(f"❌ Widget '{controller.element.bundle_handle}' crashed during start: {result}")

    ready = sum(1 for controller in controllers if controller.phase == WidgetPhase.READY)
    logger.info(f"🧩 Bootstrapped {len(controllers)} bundle widgets ({ready} ready)")
    return controllers
