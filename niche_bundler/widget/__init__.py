"""
Storefront bundle widget.

Each ``niche-bundle-widget`` placeholder on a page gets its own
``BundleWidgetController``, started by ``bootstrap_widgets``.
"""

from .bootstrap import bootstrap_widgets, find_widget_elements
from .controller import BundleWidgetController
from .element import WidgetElement
from .settings import WidgetSettings
from .states import InvalidTransitionError, WidgetEvent, WidgetPhase, WidgetState, transition
from .view import HtmlWidgetView, WidgetView

__all__ = [
    "BundleWidgetController",
    "HtmlWidgetView",
    "InvalidTransitionError",
    "WidgetElement",
    "WidgetEvent",
    "WidgetPhase",
    "WidgetSettings",
    "WidgetState",
    "WidgetView",
    "bootstrap_widgets",
    "find_widget_elements",
    "transition",
]
