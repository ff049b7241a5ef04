"""
Widget placeholder elements.

A theme places ``<div class="niche-bundle-widget" data-bundle-handle="..."
data-api-url="...">`` on a page; ``WidgetElement`` is the part of that tag
the widget needs.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional

WIDGET_CLASS = "niche-bundle-widget"
HANDLE_ATTRIBUTE = "data-bundle-handle"
API_URL_ATTRIBUTE = "data-api-url"


@dataclass(frozen=True)
class WidgetElement:
    """CSS classes and attributes of one widget placeholder."""

    attributes: Mapping[str, str] = field(default_factory=dict)
    classes: FrozenSet[str] = frozenset({WIDGET_CLASS})

    @classmethod
    def from_attributes(cls, attributes: Dict[str, Optional[str]]) -> "WidgetElement":
        """Build from raw tag attributes; ``class`` is split on whitespace."""
        classes = frozenset((attributes.get("class") or "").split())
        values = {key: value for key, value in attributes.items() if key != "class" and value is not None}
        return cls(attributes=values, classes=classes)

    @property
    def bundle_handle(self) -> Optional[str]:
        return self.attributes.get(HANDLE_ATTRIBUTE) or None

    @property
    def api_url(self) -> Optional[str]:
        return self.attributes.get(API_URL_ATTRIBUTE) or None

    @property
    def is_widget(self) -> bool:
        return WIDGET_CLASS in self.classes

    def missing_attributes(self) -> List[str]:
        missing = []
        if not self.bundle_handle:
            missing.append(HANDLE_ATTRIBUTE)
        if not self.api_url:
            missing.append(API_URL_ATTRIBUTE)
        return missing
