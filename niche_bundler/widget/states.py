"""
Bundle widget state machine.

A widget moves through these phases::

    Idle -> Loading -> Ready | Error
    Ready -> Adding -> Added | AddError
    AddError -> Ready (after the revert delay) | Adding (retry)

``Error`` and ``Added`` are terminal. ``WidgetState`` is an immutable value
and ``transition`` is a pure function over the table below; side effects
(network, timers, rendering) live in the controller.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from niche_bundler.domain.models.bundle import BundleDomain
from niche_bundler.domain.value_objects import PriceResult
from niche_bundler.widget.settings import WidgetSettings


class WidgetPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ADDING = "adding"
    ADDED = "added"
    ADD_ERROR = "add_error"
    ERROR = "error"


class WidgetEvent(str, Enum):
    START = "start"
    CONFIG_MISSING = "config_missing"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"
    ADD_TO_CART = "add_to_cart"
    ADD_SUCCEEDED = "add_succeeded"
    ADD_FAILED = "add_failed"
    REVERT = "revert"


TRANSITIONS: Dict[Tuple[WidgetPhase, WidgetEvent], WidgetPhase] = {
    (WidgetPhase.IDLE, WidgetEvent.START): WidgetPhase.LOADING,
    (WidgetPhase.IDLE, WidgetEvent.CONFIG_MISSING): WidgetPhase.ERROR,
    (WidgetPhase.LOADING, WidgetEvent.LOADED): WidgetPhase.READY,
    (WidgetPhase.LOADING, WidgetEvent.LOAD_FAILED): WidgetPhase.ERROR,
    (WidgetPhase.READY, WidgetEvent.ADD_TO_CART): WidgetPhase.ADDING,
    (WidgetPhase.ADDING, WidgetEvent.ADD_SUCCEEDED): WidgetPhase.ADDED,
    (WidgetPhase.ADDING, WidgetEvent.ADD_FAILED): WidgetPhase.ADD_ERROR,
    (WidgetPhase.ADD_ERROR, WidgetEvent.REVERT): WidgetPhase.READY,
    # The button is re-enabled as soon as an add fails
    (WidgetPhase.ADD_ERROR, WidgetEvent.ADD_TO_CART): WidgetPhase.ADDING,
}

TERMINAL_PHASES = frozenset({WidgetPhase.ERROR, WidgetPhase.ADDED})


class InvalidTransitionError(Exception):
    """Raised when an event is not allowed in the current phase."""

    def __init__(self, phase: WidgetPhase, event: WidgetEvent):
        super().__init__(f"Event '{event.value}' is not allowed in phase '{phase.value}'")
        self.phase = phase
        self.event = event


@dataclass(frozen=True)
class WidgetState:
    """
    Snapshot of one widget.

    ``bundle`` and ``price`` are set once loading succeeds and kept for the
    rest of the widget's life. ``error`` holds the internal failure reason
    for logs; it is never rendered.
    """

    phase: WidgetPhase = WidgetPhase.IDLE
    bundle: Optional[BundleDomain] = None
    price: Optional[PriceResult] = None
    button_label: str = ""
    button_enabled: bool = False
    error: Optional[str] = None

    @classmethod
    def initial(cls, settings: Optional[WidgetSettings] = None) -> "WidgetState":
        settings = settings or WidgetSettings()
        return cls(button_label=settings.add_label)

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def can(self, event: WidgetEvent) -> bool:
        return (self.phase, event) in TRANSITIONS


def _button_for(phase: WidgetPhase, settings: WidgetSettings) -> Tuple[str, bool]:
    if phase == WidgetPhase.READY:
        return settings.add_label, True
    if phase == WidgetPhase.ADDING:
        return settings.adding_label, False
    if phase == WidgetPhase.ADDED:
        return settings.added_label, False
    if phase == WidgetPhase.ADD_ERROR:
        return settings.add_error_label, True
    return settings.add_label, False


def transition(
    state: WidgetState,
    event: WidgetEvent,
    *,
    bundle: Optional[BundleDomain] = None,
    price: Optional[PriceResult] = None,
    error: Optional[str] = None,
    settings: Optional[WidgetSettings] = None,
) -> WidgetState:
    """
    Apply ``event`` to ``state`` and return the next state.

    Args:
        state: Current state
        event: Event to apply
        bundle: Loaded bundle (required with ``LOADED``)
        price: Server-computed price (required with ``LOADED``)
        error: Failure reason for ``CONFIG_MISSING``, ``LOAD_FAILED`` and ``ADD_FAILED``
        settings: Labels used for the button

    Raises:
        InvalidTransitionError: If the event is not allowed in the current phase
        ValueError: If ``LOADED`` arrives without bundle and price
    """
    next_phase = TRANSITIONS.get((state.phase, event))
    if next_phase is None:
        raise InvalidTransitionError(state.phase, event)

    settings = settings or WidgetSettings()
    label, enabled = _button_for(next_phase, settings)
    changes = {"phase": next_phase, "button_label": label, "button_enabled": enabled, "error": error}

    if event == WidgetEvent.LOADED:
        if bundle is None or price is None:
            raise ValueError("LOADED requires both bundle and price")
        changes.update(bundle=bundle, price=price)

    return replace(state, **changes)
