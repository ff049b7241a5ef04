"""Tests unitarios para la máquina de estados del widget."""

import pytest

from niche_bundler.domain.value_objects import PriceResult
from niche_bundler.widget.settings import WidgetSettings
from niche_bundler.widget.states import (
    InvalidTransitionError,
    WidgetEvent,
    WidgetPhase,
    WidgetState,
    transition,
)

PRICE = PriceResult.from_dict({"original_price": "25.00", "discount_amount": "5.00", "final_price": "20.00"})


@pytest.fixture
def ready_state(sample_bundle):
    state = transition(WidgetState.initial(), WidgetEvent.START)
    return transition(state, WidgetEvent.LOADED, bundle=sample_bundle, price=PRICE)


class TestTransitions:
    def test_initial_state(self):
        state = WidgetState.initial()

        assert state.phase == WidgetPhase.IDLE
        assert state.button_label == "Add Bundle to Cart"
        assert state.button_enabled is False

    def test_missing_configuration_goes_to_error(self):
        state = transition(WidgetState.initial(), WidgetEvent.CONFIG_MISSING, error="missing handle")

        assert state.phase == WidgetPhase.ERROR
        assert state.is_terminal
        assert state.error == "missing handle"

    def test_loaded_keeps_bundle_and_price(self, ready_state, sample_bundle):
        assert ready_state.phase == WidgetPhase.READY
        assert ready_state.bundle == sample_bundle
        assert ready_state.price == PRICE
        assert ready_state.button_enabled is True

    def test_loaded_requires_bundle_and_price(self):
        loading = transition(WidgetState.initial(), WidgetEvent.START)
        with pytest.raises(ValueError):
            transition(loading, WidgetEvent.LOADED)

    def test_add_flow_labels(self, ready_state):
        adding = transition(ready_state, WidgetEvent.ADD_TO_CART)
        assert (adding.button_label, adding.button_enabled) == ("Adding...", False)

        added = transition(adding, WidgetEvent.ADD_SUCCEEDED)
        assert (added.button_label, added.button_enabled) == ("Added to Cart!", False)
        assert added.is_terminal

    def test_add_error_reenables_button_then_reverts(self, ready_state):
        failed = transition(transition(ready_state, WidgetEvent.ADD_TO_CART), WidgetEvent.ADD_FAILED)
        assert (failed.button_label, failed.button_enabled) == ("Error - Try Again", True)
        assert failed.bundle is not None

        reverted = transition(failed, WidgetEvent.REVERT)
        assert reverted.phase == WidgetPhase.READY
        assert reverted.button_label == "Add Bundle to Cart"

    def test_retry_from_add_error(self, ready_state):
        failed = transition(transition(ready_state, WidgetEvent.ADD_TO_CART), WidgetEvent.ADD_FAILED)
        assert transition(failed, WidgetEvent.ADD_TO_CART).phase == WidgetPhase.ADDING

    def test_custom_labels(self, sample_bundle):
        settings = WidgetSettings(add_label="Comprar pack")
        state = transition(WidgetState.initial(settings), WidgetEvent.START, settings=settings)
        state = transition(state, WidgetEvent.LOADED, bundle=sample_bundle, price=PRICE, settings=settings)
        assert state.button_label == "Comprar pack"


class TestInvalidTransitions:
    @pytest.mark.parametrize(
        "event",
        [WidgetEvent.LOADED, WidgetEvent.ADD_TO_CART, WidgetEvent.ADD_SUCCEEDED, WidgetEvent.REVERT],
    )
    def test_illegal_events_from_idle(self, event):
        with pytest.raises(InvalidTransitionError):
            transition(WidgetState.initial(), event)

    def test_no_click_while_adding(self, ready_state):
        adding = transition(ready_state, WidgetEvent.ADD_TO_CART)

        assert not adding.can(WidgetEvent.ADD_TO_CART)
        with pytest.raises(InvalidTransitionError) as exc_info:
            transition(adding, WidgetEvent.ADD_TO_CART)
        assert exc_info.value.phase == WidgetPhase.ADDING

    def test_error_is_terminal(self):
        error = transition(WidgetState.initial(), WidgetEvent.CONFIG_MISSING)
        for event in WidgetEvent:
            assert not error.can(event)
