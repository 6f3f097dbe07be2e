"""Step state machine for the booking wizard.

:func:`transition` is a pure function from ``(WizardState, event)`` to a new
:class:`WizardState`; it never mutates its input. :class:`StepController`
owns the current state, applies events through :func:`transition`, bumps a
monotonically increasing ``version`` and logs step changes.

Forward transitions check their prerequisites and raise
:class:`BookingValidationError` when they are missing. Backward navigation
never clears anything, so going forward again reuses earlier input.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, replace
from typing import List, Optional, Union

from ...core.enums import DisplayState, WizardStep
from ...core.exceptions import BookingValidationError
from ...core.models.booking import Booking, RentalPeriod, WizardState
from ...core.models.catalog import Bike, BikeFilters, Location, Partner
from ...utils.event_log import log_event
from ...utils.logging import get_logger

logger = get_logger("cyclelk.wizard")

REDIRECT_COUNTDOWN_SECONDS = 5


# ── Events ─────────────────────────────────────────────────

@dataclass(frozen=True)
class LocationsSelected:
    pickup: Location
    dropoff: Location


@dataclass(frozen=True)
class FiltersChanged:
    filters: BikeFilters


@dataclass(frozen=True)
class BikesLoaded:
    token: int
    location_id: str
    bikes: List[Bike]


@dataclass(frozen=True)
class BikesLoadFailed:
    token: int
    message: str


@dataclass(frozen=True)
class BikeSelected:
    bike: Optional[Bike]


@dataclass(frozen=True)
class RentalPeriodSelected:
    period: RentalPeriod


@dataclass(frozen=True)
class PickupPartnerResolved:
    partner: Optional[Partner]


@dataclass(frozen=True)
class DropoffPartnerResolved:
    partner: Partner


@dataclass(frozen=True)
class DropoffPartnerFailed:
    message: str


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class ChooseDifferentLocation:
    pass


@dataclass(frozen=True)
class ValidationFailed:
    message: str


@dataclass(frozen=True)
class SubmissionStarted:
    pass


@dataclass(frozen=True)
class BookingSucceeded:
    booking: Booking
    countdown: int = REDIRECT_COUNTDOWN_SECONDS


@dataclass(frozen=True)
class BookingFailed:
    message: str


@dataclass(frozen=True)
class CountdownTicked:
    pass


@dataclass(frozen=True)
class ErrorDismissed:
    pass


WizardEvent = Union[
    LocationsSelected,
    FiltersChanged,
    BikesLoaded,
    BikesLoadFailed,
    BikeSelected,
    RentalPeriodSelected,
    PickupPartnerResolved,
    DropoffPartnerResolved,
    DropoffPartnerFailed,
    Back,
    ChooseDifferentLocation,
    ValidationFailed,
    SubmissionStarted,
    BookingSucceeded,
    BookingFailed,
    CountdownTicked,
    ErrorDismissed,
]


# ── Transition function ────────────────────────────────────

def _require_step(state: WizardState, step: WizardStep, action: str) -> None:
    if state.booking is not None:
        raise BookingValidationError(f"Cannot {action}: the booking is already complete")
    if state.current_step != step:
        raise BookingValidationError(
            f"Cannot {action} on step {int(state.current_step)} "
            f"({state.current_step.title}); expected step {int(step)}"
        )


def is_stale(state: WizardState, event: WizardEvent) -> bool:
    """True when an async result no longer matches the request that is current."""
    if isinstance(event, BikesLoaded):
        return (
            event.token != state.bikes_request_token
            or state.pickup_location is None
            or event.location_id != state.pickup_location.id
        )
    if isinstance(event, BikesLoadFailed):
        return event.token != state.bikes_request_token
    return False


def transition(state: WizardState, event: WizardEvent) -> WizardState:
    """Return the state that results from applying ``event`` to ``state``."""

    if isinstance(event, LocationsSelected):
        _require_step(state, WizardStep.SELECT_LOCATIONS, "select locations")
        if event.pickup is None or event.dropoff is None:
            raise BookingValidationError("Both pickup and drop-off locations are required")
        return replace(
            state,
            pickup_location=event.pickup,
            dropoff_location=event.dropoff,
            current_step=WizardStep.SELECT_BIKE,
            available_bikes=None,
            bikes_loading=True,
            bikes_request_token=state.bikes_request_token + 1,
            error=None,
        )

    if isinstance(event, FiltersChanged):
        _require_step(state, WizardStep.SELECT_BIKE, "filter bikes")
        return replace(
            state,
            bike_filters=event.filters,
            bikes_loading=True,
            bikes_request_token=state.bikes_request_token + 1,
            error=None,
        )

    if isinstance(event, BikesLoaded):
        if is_stale(state, event):
            return state
        return replace(state, available_bikes=list(event.bikes), bikes_loading=False)

    if isinstance(event, BikesLoadFailed):
        if is_stale(state, event):
            return state
        return replace(state, bikes_loading=False, error=event.message)

    if isinstance(event, BikeSelected):
        _require_step(state, WizardStep.SELECT_BIKE, "select a bike")
        if event.bike is None:
            raise BookingValidationError("Please select a bike to continue")
        return replace(
            state,
            selected_bike=event.bike,
            current_step=WizardStep.SET_RENTAL_PERIOD,
            error=None,
        )

    if isinstance(event, RentalPeriodSelected):
        _require_step(state, WizardStep.SET_RENTAL_PERIOD, "set the rental period")
        if state.selected_bike is None:
            raise BookingValidationError("Please select a bike before choosing dates")
        period = event.period
        if not period.start_date or not period.end_date:
            raise BookingValidationError("Please select both start and end dates")
        return replace(
            state,
            start_date=period.start_date,
            start_time=period.start_time,
            end_date=period.end_date,
            end_time=period.end_time,
            delivery_address=period.delivery_address,
            current_step=WizardStep.SELECT_DROPOFF_PARTNER,
            error=None,
        )

    if isinstance(event, PickupPartnerResolved):
        return replace(state, pickup_partner=event.partner)

    if isinstance(event, DropoffPartnerResolved):
        _require_step(state, WizardStep.SELECT_DROPOFF_PARTNER, "choose a drop-off partner")
        if not (state.start_date and state.end_date):
            raise BookingValidationError("Please choose the rental period first")
        return replace(
            state,
            selected_partner=event.partner,
            current_step=WizardStep.CONFIRM,
            error=None,
        )

    if isinstance(event, DropoffPartnerFailed):
        return replace(state, error=event.message)

    if isinstance(event, Back):
        if state.booking is not None:
            raise BookingValidationError("Cannot go back: the booking is already complete")
        if state.current_step == WizardStep.SELECT_LOCATIONS:
            raise BookingValidationError("Already on the first step")
        return replace(
            state,
            current_step=WizardStep(state.current_step - 1),
            error=None,
        )

    if isinstance(event, ChooseDifferentLocation):
        if state.display_state != DisplayState.NO_BIKES_AVAILABLE:
            raise BookingValidationError("Changing location is only offered when no bikes are available")
        return replace(
            state,
            current_step=WizardStep.SELECT_LOCATIONS,
            available_bikes=None,
            error=None,
        )

    if isinstance(event, ValidationFailed):
        return replace(state, error=event.message)

    if isinstance(event, SubmissionStarted):
        _require_step(state, WizardStep.CONFIRM, "submit the booking")
        if state.is_booking:
            raise BookingValidationError("A booking submission is already in progress")
        return replace(state, is_booking=True, error=None)

    if isinstance(event, BookingSucceeded):
        return replace(
            state,
            booking=event.booking,
            is_booking=False,
            error=None,
            redirect_countdown=event.countdown,
        )

    if isinstance(event, BookingFailed):
        return replace(state, is_booking=False, error=event.message)

    if isinstance(event, CountdownTicked):
        if state.booking is None or not state.redirect_countdown:
            return state
        return replace(state, redirect_countdown=state.redirect_countdown - 1)

    if isinstance(event, ErrorDismissed):
        return replace(state, error=None)

    raise TypeError(f"Unknown wizard event: {event!r}")


# ── Controller ─────────────────────────────────────────────

class StepController:
    """Hold the current :class:`WizardState` and apply events to it."""

    def __init__(self, state: Optional[WizardState] = None) -> None:
        self.state = state or WizardState()

    def dispatch(self, event: WizardEvent) -> WizardState:
        """Apply ``event`` and record a new version if anything changed."""
        if is_stale(self.state, event):
            log_event(
                "stale_result",
                {"result": type(event).__name__, "token": event.token, "current": self.state.bikes_request_token},
            )
            logger.info("discarding stale %s (token %s)", type(event).__name__, event.token)
            return self.state

        prev_step = self.state.current_step
        prev_display = self.state.display_state

        new_state = transition(self.state, event)
        if new_state is self.state:
            return self.state

        new_state.version = self.state.version + 1
        self.state = new_state

        if prev_step != new_state.current_step or prev_display != new_state.display_state:
            self._log_step_transition(prev_step, prev_display, new_state)
        return self.state

    def snapshot(self) -> WizardState:
        """Return an independent copy of the current state."""
        return deepcopy(self.state)

    def _log_step_transition(
        self,
        from_step: WizardStep,
        from_display: DisplayState,
        state: WizardState,
    ) -> None:
        log_event(
            "step_transition",
            {
                "from": int(from_step),
                "to": int(state.current_step),
                "from_display": from_display.value,
                "to_display": state.display_state.value,
                "version": state.version,
            },
        )
        logger.debug(
            "step %s -> %s (%s)",
            int(from_step),
            int(state.current_step),
            state.display_state.value,
        )
