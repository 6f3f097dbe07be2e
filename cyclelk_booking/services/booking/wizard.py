"""
Booking wizard: drives the step state machine and its async side effects.

Every handler that talks to a collaborator catches that collaborator's
errors itself and turns them into an inline ``state.error``; nothing is
raised to the caller except :class:`BookingValidationError` for transitions
that are not allowed from the current step, and unexpected errors during
submission, which still reset the in-flight flag first.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

from ...core.enums import DisplayState, WizardStep
from ...core.exceptions import BookingGatewayError, BookingValidationError, ExternalAPIError
from ...core.models.booking import PriceQuote, RentalPeriod, WizardState
from ...core.models.catalog import Bike, BikeFilters, Location, Partner
from ...core.ports import AuthPort, NavigationPort, NotificationPort
from ...config import get_settings
from ...utils.errors import extract_error_message
from ...utils.event_log import log_event
from ...utils.logging import get_logger
from ..catalog import CatalogService
from ..partners import PartnerDirectory
from .pricing import calculate_price
from .service import BookingGateway
from .step_controller import (
    Back,
    BikeSelected,
    BikesLoaded,
    BikesLoadFailed,
    BookingFailed,
    BookingSucceeded,
    ChooseDifferentLocation,
    CountdownTicked,
    DropoffPartnerFailed,
    DropoffPartnerResolved,
    ErrorDismissed,
    FiltersChanged,
    LocationsSelected,
    PickupPartnerResolved,
    RentalPeriodSelected,
    StepController,
    SubmissionStarted,
    ValidationFailed,
    WizardEvent,
)

logger = get_logger("cyclelk.wizard")

Sleep = Callable[[float], Awaitable[None]]


class BookingWizard:
    """One customer's pass through the five booking steps."""

    def __init__(
        self,
        catalog: CatalogService,
        partners: PartnerDirectory,
        gateway: BookingGateway,
        auth: AuthPort,
        navigator: NavigationPort,
        notifier: Optional[NotificationPort] = None,
        *,
        sleep: Sleep = asyncio.sleep,
        state: Optional[WizardState] = None,
    ):
        self.settings = get_settings()
        self.catalog = catalog
        self.partners = partners
        self.gateway = gateway
        self.auth = auth
        self.navigator = navigator
        self.notifier = notifier
        self._sleep = sleep
        self.controller = StepController(state)
        self.alive = True
        self._countdown_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> WizardState:
        return self.controller.state

    def _apply(self, event: WizardEvent) -> WizardState:
        # Results that arrive after close() must not touch the state.
        if not self.alive:
            logger.info("wizard closed; dropping %s", type(event).__name__)
            return self.state
        return self.controller.dispatch(event)

    def _notify(self, message: str, level: str = "info") -> None:
        if self.notifier is not None:
            self.notifier.notify(message, level)

    # ------------------------------------------------------------------
    # Step 1 -> 2

    async def select_locations(self, pickup: Location, dropoff: Location) -> WizardState:
        """Commit both locations, advance to bike selection and fetch bikes."""
        self._apply(LocationsSelected(pickup, dropoff))
        await self._load_bikes()
        return self.state

    async def apply_filters(self, filters: BikeFilters) -> WizardState:
        """Re-fetch the bike list with new filters; also the manual retry path."""
        self._apply(FiltersChanged(filters))
        await self._load_bikes()
        return self.state

    async def _load_bikes(self) -> None:
        state = self.state
        token = state.bikes_request_token
        location_id = state.pickup_location.id
        try:
            bikes: List[Bike] = await self.catalog.list_available(location_id, state.bike_filters)
        except ExternalAPIError as e:
            logger.warning("bike fetch for %s failed: %s", location_id, e)
            self._apply(BikesLoadFailed(token, extract_error_message(e, "Failed to load bikes")))
            return
        self._apply(BikesLoaded(token, location_id, bikes))
        if self.state.display_state == DisplayState.NO_BIKES_AVAILABLE:
            log_event("no_bikes_available", {"location_id": location_id})

    def choose_different_location(self) -> WizardState:
        """Leave the no-bikes screen and return to location selection."""
        return self._apply(ChooseDifferentLocation())

    # ------------------------------------------------------------------
    # Step 2 -> 3 -> 4

    def select_bike(self, bike: Optional[Bike]) -> WizardState:
        return self._apply(BikeSelected(bike))

    def select_rental_period(self, period: RentalPeriod) -> WizardState:
        return self._apply(RentalPeriodSelected(period))

    # ------------------------------------------------------------------
    # Step 4 -> 5

    async def load_dropoff_options(self) -> List[Partner]:
        """
        Partners at the drop-off location, resolving the pickup partner too.

        A failed pickup-partner lookup is not fatal; the summary then shows
        no pickup partner.
        """
        state = self.state
        bike = state.selected_bike
        if bike is not None and bike.current_partner_id:
            try:
                pickup_partner = await self.partners.get_by_id(bike.current_partner_id)
            except ExternalAPIError as e:
                logger.warning("pickup partner %s lookup failed: %s", bike.current_partner_id, e)
                pickup_partner = None
            self._apply(PickupPartnerResolved(pickup_partner))

        if state.dropoff_location is None:
            return []
        try:
            return await self.partners.list_by_location(state.dropoff_location.id)
        except ExternalAPIError as e:
            logger.warning("drop-off partners for %s failed: %s", state.dropoff_location.id, e)
            self._apply(ValidationFailed(extract_error_message(e, "Failed to load partners")))
            return []

    async def select_dropoff(self, partner_id: str) -> WizardState:
        """Resolve the chosen partner and advance to confirmation."""
        if self.state.current_step != WizardStep.SELECT_DROPOFF_PARTNER:
            raise BookingValidationError("Drop-off partner is chosen on step 4")
        if not partner_id:
            self._apply(ValidationFailed("Please select a drop-off partner"))
            return self.state

        try:
            partner = await self.partners.get_by_id(partner_id)
        except ExternalAPIError as e:
            logger.warning("drop-off partner %s lookup failed: %s", partner_id, e)
            result: WizardEvent = DropoffPartnerFailed(
                extract_error_message(e, "Failed to load the selected partner")
            )
        else:
            result = DropoffPartnerResolved(partner)

        # The customer may have navigated away while the lookup was running.
        if self.state.current_step != WizardStep.SELECT_DROPOFF_PARTNER:
            log_event("stale_result", {"result": type(result).__name__, "partner_id": partner_id})
            return self.state
        return self._apply(result)

    # ------------------------------------------------------------------
    # Step 5

    def quote(self) -> Optional[PriceQuote]:
        """Price for the current selection, or None before a bike is chosen."""
        state = self.state
        if state.selected_bike is None:
            return None
        try:
            return calculate_price(
                state.selected_bike,
                state.start_date,
                state.start_time,
                state.end_date,
                state.end_time,
                state.delivery_address,
                currency=self.settings.currency,
            )
        except ValueError as e:
            logger.warning("cannot price captured period: %s", e)
            return None

    async def confirm_booking(self) -> WizardState:
        """Submit the booking, or send the customer to sign in first."""
        if not self.auth.is_authenticated:
            log_event("login_required", {"step": int(self.state.current_step)})
            self.auth.redirect_to_login()
            return self.state

        user = self.auth.user
        try:
            request = self.gateway.build_request(self.state, user)
        except BookingValidationError as e:
            self._apply(ValidationFailed(str(e)))
            return self.state

        self._apply(SubmissionStarted())
        key = self.gateway.build_idempotency_key(request, user)
        log_event("booking_submitted", {"bike_id": request.bike_id, "dropoff": request.dropoff_location})
        try:
            booking = await self.gateway.create(request, idempotency_key=key)
        except BookingGatewayError as e:
            message = extract_error_message(e)
            log_event("booking_failed", {"message": message, "status": e.status_code})
            self._apply(BookingFailed(message))
            self._notify(message, "error")
            return self.state
        except Exception:
            # Leave step 5 retryable even when the failure is unexpected.
            log_event("booking_failed", {"message": "unexpected error", "status": None})
            self._apply(BookingFailed("Booking failed. Please try again."))
            raise

        self._apply(BookingSucceeded(booking, countdown=self.settings.redirect_countdown_seconds))
        log_event("booking_created", {"booking_id": booking.id})
        self._notify("Booking request submitted successfully", "success")
        if self.alive:
            self.start_redirect_countdown()
        return self.state

    @property
    def countdown_task(self) -> Optional[asyncio.Task]:
        return self._countdown_task

    def start_redirect_countdown(self) -> asyncio.Task:
        """Run the post-success countdown in the background."""
        if self._countdown_task is None or self._countdown_task.done():
            self._countdown_task = asyncio.create_task(self.run_redirect_countdown())
        return self._countdown_task

    async def run_redirect_countdown(self) -> bool:
        """
        Tick once per second until the countdown reaches zero, then navigate.

        Returns True if the dashboard redirect happened.
        """
        if self.state.display_state != DisplayState.BOOKING_SUCCEEDED:
            return False
        while self.alive and self.state.redirect_countdown:
            await self._sleep(1)
            if not self.alive:
                return False
            self._apply(CountdownTicked())
        if not self.alive:
            return False
        self.navigator.navigate_to(self.settings.dashboard_path)
        self.close()
        return True

    # ------------------------------------------------------------------
    # Navigation

    def back(self) -> WizardState:
        return self._apply(Back())

    def dismiss_error(self) -> WizardState:
        return self._apply(ErrorDismissed())

    def close(self) -> None:
        """Stop accepting results, e.g. when the customer navigates away."""
        self.alive = False
        task = self._countdown_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
