"""
Booking wizard HTTP handler.

Each wizard lives in the session store; every endpoint applies one wizard
operation and answers with a snapshot of the resulting state.
"""

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from ...core.enums import DisplayState
from ...core.exceptions import AuthenticationRequired, ExternalAPIError, NotFoundError
from ...core.models.booking import Booking, PackageEstimate, PriceQuote, RentalPeriod
from ...core.models.catalog import Bike, BikeFilters, Location, Partner
from ...core.models.user import User
from ...services.booking import BookingGateway, estimate_packages
from ...services.catalog import CatalogService
from ...services.external import ExternalAPIService
from ...services.sessions import WizardSession, WizardSessionStore
from ...utils.errors import extract_error_message
from ...utils.event_log import set_session_id
from ...utils.logging import get_logger
from ...utils.validation import ValidationUtils
from ...config import get_settings

logger = get_logger("cyclelk.api.booking")


class LocationsRequest(BaseModel):
    pickup_location_id: str
    dropoff_location_id: str


class BikeRequest(BaseModel):
    bike_id: str


class DropoffRequest(BaseModel):
    partner_id: str


class Notification(BaseModel):
    level: str
    message: str


class WizardSnapshot(BaseModel):
    """Everything a client needs to render the current wizard screen."""

    session_id: str
    step: int
    step_title: str
    display_state: DisplayState
    version: int
    pickup_location: Optional[Location] = None
    dropoff_location: Optional[Location] = None
    available_bikes: Optional[List[Bike]] = None
    bike_filters: BikeFilters
    bikes_loading: bool = False
    selected_bike: Optional[Bike] = None
    rental_period: Optional[RentalPeriod] = None
    pickup_partner: Optional[Partner] = None
    selected_partner: Optional[Partner] = None
    is_booking: bool = False
    booking: Optional[Booking] = None
    redirect_countdown: Optional[int] = None
    quote: Optional[PriceQuote] = None
    error: Optional[str] = None
    authenticated: bool = False
    redirect: Optional[str] = None
    messages: List[Notification] = []

    @classmethod
    def from_session(cls, session: WizardSession) -> "WizardSnapshot":
        state = session.wizard.controller.snapshot()
        return cls(
            session_id=session.id,
            step=int(state.current_step),
            step_title=state.current_step.title,
            display_state=state.display_state,
            version=state.version,
            pickup_location=state.pickup_location,
            dropoff_location=state.dropoff_location,
            available_bikes=state.available_bikes,
            bike_filters=state.bike_filters,
            bikes_loading=state.bikes_loading,
            selected_bike=state.selected_bike,
            rental_period=state.rental_period(),
            pickup_partner=state.pickup_partner,
            selected_partner=state.selected_partner,
            is_booking=state.is_booking,
            booking=state.booking,
            redirect_countdown=state.redirect_countdown,
            quote=session.wizard.quote(),
            error=state.error,
            authenticated=session.auth.is_authenticated,
            redirect=session.navigator.redirect or session.auth.login_redirect,
            messages=[
                Notification(level=level, message=message)
                for level, message in session.notifier.drain()
            ],
        )


class DropoffOptions(BaseModel):
    partners: List[Partner]
    pickup_partner: Optional[Partner] = None
    error: Optional[str] = None


class BookingHandler:
    """Handler for booking wizard endpoints."""

    def __init__(self, sessions: WizardSessionStore, external_api: Optional[ExternalAPIService] = None):
        self.settings = get_settings()
        self.sessions = sessions
        self.external_api = external_api or sessions.external_api
        self.catalog = CatalogService(self.external_api)
        self.router = APIRouter()
        self._setup_routes()

    async def _session(self, session_id: str, request: Request) -> WizardSession:
        session = await self.sessions.get(session_id)
        set_session_id(session.id)
        await self._authenticate(session, request.headers.get(self.settings.api_auth_header))
        return session

    async def _authenticate(self, session: WizardSession, token: Optional[str]) -> None:
        """Bind the session to the user behind ``token``, or to nobody."""
        if not token:
            if session.auth.is_authenticated:
                session.auth.sign_out()
                session.wizard.gateway = BookingGateway(self.external_api)
            return
        if token == session.auth.token and session.auth.is_authenticated:
            return

        api = self.external_api.with_token(token)
        try:
            data = await api.get_current_user()
        except ExternalAPIError as e:
            logger.info("token rejected for session %s: %s", session.id, e)
            session.auth.sign_out()
            session.wizard.gateway = BookingGateway(self.external_api)
            return

        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        session.auth.sign_in(User.model_validate(data), token)
        session.wizard.gateway = BookingGateway(api)

    async def _resolve_location(self, location_id: str) -> Location:
        try:
            return await self.catalog.get_location(location_id)
        except NotFoundError:
            raise HTTPException(status.HTTP_404_NOT_FOUND, f"Location not found: {location_id}")
        except ExternalAPIError as e:
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, extract_error_message(e))

    def _setup_routes(self):
        """Setup booking wizard routes."""

        @self.router.post("/sessions", response_model=WizardSnapshot, status_code=201)
        async def create_session(request: Request):
            """Start a new booking wizard at step 1."""
            session = await self.sessions.create()
            set_session_id(session.id)
            await self._authenticate(session, request.headers.get(self.settings.api_auth_header))
            return WizardSnapshot.from_session(session)

        @self.router.get("/sessions/{session_id}", response_model=WizardSnapshot)
        async def get_session(session_id: str, request: Request):
            session = await self._session(session_id, request)
            return WizardSnapshot.from_session(session)

        @self.router.delete("/sessions/{session_id}", status_code=204)
        async def delete_session(session_id: str):
            """Abandon a wizard; late results for it are dropped."""
            if not await self.sessions.remove(session_id):
                raise HTTPException(status.HTTP_404_NOT_FOUND, "Unknown booking session")

        @self.router.post("/sessions/{session_id}/locations", response_model=WizardSnapshot)
        async def select_locations(session_id: str, body: LocationsRequest, request: Request):
            session = await self._session(session_id, request)
            pickup = await self._resolve_location(body.pickup_location_id)
            dropoff = await self._resolve_location(body.dropoff_location_id)
            await session.wizard.select_locations(pickup, dropoff)
            return WizardSnapshot.from_session(session)

        @self.router.post("/sessions/{session_id}/filters", response_model=WizardSnapshot)
        async def apply_filters(session_id: str, body: BikeFilters, request: Request):
            """Re-fetch bikes with new filters; posting the same filters retries."""
            session = await self._session(session_id, request)
            errors = ValidationUtils.validate_bike_filters(body)
            if errors:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, "; ".join(errors))
            await session.wizard.apply_filters(body)
            return WizardSnapshot.from_session(session)

        @self.router.post("/sessions/{session_id}/bike", response_model=WizardSnapshot)
        async def select_bike(session_id: str, body: BikeRequest, request: Request):
            session = await self._session(session_id, request)
            offered = session.wizard.state.available_bikes or []
            bike = next((b for b in offered if b.id == body.bike_id), None)
            session.wizard.select_bike(bike)
            return WizardSnapshot.from_session(session)

        @self.router.post("/sessions/{session_id}/rental-period", response_model=WizardSnapshot)
        async def select_rental_period(session_id: str, body: RentalPeriod, request: Request):
            session = await self._session(session_id, request)
            errors = ValidationUtils.validate_rental_period(body)
            if errors:
                raise HTTPException(status.HTTP_400_BAD_REQUEST, "; ".join(errors))
            session.wizard.select_rental_period(body)
            return WizardSnapshot.from_session(session)

        @self.router.get("/sessions/{session_id}/dropoff-options", response_model=DropoffOptions)
        async def dropoff_options(session_id: str, request: Request):
            """Partners at the drop-off location, plus the bike's pickup partner."""
            session = await self._session(session_id, request)
            partners = await session.wizard.load_dropoff_options()
            state = session.wizard.state
            return DropoffOptions(
                partners=partners,
                pickup_partner=state.pickup_partner,
                error=state.error,
            )

        @self.router.post("/sessions/{session_id}/dropoff", response_model=WizardSnapshot)
        async def select_dropoff(session_id: str, body: DropoffRequest, request: Request):
            session = await self._session(session_id, request)
            await session.wizard.select_dropoff(body.partner_id)
            return WizardSnapshot.from_session(session)

        @self.router.post("/sessions/{session_id}/back", response_model=WizardSnapshot)
        async def go_back(session_id: str, request: Request):
            session = await self._session(session_id, request)
            session.wizard.back()
            return WizardSnapshot.from_session(session)

        @self.router.post("/sessions/{session_id}/change-location", response_model=WizardSnapshot)
        async def change_location(session_id: str, request: Request):
            session = await self._session(session_id, request)
            session.wizard.choose_different_location()
            return WizardSnapshot.from_session(session)

        @self.router.post("/sessions/{session_id}/dismiss-error", response_model=WizardSnapshot)
        async def dismiss_error(session_id: str, request: Request):
            session = await self._session(session_id, request)
            session.wizard.dismiss_error()
            return WizardSnapshot.from_session(session)

        @self.router.post("/sessions/{session_id}/confirm", response_model=WizardSnapshot)
        async def confirm(session_id: str, request: Request):
            """Submit the booking; unauthenticated callers are sent to log in."""
            session = await self._session(session_id, request)
            await session.wizard.confirm_booking()
            if not session.auth.is_authenticated:
                raise AuthenticationRequired("Please log in to complete your booking")
            return WizardSnapshot.from_session(session)

        @self.router.get("/bikes/{bike_id}/rates")
        async def bike_rates(bike_id: str):
            """Weekly and monthly package estimates shown on bike details."""
            try:
                bike = await self.catalog.get_bike(bike_id)
            except NotFoundError:
                raise HTTPException(status.HTTP_404_NOT_FOUND, f"Bike not found: {bike_id}")
            except ExternalAPIError as e:
                raise HTTPException(status.HTTP_502_BAD_GATEWAY, extract_error_message(e))
            estimate: PackageEstimate = estimate_packages(bike.pricing, self.settings.currency)
            return {"bike_id": bike.id, **asdict(estimate)}
