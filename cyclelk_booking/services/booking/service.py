"""
Booking gateway: turns a completed wizard into a booking on the backend.
"""

import hashlib
import json
from typing import Optional

from pydantic import ValidationError

from ...core.models.booking import Booking, BookingRequest, WizardState
from ...core.models.user import User
from ...core.exceptions import BookingGatewayError, BookingValidationError, ExternalAPIError
from ...utils.date import DEFAULT_END_TIME, DEFAULT_START_TIME, DateTimeUtils
from ...utils.errors import extract_error_message
from ...utils.validation import ValidationUtils
from ..external import ExternalAPIService
from ..partners import PartnerDirectory


class BookingGateway:
    """Submits finalized bookings to the rental backend."""

    def __init__(self, external_api: ExternalAPIService):
        self.external_api = external_api
        self.clock = DateTimeUtils()

    async def create(
        self,
        request: BookingRequest,
        idempotency_key: Optional[str] = None,
    ) -> Booking:
        """Create the booking; raises BookingGatewayError with a displayable message."""
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        try:
            result = await self.external_api.create_booking(
                request.to_payload(), extra_headers=headers
            )
        except ExternalAPIError as e:
            raise BookingGatewayError(
                extract_error_message(e), e.status_code, e.response_data
            ) from e

        if isinstance(result, dict) and isinstance(result.get("data"), dict):
            result = result["data"]
        try:
            return Booking.model_validate(result)
        except ValidationError as e:
            raise BookingGatewayError(
                "Booking was not confirmed by the server. Please try again."
            ) from e

    def build_request(self, state: WizardState, user: Optional[User]) -> BookingRequest:
        """Build the backend request from a wizard that reached confirmation."""
        errors = ValidationUtils.validate_booking_state(state, user)
        if errors:
            raise BookingValidationError("; ".join(errors))

        try:
            start_time = self.clock.to_iso(state.start_date, state.start_time, DEFAULT_START_TIME)
            end_time = self.clock.to_iso(state.end_date, state.end_time, DEFAULT_END_TIME)
        except ValueError as e:
            raise BookingValidationError("Dates must be YYYY-MM-DD and times HH:MM") from e

        return BookingRequest(
            bike_id=state.selected_bike.id,
            start_time=start_time,
            end_time=end_time,
            delivery_address=state.delivery_address or None,
            pickup_location=state.pickup_location.name if state.pickup_location else None,
            dropoff_location=PartnerDirectory.describe_dropoff(
                state.selected_partner, state.dropoff_location
            ),
        )

    @staticmethod
    def build_idempotency_key(request: BookingRequest, user: User) -> str:
        """Same user, bike, period and drop-off always yield the same key."""
        raw = {"user": user.id, **request.to_payload()}
        return hashlib.sha256(
            json.dumps(raw, ensure_ascii=False, sort_keys=True).encode("utf-8")
        ).hexdigest()
