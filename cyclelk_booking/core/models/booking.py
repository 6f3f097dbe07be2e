"""
Booking-related data models.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..enums import WizardStep, DisplayState
from .catalog import Bike, BikeFilters, Location, Partner


class RentalPeriod(BaseModel):
    """Dates and times collected by the rental period step."""

    model_config = ConfigDict(extra="forbid")

    start_date: str  # YYYY-MM-DD format
    start_time: Optional[str] = None  # HH:MM format
    end_date: str  # YYYY-MM-DD format
    end_time: Optional[str] = None  # HH:MM format
    delivery_address: Optional[str] = None


class BookingRequest(BaseModel):
    """Payload submitted to the rental backend to create a booking."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    bike_id: str
    start_time: str  # ISO datetime
    end_time: str  # ISO datetime
    delivery_address: Optional[str] = None
    pickup_location: Optional[str] = None
    dropoff_location: str

    def to_payload(self) -> Dict[str, Any]:
        """Serialize in the backend's camelCase shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Booking(BaseModel):
    """A booking record returned by the rental backend."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    booking_number: Optional[str] = None
    status: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    dropoff_location: Optional[str] = None


@dataclass(frozen=True)
class PriceQuote:
    """Authoritative charge for a booking; derived, never persisted."""

    days: int
    per_day: float
    base_price: float
    delivery_fee: float
    total: float
    currency: str = "LKR"


@dataclass(frozen=True)
class PackageEstimate:
    """Display-only weekly and monthly rates shown on bike details."""

    per_day: float
    weekly: float
    monthly: float
    weekly_saving: float
    currency: str = "LKR"


@dataclass
class WizardState:
    """Transient state owned by a single booking wizard instance."""

    current_step: WizardStep = WizardStep.SELECT_LOCATIONS

    # Step 1
    pickup_location: Optional[Location] = None
    dropoff_location: Optional[Location] = None

    # Step 2
    available_bikes: Optional[List[Bike]] = None
    bike_filters: BikeFilters = field(default_factory=BikeFilters)
    bikes_loading: bool = False
    bikes_request_token: int = 0
    selected_bike: Optional[Bike] = None

    # Step 3
    start_date: Optional[str] = None  # YYYY-MM-DD format
    start_time: Optional[str] = None  # HH:MM format
    end_date: Optional[str] = None
    end_time: Optional[str] = None
    delivery_address: Optional[str] = None

    # Step 4
    selected_partner: Optional[Partner] = None
    pickup_partner: Optional[Partner] = None

    # Step 5
    is_booking: bool = False
    booking: Optional[Booking] = None
    redirect_countdown: Optional[int] = None

    # Inline, dismissible message for the current step
    error: Optional[str] = None

    # Versioning
    version: int = 0

    @property
    def display_state(self) -> DisplayState:
        """Absorbing screens take precedence over the numbered step."""
        if self.booking is not None:
            return DisplayState.BOOKING_SUCCEEDED
        if (
            self.current_step == WizardStep.SELECT_BIKE
            and not self.bikes_loading
            and self.error is None
            and self.available_bikes is not None
            and len(self.available_bikes) == 0
        ):
            return DisplayState.NO_BIKES_AVAILABLE
        return DisplayState.STEP

    def rental_period(self) -> Optional[RentalPeriod]:
        """Return the captured rental period, if step 3 has committed."""
        if not (self.start_date and self.end_date):
            return None
        return RentalPeriod(
            start_date=self.start_date,
            start_time=self.start_time,
            end_date=self.end_date,
            end_time=self.end_time,
            delivery_address=self.delivery_address,
        )

    def missing_booking_fields(self) -> List[str]:
        """Names of the fields a booking submission still needs."""
        required = {
            "selected_bike": self.selected_bike,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "selected_partner": self.selected_partner,
        }
        return [name for name, value in required.items() if not value]
