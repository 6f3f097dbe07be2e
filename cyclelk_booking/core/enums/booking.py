"""
Booking-related enums.
"""

from enum import Enum, IntEnum


class WizardStep(IntEnum):
    """Enumeration of the booking wizard steps, numbered as shown to the user."""

    SELECT_LOCATIONS = 1
    SELECT_BIKE = 2
    SET_RENTAL_PERIOD = 3
    SELECT_DROPOFF_PARTNER = 4
    CONFIRM = 5

    @property
    def title(self) -> str:
        return _STEP_TITLES[self]


_STEP_TITLES = {
    WizardStep.SELECT_LOCATIONS: "Select Locations",
    WizardStep.SELECT_BIKE: "Choose Your Bike",
    WizardStep.SET_RENTAL_PERIOD: "Select Rental Period",
    WizardStep.SELECT_DROPOFF_PARTNER: "Choose Drop-off Partner",
    WizardStep.CONFIRM: "Confirm Your Booking",
}


class DisplayState(str, Enum):
    """What the wizard should render instead of (or as) the current step."""

    STEP = "step"
    NO_BIKES_AVAILABLE = "no_bikes_available"
    BOOKING_SUCCEEDED = "booking_succeeded"


class BikeSort(str, Enum):
    """Sort orders accepted by the bike catalog."""

    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    RATING = "rating"
