"""
Core data models for the Cycle.LK booking service.
"""

from .booking import (
    WizardState,
    RentalPeriod,
    BookingRequest,
    Booking,
    PriceQuote,
    PackageEstimate,
)
from .catalog import (
    Location,
    Coordinates,
    Bike,
    BikePricing,
    BikeFilters,
    Partner,
    MapLocation,
)
from .user import User

__all__ = [
    "WizardState",
    "RentalPeriod",
    "BookingRequest",
    "Booking",
    "PriceQuote",
    "PackageEstimate",
    "Location",
    "Coordinates",
    "Bike",
    "BikePricing",
    "BikeFilters",
    "Partner",
    "MapLocation",
    "User",
]
