"""
Booking service module.
"""

from .service import BookingGateway
from .step_controller import StepController, transition
from .wizard import BookingWizard
from .pricing import calculate_price, estimate_packages

__all__ = [
    "BookingGateway",
    "StepController",
    "transition",
    "BookingWizard",
    "calculate_price",
    "estimate_packages",
]
