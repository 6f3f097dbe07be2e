"""
API handler modules.
"""

from .health import HealthHandler
from .booking import BookingHandler, WizardSnapshot

__all__ = [
    "HealthHandler",
    "BookingHandler",
    "WizardSnapshot",
]
