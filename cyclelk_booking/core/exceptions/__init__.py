"""
Custom exceptions for the Cycle.LK booking service.
"""

from .booking import (
    BookingFlowError,
    BookingValidationError,
    AuthenticationRequired,
    SessionNotFoundError,
)
from .external import ExternalAPIError, NotFoundError, BookingGatewayError

__all__ = [
    "BookingFlowError",
    "BookingValidationError",
    "AuthenticationRequired",
    "SessionNotFoundError",
    "ExternalAPIError",
    "NotFoundError",
    "BookingGatewayError",
]
