"""
Booking-related exceptions.
"""


class BookingFlowError(Exception):
    """Base exception for booking flow errors."""
    pass


class BookingValidationError(BookingFlowError):
    """Exception raised when a wizard transition is missing required input."""
    pass


class AuthenticationRequired(BookingFlowError):
    """Exception raised when an action needs a signed-in user."""
    pass


class SessionNotFoundError(BookingFlowError):
    """Exception raised when a wizard session id is unknown or expired."""
    pass
