"""
External API-related exceptions.
"""

from typing import Any, Dict, Optional


class ExternalAPIError(Exception):
    """Base exception for rental backend errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data


class NotFoundError(ExternalAPIError):
    """Exception raised when the backend reports an unknown resource."""
    pass


class BookingGatewayError(ExternalAPIError):
    """Exception raised when the backend rejects a booking request."""
    pass
