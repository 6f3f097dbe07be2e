"""
Utility modules for the Cycle.LK booking service.
"""

from .date import DateTimeUtils, compose_instant
from .errors import extract_error_message
from .logging import get_logger
from .validation import ValidationUtils

__all__ = [
    "DateTimeUtils",
    "compose_instant",
    "extract_error_message",
    "get_logger",
    "ValidationUtils",
]
