"""
Helpers for turning backend failures into user-displayable messages.
"""

from typing import Any, Optional

DEFAULT_BOOKING_ERROR = "Failed to create booking. Please try again."


def _lookup(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def extract_error_message(error: BaseException, default: str = DEFAULT_BOOKING_ERROR) -> str:
    """
    Pull the most specific human-readable message out of ``error``.

    Looks for the REST convention ``error.response.data.message`` first, then
    a ``message`` in the error's captured response body, then the error's own
    text, and finally ``default``.
    """
    nested = _lookup(_lookup(_lookup(error, "response"), "data"), "message")
    if isinstance(nested, str) and nested.strip():
        return nested.strip()

    body_message = _lookup(_lookup(error, "response_data"), "message")
    if isinstance(body_message, str) and body_message.strip():
        return body_message.strip()

    own: Optional[str] = _lookup(error, "message")
    if not isinstance(own, str) or not own.strip():
        own = str(error)
    return own.strip() or default
