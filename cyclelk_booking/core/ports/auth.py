"""
Authentication port consumed by the booking wizard.
"""

from typing import Optional, Protocol, runtime_checkable

from ..models.user import User


@runtime_checkable
class AuthPort(Protocol):
    """Who is booking, and how to send them to sign in."""

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def user(self) -> Optional[User]: ...

    def redirect_to_login(self) -> None: ...
