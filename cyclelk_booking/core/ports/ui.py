"""
User-facing ports: notifications and navigation.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class NotificationPort(Protocol):
    """Surfaces a short message to the person using the wizard."""

    def notify(self, message: str, level: str = "info") -> None: ...


@runtime_checkable
class NavigationPort(Protocol):
    """Moves the person to another page of the application."""

    def navigate_to(self, path: str) -> None: ...
