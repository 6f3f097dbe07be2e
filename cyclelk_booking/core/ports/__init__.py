"""
Ports the booking wizard depends on instead of ambient global state.
"""

from .auth import AuthPort
from .ui import NotificationPort, NavigationPort

__all__ = [
    "AuthPort",
    "NotificationPort",
    "NavigationPort",
]
