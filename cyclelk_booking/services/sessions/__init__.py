"""
Booking session module.
"""

from .context import SessionAuth, SessionNavigator, SessionNotifier
from .store import WizardSession, WizardSessionStore

__all__ = [
    "SessionAuth",
    "SessionNavigator",
    "SessionNotifier",
    "WizardSession",
    "WizardSessionStore",
]
