"""
Per-session adapters for the wizard's auth, navigation and notification ports.

Over HTTP there is no page to move or toast to show, so these record what
the wizard asked for and the handler reports it back in the snapshot.
"""

from typing import List, Optional, Tuple

from ...core.models.user import User
from ...utils.event_log import log_event
from ...utils.logging import get_logger

logger = get_logger("cyclelk.sessions")


class SessionAuth:
    """AuthPort backed by the user resolved from the request token."""

    def __init__(self, login_path: str, user: Optional[User] = None, token: Optional[str] = None):
        self.login_path = login_path
        self._user = user
        self.token = token
        self.login_redirect: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def user(self) -> Optional[User]:
        return self._user

    def sign_in(self, user: User, token: str) -> None:
        self._user = user
        self.token = token
        self.login_redirect = None

    def sign_out(self) -> None:
        self._user = None
        self.token = None

    def redirect_to_login(self) -> None:
        self.login_redirect = self.login_path
        log_event("redirect", {"path": self.login_path})


class SessionNavigator:
    """NavigationPort that remembers where the wizard wants to go."""

    def __init__(self):
        self.redirect: Optional[str] = None
        self.history: List[str] = []

    def navigate_to(self, path: str) -> None:
        self.redirect = path
        self.history.append(path)
        log_event("redirect", {"path": path})


class SessionNotifier:
    """NotificationPort that keeps the latest messages and logs them."""

    MAX_MESSAGES = 20

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def notify(self, message: str, level: str = "info") -> None:
        self.messages.append((level, message))
        del self.messages[: -self.MAX_MESSAGES]
        logger.info("notify[%s]: %s", level, message)

    def drain(self) -> List[Tuple[str, str]]:
        """Return pending messages and forget them."""
        messages, self.messages = self.messages, []
        return messages
