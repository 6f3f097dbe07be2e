"""
In-memory store of live booking wizards keyed by session id.

A wizard outlives a single request so that a customer who is sent to the
login page can come back and confirm without re-entering anything.
"""

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ...core.exceptions import SessionNotFoundError
from ...config import get_settings
from ...utils.event_log import log_event
from ...utils.logging import get_logger
from ..booking import BookingGateway, BookingWizard
from ..catalog import CatalogService
from ..external import ExternalAPIService
from ..partners import PartnerDirectory
from .context import SessionAuth, SessionNavigator, SessionNotifier

logger = get_logger("cyclelk.sessions")


@dataclass
class WizardSession:
    """A wizard together with the adapters it reports through."""

    id: str
    wizard: BookingWizard
    auth: SessionAuth
    navigator: SessionNavigator
    notifier: SessionNotifier
    last_seen: float = field(default_factory=time.monotonic)


class WizardSessionStore:
    """Creates, finds and expires wizard sessions."""

    def __init__(
        self,
        external_api: Optional[ExternalAPIService] = None,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = get_settings()
        self.external_api = external_api or ExternalAPIService()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else self.settings.session_ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, WizardSession] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _build_session(self, session_id: str) -> WizardSession:
        auth = SessionAuth(self.settings.login_path)
        navigator = SessionNavigator()
        notifier = SessionNotifier()
        wizard = BookingWizard(
            catalog=CatalogService(self.external_api),
            partners=PartnerDirectory(self.external_api),
            gateway=BookingGateway(self.external_api),
            auth=auth,
            navigator=navigator,
            notifier=notifier,
        )
        return WizardSession(
            id=session_id,
            wizard=wizard,
            auth=auth,
            navigator=navigator,
            notifier=notifier,
            last_seen=self._clock(),
        )

    async def create(self) -> WizardSession:
        """Start a new wizard at step 1."""
        await self.purge_expired()
        session = self._build_session(uuid.uuid4().hex)
        async with self._lock:
            self._sessions[session.id] = session
        log_event("session_created", {}, session_id=session.id)
        return session

    async def get(self, session_id: str) -> WizardSession:
        """Return a live session; raises SessionNotFoundError otherwise."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(f"Unknown booking session: {session_id}")
            if self._clock() - session.last_seen > self.ttl_seconds:
                self._sessions.pop(session_id, None)
                session.wizard.close()
                logger.info("session %s expired", session_id)
                raise SessionNotFoundError(f"Booking session expired: {session_id}")
            session.last_seen = self._clock()
            return session

    async def remove(self, session_id: str) -> bool:
        """Close and forget a session. Returns False if it was not known."""
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.wizard.close()
        log_event("session_closed", {}, session_id=session_id)
        return True

    async def purge_expired(self) -> int:
        """Drop sessions idle for longer than the TTL."""
        now = self._clock()
        async with self._lock:
            expired = [
                sid for sid, s in self._sessions.items() if now - s.last_seen > self.ttl_seconds
            ]
            for sid in expired:
                self._sessions.pop(sid).wizard.close()
        if expired:
            logger.info("purged %d idle booking sessions", len(expired))
        return len(expired)

    async def close_all(self) -> None:
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.wizard.close()
