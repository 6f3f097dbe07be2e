"""
JSON-lines event log for wizard activity.

Events are appended only when a log path is configured (``EVENT_LOG_PATH``
or :func:`set_log_path`); otherwise they go to the debug logger.
"""

import contextvars
import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import get_settings
from .logging import get_logger

logger = get_logger("cyclelk.events")

_LOG_PATH: Optional[Path] = None

_current_session_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "current_session_id", default=None
)


def set_log_path(path: str | Path | None) -> None:
    """Override the log file path (useful for tests)."""
    global _LOG_PATH
    _LOG_PATH = Path(path) if path is not None else None


def get_log_path() -> Optional[Path]:
    """Return the current log file path."""
    if _LOG_PATH is not None:
        return _LOG_PATH
    configured = get_settings().event_log_path
    return Path(configured) if configured else None


def set_session_id(session_id: str | None) -> None:
    """Set the active wizard session identifier for subsequent events."""
    _current_session_id.set(session_id)


def _json_default(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if hasattr(value, "value"):
        return value.value
    return str(value)


def log_event(event: str, data: Dict[str, Any], *, session_id: str | None = None) -> None:
    """Append an event to the log as a JSON line.

    Parameters
    ----------
    event:
        Type of the event (e.g., "step_transition", "stale_result").
    data:
        JSON-serializable payload; enums and pydantic models are coerced.
    session_id:
        Optional explicit session identifier. If omitted, the previously set
        id (via :func:`set_session_id`) is used.
    """
    sid = session_id if session_id is not None else _current_session_id.get()
    record = {**data, "session_id": sid, "event": event}
    path = get_log_path()
    if path is None:
        logger.debug(json.dumps(record, default=_json_default))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        json.dump(record, f, ensure_ascii=False, default=_json_default)
        f.write("\n")
