"""Debug logging switched on by the CLAUDE_DECK_DEBUG environment variable.

``CLAUDE_DECK_DEBUG=1`` (or ``true``) logs to the default data directory,
any other non-empty value is taken as the log file path. When the variable
is unset or empty every call is a silent no-op.
"""

from __future__ import annotations

import os
import threading
from datetime import datetime
from pathlib import Path
from typing import TextIO

ENV_VAR = "CLAUDE_DECK_DEBUG"

_lock = threading.Lock()
_stream: TextIO | None = None


def _default_log_path() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME", "")
    if xdg:
        return Path(xdg) / "claude-deck" / "debug.log"
    return Path.home() / ".local" / "share" / "claude-deck" / "debug.log"


def init() -> None:
    """Open the log destination named by the environment.

    Raises OSError when the log file or its directory cannot be created.
    """
    global _stream
    value = os.environ.get(ENV_VAR, "")
    if not value:
        return

    if value.lower() in ("1", "true"):
        path = _default_log_path()
    else:
        path = Path(value)

    path.parent.mkdir(parents=True, exist_ok=True)
    stream = open(path, "a", encoding="utf-8")

    with _lock:
        previous, _stream = _stream, stream
    if previous is not None:
        previous.close()

    debug("=== debug log started (pid %d) ===", os.getpid())


def _timestamp() -> str:
    now = datetime.now()
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}"


def debug(message: str, *args: object) -> None:
    """Write one timestamped line; does nothing while logging is disabled."""
    with _lock:
        if _stream is None:
            return
        text = message % args if args else message
        _stream.write(f"{_timestamp()} [DEBUG] {text}\n")
        _stream.flush()


def close() -> None:
    """Close the log file. Safe to call when logging is already disabled."""
    global _stream
    with _lock:
        stream, _stream = _stream, None
    if stream is not None:
        stream.close()


def enabled() -> bool:
    """Return whether debug logging is currently active."""
    with _lock:
        return _stream is not None