"""Hook events written by the assistant and the plugin that emits them.

On ``/clear`` the assistant fires ``SessionEnd`` for the old session id and
then ``SessionStart`` with ``source == "clear"`` for the new one. Pairing
the two links the old id to the new one.
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import asdict, dataclass, fields
from enum import IntEnum
from pathlib import Path
from typing import Any, Callable

from claudedeck import debuglog

EVENT_NOTIFICATION = "Notification"
EVENT_STOP = "Stop"
EVENT_SESSION_END = "SessionEnd"
EVENT_SESSION_START = "SessionStart"

NOTIFY_PERMISSION_PROMPT = "permission_prompt"
NOTIFY_ELICITATION_DIALOG = "elicitation_dialog"
NOTIFY_IDLE_PROMPT = "idle_prompt"

SOURCE_STARTUP = "startup"
SOURCE_RESUME = "resume"
SOURCE_CLEAR = "clear"
SOURCE_COMPACT = "compact"

EVENTS_FILE_NAME = "claude-deck-events.jsonl"

# Must match the version published with the plugin.
PLUGIN_VERSION = "1.0.0"
PLUGIN_KEY = "claude-deck@claude-deck"

POLL_INTERVAL = 0.1


@dataclass
class Event:
    """One hook event line from the events file."""

    session_id: str = ""
    cwd: str = ""
    hook_event_name: str = ""
    source: str = ""
    reason: str = ""
    notification_type: str = ""
    claude_deck_session_id: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Event":
        """Build an event from a decoded JSON object.

        Raises TypeError when ``data`` is not an object or a known field is
        not a string. Missing or null fields are left empty.
        """
        if not isinstance(data, dict):
            raise TypeError(f"event must be a JSON object, got {type(data).__name__}")
        values: dict[str, str] = {}
        for f in fields(cls):
            value = data.get(f.name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise TypeError(f"event field {f.name!r} must be a string")
            values[f.name] = value
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        """Return the event as a JSON-ready mapping, empty optionals omitted."""
        required = {"session_id", "cwd", "hook_event_name"}
        return {k: v for k, v in asdict(self).items() if v or k in required}


class HookStatus(IntEnum):
    NONE = 0
    OUTDATED = 1
    PLUGIN = 2


def events_file_path(data_dir: str | os.PathLike[str]) -> str:
    """Return the events file path under ``data_dir``."""
    return os.path.join(os.fspath(data_dir), EVENTS_FILE_NAME)


def check_hooks() -> HookStatus:
    """Report whether the plugin is installed and current."""
    try:
        home = Path.home()
    except RuntimeError:
        return HookStatus.NONE

    path = home / ".claude" / "plugins" / "installed_plugins.json"
    try:
        data = path.read_bytes()
    except OSError:
        return HookStatus.NONE
    if not data:
        return HookStatus.NONE

    try:
        document = json.loads(data)
    except (ValueError, UnicodeDecodeError):
        return HookStatus.NONE
    if not isinstance(document, dict):
        return HookStatus.NONE

    plugins = document.get("plugins")
    if not isinstance(plugins, dict):
        return HookStatus.NONE
    entries = plugins.get(PLUGIN_KEY)
    if not isinstance(entries, list) or not entries:
        return HookStatus.NONE

    first = entries[0]
    version = first.get("version", "") if isinstance(first, dict) else ""
    if version != PLUGIN_VERSION:
        return HookStatus.OUTDATED
    return HookStatus.PLUGIN


def read_new_lines(
    path: str | os.PathLike[str], offset: int, on_event: Callable[[Event], None]
) -> int:
    """Deliver events appended after ``offset`` and return the new offset.

    A file shorter than ``offset`` is taken as truncated and read from the
    start. Lines that do not parse, or carry no session id, are skipped.
    """
    try:
        f = open(path, "rb")
    except OSError:
        return offset

    with f:
        try:
            size = os.fstat(f.fileno()).st_size
        except OSError:
            return offset
        if size < offset:
            offset = 0
        try:
            f.seek(offset)
            data = f.read()
            new_offset = f.tell()
        except OSError:
            return offset

    for raw in data.split(b"\n"):
        line = raw.rstrip(b"\r")
        if not line:
            continue
        try:
            event = Event.from_dict(json.loads(line))
        except (ValueError, TypeError, UnicodeDecodeError) as exc:
            debuglog.debug("[hooks] failed to parse event: %s (line: %r)", exc, line)
            continue
        if event.session_id:
            debuglog.debug(
                "[hooks] event: %s session_id=%s cwd=%s source=%s reason=%s notification_type=%s",
                event.hook_event_name,
                event.session_id,
                event.cwd,
                event.source,
                event.reason,
                event.notification_type,
            )
            on_event(event)
    return new_offset


class EventWatcher:
    """Background poller that delivers events appended to the events file."""

    def __init__(
        self,
        path: str,
        offset: int,
        on_event: Callable[[Event], None],
        interval: float = POLL_INTERVAL,
    ) -> None:
        self.path = path
        self.offset = offset
        self._on_event = on_event
        self._interval = interval
        self._stopped = threading.Event()
        self._last_stat = self._stat_key()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _stat_key(self) -> tuple[int, int] | None:
        try:
            st = os.stat(self.path)
        except OSError:
            return None
        return st.st_size, st.st_mtime_ns

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            key = self._stat_key()
            if key is None or key == self._last_stat:
                continue
            self._last_stat = key
            debuglog.debug("[hooks] write detected")
            self.offset = read_new_lines(self.path, self.offset, self._on_event)

    def stop(self) -> None:
        """Stop watching and wait for the poller to finish."""
        self._stopped.set()
        if self._thread is not threading.current_thread():
            self._thread.join()

    def __enter__(self) -> "EventWatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def watch_events(
    events_path: str | os.PathLike[str], on_event: Callable[[Event], None]
) -> EventWatcher:
    """Start delivering events appended to ``events_path`` from now on.

    The file and its directory are created if missing. Raises OSError when
    that fails.
    """
    path = os.fspath(events_path)
    os.makedirs(os.path.dirname(path) or ".", mode=0o755, exist_ok=True)
    with open(path, "ab") as f:
        offset = f.seek(0, os.SEEK_END)
    return EventWatcher(path, offset, on_event)


def truncate_events_file(events_path: str | os.PathLike[str]) -> None:
    """Empty the events file so stale events are not processed."""
    if not os.path.exists(events_path):
        return
    os.truncate(events_path, 0)