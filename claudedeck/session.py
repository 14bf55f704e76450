"""Session state for one assistant conversation managed by the deck."""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any

from claudedeck.ids import generate_session_id, generate_workspace_name

DEFAULT_MAX_LOG_LINES = 1000
DEFAULT_MAX_SCROLLBACK = 2000

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Status(IntEnum):
    """Lifecycle state of a session."""

    RUNNING = 0
    WAITING_APPROVAL = 1
    WAITING_ANSWER = 2
    COMPLETED = 3
    ERROR = 4
    IDLE = 5
    # A conversation the deck did not start itself.
    UNMANAGED = 6

    def __str__(self) -> str:
        return _STATUS_LABELS[self]

    def needs_attention(self) -> bool:
        """Return whether the session is waiting for the user."""
        return self in (Status.WAITING_APPROVAL, Status.WAITING_ANSWER)


_STATUS_LABELS = {
    Status.RUNNING: "Running",
    Status.WAITING_APPROVAL: "Approve待ち",
    Status.WAITING_ANSWER: "質問待ち",
    Status.COMPLETED: "完了",
    Status.ERROR: "エラー",
    Status.IDLE: "アイドル",
    Status.UNMANAGED: "外部",
}


@dataclass
class TokenUsage:
    """Token consumption of a session."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0
    estimated_cost_usd: float = 0.0

    def total_tokens(self) -> int:
        """Return input plus output tokens."""
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class Snapshot:
    """A read-only copy of a session's state."""

    id: str
    name: str
    repo_path: str
    repo_name: str
    workspace_path: str
    sub_project_dir: str
    claude_session_id: str
    status: Status
    managed: bool
    prompt: str
    permission_mode: str
    started_at: datetime | None
    last_activity: datetime | None
    finished_at: datetime | None
    token_usage: TokenUsage
    current_tool: str
    error_message: str
    terminal_title: str
    bookmark_name: str
    elapsed: timedelta

    def work_dir(self) -> str:
        """Return the workspace path, falling back to the repository path."""
        return self.workspace_path or self.repo_path


@dataclass(eq=False)
class Session:
    """One assistant session and its runtime state."""

    id: str = ""
    name: str = ""
    repo_path: str = ""
    repo_name: str = ""
    workspace_path: str = ""
    workspace_name: str = ""
    sub_project_dir: str = ""
    claude_session_id: str = ""
    # Id in use before /clear, kept as a resume fallback.
    previous_claude_session_id: str = ""
    status: Status = Status.IDLE
    finished_at: datetime | None = None
    pid: int = 0
    terminal_title: str = ""
    bookmark_name: str = ""
    prompt: str = ""
    permission_mode: str = ""
    started_at: datetime | None = None
    last_activity: datetime | None = None
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    log_lines: list[str] = field(default_factory=list)
    jsonl_log_entries: list[Any] = field(default_factory=list)
    current_tool: str = ""
    error_message: str = ""
    managed: bool = False
    max_log_lines: int = 0
    max_scrollback: int = 0
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _last_spinner: float | None = field(default=None, repr=False)

    def _elapsed_locked(self) -> timedelta:
        if self.started_at is None:
            return timedelta(0)
        end = self.finished_at if self.finished_at is not None else _now()
        return end - self.started_at

    def elapsed(self) -> timedelta:
        """Return how long the session ran, or has run so far."""
        with self._lock:
            return self._elapsed_locked()

    def set_status(self, status: Status) -> None:
        """Set the status; completion and error stamp the finish time."""
        with self._lock:
            self.status = status
            if status in (Status.COMPLETED, Status.ERROR):
                self.finished_at = _now()

    def set_error_status(self, msg: str) -> None:
        """Put the session in the error state with a reason."""
        with self._lock:
            self.set_status(Status.ERROR)
            self.error_message = msg

    def touch_spinner(self) -> None:
        """Record that a spinner was just seen in the output."""
        with self._lock:
            self._last_spinner = time.monotonic()

    def spinner_idle_since(self, timeout: float) -> bool:
        """Return whether a running session's spinner vanished over ``timeout`` seconds ago."""
        with self._lock:
            return (
                self.status == Status.RUNNING
                and self._last_spinner is not None
                and time.monotonic() - self._last_spinner > timeout
            )

    def add_tokens(self, input_tokens: int, output_tokens: int) -> None:
        """Add to the input and output token counts."""
        with self._lock:
            self.token_usage.input_tokens += input_tokens
            self.token_usage.output_tokens += output_tokens

    def _trim_logs_locked(self) -> None:
        limit = self.max_log_lines if self.max_log_lines > 0 else DEFAULT_MAX_LOG_LINES
        if len(self.log_lines) > limit:
            self.log_lines = self.log_lines[-limit:]

    def append_raw(self, data: bytes) -> None:
        """Append the non-empty lines of a raw output chunk to the log."""
        text = data.decode("utf-8", errors="replace")
        lines = [part.rstrip("\r") for part in text.split("\n")]
        with self._lock:
            self.log_lines.extend(line for line in lines if line)
            self._trim_logs_locked()

    def append_log(self, line: str) -> None:
        """Append one line to the log."""
        with self._lock:
            self.log_lines.append(line)
            self._trim_logs_locked()

    def logs(self) -> list[str]:
        """Return a copy of the log lines."""
        with self._lock:
            return list(self.log_lines)

    def structured_logs(self) -> list[Any]:
        """Return a copy of the structured log entries."""
        with self._lock:
            return list(self.jsonl_log_entries)

    def snapshot(self) -> Snapshot:
        """Return a consistent copy of the session state."""
        with self._lock:
            usage = self.token_usage
            return Snapshot(
                id=self.id,
                name=self.name,
                repo_path=self.repo_path,
                repo_name=self.repo_name,
                workspace_path=self.workspace_path,
                sub_project_dir=self.sub_project_dir,
                claude_session_id=self.claude_session_id,
                status=self.status,
                managed=self.managed,
                prompt=self.prompt,
                permission_mode=self.permission_mode,
                started_at=self.started_at,
                last_activity=self.last_activity,
                finished_at=self.finished_at,
                token_usage=TokenUsage(
                    usage.input_tokens,
                    usage.output_tokens,
                    usage.cache_creation_input_tokens,
                    usage.cache_read_input_tokens,
                    usage.estimated_cost_usd,
                ),
                current_tool=self.current_tool,
                error_message=self.error_message,
                terminal_title=self.terminal_title,
                bookmark_name=self.bookmark_name,
                elapsed=self._elapsed_locked(),
            )

    def sort_time(self) -> datetime:
        """Return the best timestamp for ordering: activity, finish, then start."""
        with self._lock:
            for stamp in (self.last_activity, self.finished_at, self.started_at):
                if stamp is not None:
                    return stamp
            return _EPOCH

    def sort_group(self) -> int:
        """Return the list group: 0 inactive, 1 idle, 2 running, 3 waiting."""
        with self._lock:
            if self.status.needs_attention():
                return 3
            if self.status == Status.RUNNING:
                return 2
            if self.status == Status.IDLE:
                return 1
            return 0


def new_session(repo_path: str, repo_name: str) -> Session:
    """Create an idle session with fresh identifiers."""
    return Session(
        id=generate_session_id(),
        name=generate_workspace_name(),
        repo_path=repo_path,
        repo_name=repo_name,
        terminal_title="New Session",
        status=Status.IDLE,
        started_at=_now(),
    )


def encode_path_for_dir(abs_path: str) -> str:
    """Encode an absolute path as a directory name: ``/a/b/c`` -> ``-a-b-c``."""
    trimmed = abs_path[1:] if abs_path.startswith("/") else abs_path
    return "-" + trimmed.replace("/", "-")


def is_process_alive(pid: int) -> bool:
    """Return whether a process with ``pid`` can be signalled."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True