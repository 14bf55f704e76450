"""Running the assistant CLI inside a pseudo-terminal."""

from __future__ import annotations

import fcntl
import os
import struct
import subprocess
import termios
import threading
from dataclasses import dataclass, field
from typing import Callable

from claudedeck import debuglog

# Path of the assistant executable; set from configuration before use.
COMMAND = "claude"

DEFAULT_COLS = 120
DEFAULT_ROWS = 40
READ_SIZE = 32 * 1024

# Terminal queries the assistant sends on every render, and the replies a
# terminal gives. Without a reply it stalls for a long timeout.
XTVERSION_QUERY = b"\x1b[>0q"
XTVERSION_REPLY = b"\x1bP>|VTE\x1b\\"
DA2_QUERY = b"\x1b[>c"
DA2_REPLY = b"\x1b[>64;1;0c"
DA1_QUERY = b"\x1b[c"
DA1_REPLY = b"\x1b[?62;22c"

OutputHandler = Callable[[bytes], None]


class PtyClosedError(OSError):
    """Raised when writing to a pseudo-terminal that is already closed."""


@dataclass
class StartOptions:
    """How to start a new assistant process."""

    work_dir: str = ""
    prompt: str = ""
    permission_mode: str = ""
    # Resume an existing conversation when set.
    resume_session_id: str = ""
    # Fork the resumed conversation; only used with resume_session_id.
    fork_session: bool = False
    additional_args: list[str] = field(default_factory=list)
    # Extra environment entries of the form KEY=VALUE.
    env: list[str] = field(default_factory=list)
    # Terminal size; 0 selects the defaults.
    cols: int = 0
    rows: int = 0


def build_args(options: StartOptions) -> list[str]:
    """Return the command-line arguments for ``options``."""
    args: list[str] = []
    if options.resume_session_id:
        args += ["--resume", options.resume_session_id]
        if options.fork_session:
            args.append("--fork-session")
    elif options.prompt:
        args += ["-p", options.prompt]
    if options.permission_mode:
        args += ["--permission-mode", options.permission_mode]
    args += options.additional_args
    return args


def terminal_query_response(data: bytes) -> bytes:
    """Return the replies to the terminal queries found in ``data``."""
    response = b""
    if XTVERSION_QUERY in data:
        debuglog.debug("[pty] XTVERSION query detected, responding")
        response += XTVERSION_REPLY
    if DA2_QUERY in data:
        debuglog.debug("[pty] DA2 query detected, responding")
        response += DA2_REPLY
    if DA1_QUERY in data:
        debuglog.debug("[pty] DA1 query detected, responding")
        response += DA1_REPLY
    return response


def _set_winsize(fd: int, cols: int, rows: int) -> None:
    fcntl.ioctl(fd, termios.TIOCSWINSZ, struct.pack("HHHH", rows, cols, 0, 0))


def _make_controlling_tty() -> None:
    request = getattr(termios, "TIOCSCTTY", None)
    if request is None:
        return
    try:
        fcntl.ioctl(0, request, 0)
    except OSError:
        pass


class Process:
    """An assistant process attached to a pseudo-terminal."""

    def __init__(self, popen: subprocess.Popen, master_fd: int, handler: OutputHandler) -> None:
        self._popen = popen
        self._fd = master_fd
        self._lock = threading.Lock()
        self._closed = False
        self._done = threading.Event()
        self._reader = threading.Thread(target=self._read_loop, args=(handler,), daemon=True)
        self._reader.start()

    def _read_loop(self, handler: OutputHandler) -> None:
        fd = self._fd
        chunks = 0
        try:
            while True:
                try:
                    chunk = os.read(fd, READ_SIZE)
                except OSError as exc:
                    debuglog.debug("[pty] read ended: %s (chunks: %d)", exc, chunks)
                    break
                if not chunk:
                    debuglog.debug("[pty] read ended: EOF (chunks: %d)", chunks)
                    break
                chunks += 1
                # Reply first so the process is not left waiting.
                self._respond(chunk)
                handler(chunk)
        finally:
            self._close_pty()
            self._popen.wait()
            debuglog.debug("[pty] process exited pid=%d", self._popen.pid)
            self._done.set()

    def _respond(self, chunk: bytes) -> None:
        response = terminal_query_response(chunk)
        if not response:
            return
        with self._lock:
            if not self._closed:
                try:
                    os.write(self._fd, response)
                except OSError:
                    pass

    def write(self, data: bytes) -> int:
        """Send ``data`` to the process's terminal input."""
        with self._lock:
            if self._closed:
                raise PtyClosedError("pty closed")
            return os.write(self._fd, data)

    @property
    def pid(self) -> int:
        """The process id."""
        return self._popen.pid

    def is_done(self) -> bool:
        """Return whether the process has exited and its output is drained."""
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the process to finish; return whether it did."""
        return self._done.wait(timeout)

    def resize(self, cols: int, rows: int) -> None:
        """Change the terminal size; ignored once the terminal is closed."""
        with self._lock:
            if self._closed:
                return
            _set_winsize(self._fd, cols, rows)

    def kill(self) -> None:
        """Terminate the process forcefully."""
        if self._popen.poll() is None:
            try:
                self._popen.kill()
            except ProcessLookupError:
                pass

    def _close_pty(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                os.close(self._fd)
            except OSError:
                pass

    def close(self) -> None:
        """Stop the process and close its terminal."""
        self.kill()
        self._close_pty()

    def __enter__(self) -> "Process":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def start(options: StartOptions, handler: OutputHandler) -> Process:
    """Start the assistant in a new pseudo-terminal.

    ``handler`` receives each raw chunk of output as it is read. Raises
    OSError when the process cannot be started.
    """
    args = build_args(options)
    cols = options.cols or DEFAULT_COLS
    rows = options.rows or DEFAULT_ROWS
    debuglog.debug(
        "[pty.start] cmd=%s args=%r workDir=%r cols=%d rows=%d",
        COMMAND, args, options.work_dir, cols, rows,
    )

    env = dict(os.environ)
    env["TERM"] = "xterm-256color"
    env["CLAUDE_CODE_ENTRYPOINT"] = "cli"
    for item in options.env:
        key, sep, value = item.partition("=")
        if sep and key:
            env[key] = value

    master, slave = os.openpty()
    try:
        _set_winsize(slave, cols, rows)
        popen = subprocess.Popen(
            [COMMAND, *args],
            cwd=options.work_dir or None,
            stdin=slave,
            stdout=slave,
            stderr=slave,
            env=env,
            start_new_session=True,
            preexec_fn=_make_controlling_tty,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        os.close(master)
        debuglog.debug("[pty.start] failed: %s", exc)
        if isinstance(exc, OSError):
            raise
        raise OSError(f"starting pty: {exc}") from exc
    finally:
        os.close(slave)

    debuglog.debug("[pty.start] pty started pid=%d", popen.pid)
    return Process(popen, master, handler)