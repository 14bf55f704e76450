"""Opening Ghostty terminal windows or tabs in a working directory."""

from __future__ import annotations

import subprocess
import sys
import threading


class LaunchError(Exception):
    """Raised when the terminal cannot be started."""


class Launcher:
    """Starts Ghostty in a given directory."""

    def __init__(self, command: str = "") -> None:
        self.command = command or "ghostty"

    def build_command(self, work_dir: str, title: str = "") -> list[str]:
        """Return the argument list used to open ``work_dir``.

        On macOS ``open -a Ghostty`` adds a tab to a running instance;
        elsewhere the configured command is run directly.
        """
        if sys.platform == "darwin":
            return ["open", "-a", "Ghostty", work_dir]
        args = [self.command, f"--working-directory={work_dir}"]
        if title:
            args.append(f"--title={title}")
        return args

    def open(self, work_dir: str, title: str = "") -> None:
        """Launch the terminal detached from this process."""
        try:
            proc = subprocess.Popen(
                self.build_command(work_dir, title),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            raise LaunchError(f"launching ghostty: {exc}") from exc
        threading.Thread(target=proc.wait, daemon=True).start()