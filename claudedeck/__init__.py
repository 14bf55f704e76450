"""Building blocks for running and monitoring Claude Code sessions in jj workspaces."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "debuglog",
    "discovery",
    "display",
    "ghostty",
    "hooks",
    "ids",
    "jj",
    "ptyfilter",
    "ptyproc",
    "session",
    "spinner",
    "trust",
]