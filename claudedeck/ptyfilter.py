"""Recognising the input-area chrome the assistant draws at the bottom."""

from __future__ import annotations

_SEPARATOR_CHARS = frozenset("─━-=")
_MIN_SEPARATOR_WIDTH = 20
_SCAN_LINES = 10


def is_full_width_separator(line: str) -> bool:
    """Return whether a plain-text line is a wide horizontal rule."""
    trimmed = line.strip()
    return len(trimmed) >= _MIN_SEPARATOR_WIDTH and all(
        ch in _SEPARATOR_CHARS for ch in trimmed
    )


def chrome_start_index(plain_lines: list[str]) -> int:
    """Return the index where the bottom chrome starts.

    Only the last lines are searched for a separator; ``len(plain_lines)``
    means there is no chrome.
    """
    start = max(len(plain_lines) - _SCAN_LINES, 0)
    for index in range(start, len(plain_lines)):
        if is_full_width_separator(plain_lines[index]):
            return index
    return len(plain_lines)


def filter_bottom_chrome(lines: list[str]) -> list[str]:
    """Return ``lines`` without the bottom chrome."""
    return list(lines[: chrome_start_index(lines)])