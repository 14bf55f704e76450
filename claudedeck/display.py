"""Turning a terminal screen snapshot into the lines shown for a session."""

from __future__ import annotations

from typing import Sequence

from claudedeck import debuglog

# How many lines from the bottom are searched for a drawn window title.
_TITLE_SCAN_RANGE = 8
# Shortest fragment accepted when a line is a partly overwritten title.
_MIN_TITLE_FRAGMENT = 4


def _is_blank(line: str) -> bool:
    return line.rstrip(" ") == ""


def _trim_trailing_blank(lines: list[str]) -> None:
    while lines and _is_blank(lines[-1]):
        lines.pop()


def _is_title_line(line: str, title: str) -> bool:
    # A full title, or what is left of one after the renderer overwrote
    # its first few columns (e.g. "Weather Inquiry" -> "   ather Inquiry").
    if title in line:
        return True
    return len(line.encode("utf-8")) >= _MIN_TITLE_FRAGMENT and line in title


def build_display_lines(
    plain: str,
    styled: str,
    cursor_y: int,
    title: str = "",
    scrollback_styled: Sequence[str] = (),
    session_id: str = "",
) -> list[str]:
    """Return the styled lines to display for a screen snapshot.

    Lines below the cursor row are leftovers of an earlier frame and are
    dropped, as are trailing blank lines and any line near the bottom that
    shows the window title. Scrolled-out lines come first.
    """
    if not plain:
        return []

    limit = max(cursor_y + 1, 0)
    plain_lines = plain.split("\n")[:limit]
    styled_lines = styled.split("\n")[:limit]

    _trim_trailing_blank(plain_lines)
    if not plain_lines:
        return []
    del styled_lines[len(plain_lines):]

    if title:
        scan_start = max(0, len(plain_lines) - _TITLE_SCAN_RANGE)
        for index in range(len(plain_lines) - 1, scan_start - 1, -1):
            line = plain_lines[index].strip()
            if not line:
                continue
            if _is_title_line(line, title):
                debuglog.debug(
                    "[session:%s] title filter: removed line[%d] %r (title=%r)",
                    session_id, index, line, title,
                )
                del plain_lines[index]
                if index < len(styled_lines):
                    del styled_lines[index]
        _trim_trailing_blank(plain_lines)
        del styled_lines[len(plain_lines):]

    result = [*scrollback_styled, *styled_lines]
    debuglog.debug(
        "[session:%s] build_display_lines: %d lines (%d scrollback + %d screen, cursorY=%d)",
        session_id, len(result), len(scrollback_styled), len(styled_lines), cursor_y,
    )
    return result