"""Detecting the spinner characters the assistant draws."""

from __future__ import annotations

import unicodedata


def _is_braille(ch: str) -> bool:
    return 0x2800 <= ord(ch) <= 0x28FF


def has_spinner_prefix(title: str) -> bool:
    """Return whether ``title`` starts with a spinner character and a space."""
    if len(title) < 2:
        return False
    ch = title[0]
    code = ord(ch)
    is_dingbat = 0x2700 <= code <= 0x27BF
    is_misc_symbol = 0x2600 <= code <= 0x26FF
    category = unicodedata.category(ch)
    is_other = not category.startswith("L") and category != "Nd" and ch != " "
    return (_is_braille(ch) or is_dingbat or is_misc_symbol or is_other) and title[1] == " "


def strip_spinner_prefix(title: str) -> str:
    """Remove a leading spinner character and space from a window title."""
    if has_spinner_prefix(title):
        return title[2:]
    return title


def contains_braille_spinner(line: str) -> bool:
    """Return whether ``line`` holds a Braille pattern character."""
    return any(_is_braille(ch) for ch in line)