import pytest

from claudedeck.spinner import (
    contains_braille_spinner,
    has_spinner_prefix,
    strip_spinner_prefix,
)


@pytest.mark.parametrize(
    "line, want",
    [
        ("⠐ thinking...", True),
        ("  \x1b[33m⠹\x1b[0m go test ./...", True),
        ("normal text", False),
        ("", False),
        ("✳ Claude Code", False),
    ],
)
def test_contains_braille_spinner(line, want):
    assert contains_braille_spinner(line) is want


@pytest.mark.parametrize(
    "title, want",
    [
        ("✳ Claude Code", True),
        ("⠐ Weather Inquiry", True),
        ("* Task", True),
        ("Claude Code", False),
        ("a b", False),
        ("1 b", False),
        ("  padded", False),
        ("✳", False),
        ("✳x", False),
        ("", False),
    ],
)
def test_has_spinner_prefix(title, want):
    assert has_spinner_prefix(title) is want


def test_strip_spinner_prefix_removes_prefix():
    assert strip_spinner_prefix("✳ Claude Code") == "Claude Code"
    assert strip_spinner_prefix("⠐ Weather Inquiry") == "Weather Inquiry"


def test_strip_spinner_prefix_keeps_plain_title():
    assert strip_spinner_prefix("Weather Inquiry") == "Weather Inquiry"
    assert strip_spinner_prefix("New Session") == "New Session"