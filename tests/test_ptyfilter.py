import pytest

from claudedeck.ptyfilter import (
    chrome_start_index,
    filter_bottom_chrome,
    is_full_width_separator,
)

SEP = "─" * 120


@pytest.mark.parametrize(
    "line, want",
    [
        ("─" * 120, True),
        ("-" * 40, True),
        ("─" * 20, True),
        ("─" * 19, False),
        ("───── hello ─────", False),
        ("", False),
    ],
)
def test_is_full_width_separator(line, want):
    assert is_full_width_separator(line) is want


def test_filter_empty():
    assert filter_bottom_chrome([]) == []


def test_filter_no_separator_tool_running():
    lines = [
        "╭──────────────────────╮",
        "│ Running: go test ... │",
        "╰──────────────────────╯",
    ]
    assert filter_bottom_chrome(lines) == lines


def test_filter_actual_bottom_chrome():
    lines = [
        "⏺ Running tool: Bash",
        "  ⠹ go test ./...",
        SEP,
        "❯\u00a0",
        SEP,
        "  Opus 4.6 │ $0.382",
        " Session Activity Inquiry",
    ]
    assert filter_bottom_chrome(lines) == ["⏺ Running tool: Bash", "  ⠹ go test ./..."]


def test_filter_trailing_blank_then_chrome():
    lines = ["  残課題: ...", "", SEP, "❯\u00a0", SEP, "  Opus 4.6 │ $0.382"]
    assert filter_bottom_chrome(lines) == ["  残課題: ...", ""]


def test_filter_many_output_lines():
    output = ["output line"] * 35
    lines = output + [SEP, "❯ ", SEP, "status", "tabs"]
    assert filter_bottom_chrome(lines) == output


def test_filter_no_chrome_at_all():
    lines = ["line 1", "line 2", "line 3"]
    assert filter_bottom_chrome(lines) == lines


def test_filter_separator_first_gives_nothing():
    assert filter_bottom_chrome([SEP, "❯ "]) == []


def test_chrome_start_index_bounds():
    assert chrome_start_index([]) == 0
    assert chrome_start_index(["a", "b"]) == 2
    # A separator earlier than the last ten lines is not chrome.
    lines = [SEP] + ["text"] * 10
    assert chrome_start_index(lines) == len(lines)