import json
import os
import threading
import time

import pytest

from claudedeck import hooks
from claudedeck.hooks import Event, HookStatus


def _line(**kwargs):
    return json.dumps(kwargs) + "\n"


def test_events_file_path(tmp_path):
    assert hooks.events_file_path(tmp_path) == os.path.join(
        str(tmp_path), "claude-deck-events.jsonl"
    )


def test_event_from_dict_round_trip():
    event = Event(
        session_id="abc",
        cwd="/w",
        hook_event_name=hooks.EVENT_SESSION_START,
        source=hooks.SOURCE_CLEAR,
        claude_deck_session_id="deck1",
    )
    assert Event.from_dict(event.to_dict()) == event
    assert "reason" not in event.to_dict()


def test_event_from_dict_ignores_unknown_and_null():
    event = Event.from_dict({"session_id": "s", "extra": 5, "reason": None})
    assert event == Event(session_id="s")


@pytest.mark.parametrize("data", [[1, 2], "text", {"session_id": 3}])
def test_event_from_dict_rejects_bad_input(data):
    with pytest.raises(TypeError):
        Event.from_dict(data)


def test_read_new_lines_parses_and_skips(tmp_path):
    path = tmp_path / "events.jsonl"
    content = (
        _line(session_id="s1", hook_event_name="Stop")
        + "\n"
        + "not json\n"
        + _line(session_id="", hook_event_name="Stop")
        + _line(session_id="s2", hook_event_name="Notification", notification_type="idle_prompt")
    )
    path.write_text(content)
    got = []
    offset = hooks.read_new_lines(path, 0, got.append)
    assert [e.session_id for e in got] == ["s1", "s2"]
    assert got[1].notification_type == hooks.NOTIFY_IDLE_PROMPT
    assert offset == path.stat().st_size


def test_read_new_lines_from_offset(tmp_path):
    path = tmp_path / "events.jsonl"
    first = _line(session_id="old")
    path.write_text(first)
    got = []
    offset = hooks.read_new_lines(path, len(first), got.append)
    assert got == []
    with open(path, "a") as f:
        f.write(_line(session_id="new"))
    offset = hooks.read_new_lines(path, offset, got.append)
    assert [e.session_id for e in got] == ["new"]
    assert offset == path.stat().st_size


def test_read_new_lines_resets_after_truncation(tmp_path):
    path = tmp_path / "events.jsonl"
    path.write_text(_line(session_id="s1"))
    got = []
    hooks.read_new_lines(path, 10_000, got.append)
    assert [e.session_id for e in got] == ["s1"]


def test_read_new_lines_missing_file_keeps_offset(tmp_path):
    got = []
    assert hooks.read_new_lines(tmp_path / "missing", 42, got.append) == 42
    assert got == []


def test_truncate_events_file(tmp_path):
    path = tmp_path / "events.jsonl"
    path.write_text(_line(session_id="s1"))
    hooks.truncate_events_file(path)
    assert path.stat().st_size == 0


def test_truncate_missing_file_does_not_create(tmp_path):
    path = tmp_path / "events.jsonl"
    hooks.truncate_events_file(path)
    assert not path.exists()


def _write_plugins(home, document):
    plugins_dir = home / ".claude" / "plugins"
    plugins_dir.mkdir(parents=True)
    (plugins_dir / "installed_plugins.json").write_text(
        document if isinstance(document, str) else json.dumps(document)
    )


def test_check_hooks_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert hooks.check_hooks() is HookStatus.NONE


def test_check_hooks_current(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    _write_plugins(tmp_path, {"plugins": {"claude-deck@claude-deck": [{"version": "1.0.0"}]}})
    assert hooks.check_hooks() is HookStatus.PLUGIN


def test_check_hooks_outdated(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    _write_plugins(tmp_path, {"plugins": {"claude-deck@claude-deck": [{"version": "0.1.0"}]}})
    assert hooks.check_hooks() is HookStatus.OUTDATED


@pytest.mark.parametrize(
    "document",
    [
        "{not json",
        "",
        {"plugins": {"claude-deck@claude-deck": []}},
        {"plugins": {"other@other": [{"version": "1.0.0"}]}},
    ],
)
def test_check_hooks_not_installed(tmp_path, monkeypatch, document):
    monkeypatch.setenv("HOME", str(tmp_path))
    _write_plugins(tmp_path, document)
    assert hooks.check_hooks() is HookStatus.NONE


def test_watch_events_delivers_only_new(tmp_path):
    path = tmp_path / "sub" / "events.jsonl"
    path.parent.mkdir()
    stale = _line(session_id="stale")
    path.write_text(stale)

    got = []
    arrived = threading.Event()

    def on_event(event):
        got.append(event)
        arrived.set()

    watcher = hooks.watch_events(path, on_event)
    try:
        assert watcher.offset == len(stale)
        with open(path, "a") as f:
            f.write(_line(session_id="fresh", hook_event_name="Stop"))
        assert arrived.wait(5)
        size = path.stat().st_size
        deadline = time.monotonic() + 5
        while watcher.offset != size and time.monotonic() < deadline:
            time.sleep(0.01)
        assert watcher.offset == size
    finally:
        watcher.stop()
    assert [e.session_id for e in got] == ["fresh"]
    assert got[0].hook_event_name == hooks.EVENT_STOP


def test_watch_events_creates_file(tmp_path):
    path = tmp_path / "new" / "events.jsonl"
    watcher = hooks.watch_events(path, lambda e: None)
    watcher.stop()
    assert path.exists()
    assert watcher.offset == 0