# claudedeck

Building blocks for a dashboard that runs and watches several Claude Code
sessions at once, each in its own jj workspace. It is a library: it has no
command of its own.

The modules:

- `claudedeck.config`: the TOML configuration file over built-in defaults.
- `claudedeck.session`: session state, status, token usage, log buffering
  and snapshots.
- `claudedeck.ptyproc`: starting Claude Code in a pseudo-terminal, writing
  input, resizing, and answering the terminal queries the CLI sends.
- `claudedeck.jj`: creating and forgetting jj workspaces and finding the
  nearest local bookmark.
- `claudedeck.discovery`: working out which jj repository or workspace a
  directory belongs to.
- `claudedeck.hooks`: reading the JSONL hook events file and checking
  whether the hook plugin is installed.
- `claudedeck.display`: assembling the lines to show from a terminal
  screen snapshot.
- `claudedeck.spinner`, `claudedeck.ptyfilter`, `claudedeck.ids`,
  `claudedeck.trust`, `claudedeck.ghostty`, `claudedeck.debuglog`: helpers.

## Configuration

The configuration file is `$XDG_CONFIG_HOME/claude-deck/config.toml`
(or `~/.config/claude-deck/config.toml`). A missing file yields the
defaults; keys that are not set keep their default values.

```toml
[defaults]
permission_mode = "plan"

[commands]
claude = "/usr/local/bin/claude"
jj = "/opt/bin/jj"

[session]
max_sessions = 50
refresh_interval = "10s"

[projects."/home/me/myrepo"]
workspace_symlinks = [".env", ".env.local"]
add_dirs = ["../shared", "/opt/common"]
```

```python
from claudedeck.config import load, load_from

cfg = load()
cfg = load_from("/path/to/config.toml")

cfg.workspace_symlinks("/home/me/myrepo")   # [".env", ".env.local"]
cfg.resolved_add_dirs("/home/me/myrepo")    # ["/home/me/shared", "/opt/common"]
cfg.ensure_data_dir()
```

An unreadable or malformed file, or a value of the wrong type, raises
`ConfigError`. `default_config()` returns the defaults alone.

## Sessions

```python
from claudedeck.session import Status, new_session

sess = new_session("/home/me/myrepo", "myrepo")
sess.add_tokens(100, 50)
sess.set_status(Status.WAITING_APPROVAL)

snap = sess.snapshot()
snap.status.needs_attention()      # True
snap.token_usage.total_tokens()    # 150
snap.work_dir()                    # "/home/me/myrepo"
```

Setting `Status.COMPLETED` or `Status.ERROR` stamps `finished_at`.
`append_log` and `append_raw` keep the last `max_log_lines` lines
(1000 by default); `logs()` returns a copy.

## Running Claude Code in a pseudo-terminal

```python
from claudedeck import ptyproc

proc = ptyproc.start(
    ptyproc.StartOptions(work_dir="/home/me/myrepo", permission_mode="plan"),
    lambda chunk: print(chunk),
)
proc.write(b"hello\r")
proc.resize(100, 30)
proc.close()
proc.wait(5)
```

`ptyproc.COMMAND` and `jj.COMMAND` name the executables and may be set from
the configuration.

## Hook events

```python
from claudedeck import hooks

path = hooks.events_file_path(cfg.data_dir)
hooks.truncate_events_file(path)
with hooks.watch_events(path, lambda ev: print(ev.hook_event_name, ev.session_id)):
    ...
hooks.check_hooks()     # HookStatus.NONE, OUTDATED or PLUGIN
```

## Text helpers

```python
from claudedeck.spinner import contains_braille_spinner, strip_spinner_prefix
from claudedeck.ptyfilter import filter_bottom_chrome
from claudedeck.session import encode_path_for_dir

contains_braille_spinner("⠐ thinking...")   # True
strip_spinner_prefix("✳ Claude Code")       # "Claude Code"
encode_path_for_dir("/a/b/c")               # "-a-b-c"
```

## Debug logging

Set `CLAUDE_DECK_DEBUG=1` (or `true`) to log to
`$XDG_DATA_HOME/claude-deck/debug.log`, or set it to a file path to log
there instead. With the variable unset, logging is silently discarded.

```python
from claudedeck import debuglog

debuglog.init()
debuglog.debug("count=%d name=%s", 3, "test")
debuglog.close()
```

## What it does not do

There is no dashboard, no command to run, and nothing that coordinates
several sessions: no session manager, no saving and loading of sessions,
no reading of Claude Code's conversation files for token usage or logs,
and no terminal emulator. `build_display_lines` works on screen text you
supply; `Session.append_raw` only splits output into log lines.

## Requirements

Python 3.11 or later on a POSIX system. Creating workspaces needs `jj` on
the path, and starting sessions needs the `claude` CLI.