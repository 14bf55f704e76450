"""Registering the data directory as a trusted workspace in ~/.claude.json.

The assistant walks up from its working directory looking for ``.git`` and
checks ``projects[<root>].hasTrustDialogAccepted`` in ``~/.claude.json``.
Placing an empty ``.git`` directory in the data directory and marking that
path as trusted skips the trust prompt for every workspace below it.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from claudedeck import debuglog

TRUST_KEY = "hasTrustDialogAccepted"


class TrustError(Exception):
    """Raised when the trust registration cannot be completed."""


def config_path() -> Path:
    """Return the path of ``~/.claude.json``."""
    try:
        return Path.home() / ".claude.json"
    except RuntimeError as exc:
        raise TrustError(f"resolving config path: {exc}") from exc


def _read_config(path: Path) -> dict[str, Any]:
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise TrustError(f"reading config: {exc}") from exc
    if not data:
        return {}
    try:
        config = json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise TrustError(f"parsing config: {exc}") from exc
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise TrustError("parsing config: top level is not an object")
    return config


def ensure_data_dir_trusted(data_dir: str | os.PathLike[str]) -> bool:
    """Mark ``data_dir`` as trusted; return False if it already was."""
    key = os.fspath(data_dir)

    try:
        os.makedirs(os.path.join(key, ".git"), mode=0o755, exist_ok=True)
    except OSError as exc:
        raise TrustError(f"creating .git dir: {exc}") from exc

    path = config_path()
    config = _read_config(path)

    projects = config.get("projects")
    if not isinstance(projects, dict):
        projects = {}

    entry = projects.get(key)
    if isinstance(entry, dict) and entry.get(TRUST_KEY) is True:
        debuglog.debug("[claudecode] dataDir already trusted: %s", key)
        return False

    entry = dict(entry) if isinstance(entry, dict) else {}
    entry[TRUST_KEY] = True
    projects[key] = entry
    config["projects"] = projects

    try:
        path.write_text(json.dumps(config, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        raise TrustError(f"writing config: {exc}") from exc

    debuglog.debug("[claudecode] dataDir trusted: %s", key)
    return True