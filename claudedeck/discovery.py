"""Locating jj repositories for conversations the deck did not start."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass


@dataclass(frozen=True)
class JJRepoInfo:
    """Where a directory sits relative to its jj repository."""

    # Directory holding .jj (a workspace or the main repository).
    jj_parent: str
    # Root of the main repository.
    repo_root: str
    # True when .jj/repo is a file pointing at the main repository.
    is_workspace: bool = False


def _base(path: str) -> str:
    return os.path.basename(os.path.normpath(path))


def resolve_jj_repo(directory: str) -> JJRepoInfo | None:
    """Walk up from ``directory`` to the nearest ``.jj/repo``.

    Returns None when no repository is found or a workspace pointer
    cannot be read.
    """
    current = directory
    while True:
        jj_repo = os.path.join(current, ".jj", "repo")
        try:
            info = os.lstat(jj_repo)
        except OSError:
            info = None
        if info is not None:
            if stat.S_ISDIR(info.st_mode):
                return JJRepoInfo(jj_parent=current, repo_root=current)
            # A workspace: the file holds the main repository's .jj/repo path.
            try:
                with open(jj_repo, encoding="utf-8") as f:
                    content = f.read().strip()
            except (OSError, UnicodeDecodeError):
                return None
            main_root = os.path.dirname(os.path.dirname(content))
            return JJRepoInfo(jj_parent=current, repo_root=main_root, is_workspace=True)
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def _relative_below(base: str, path: str) -> str:
    try:
        rel = os.path.relpath(path, base)
    except ValueError:
        return ""
    return "" if rel == "." else rel


def truncate_session_id(session_id: str) -> str:
    """Return the first eight characters of a session id."""
    return session_id[:8]


def resolve_external_session_paths(cwd: str, session_id: str) -> tuple[str, str, str, str]:
    """Return ``(name, repo_path, repo_name, sub_project_dir)`` for a conversation.

    In a jj workspace the name is the workspace directory and the repository
    is the main one; otherwise the name is the shortened session id.
    """
    info = resolve_jj_repo(cwd)
    if info is not None and info.is_workspace:
        return (
            _base(info.jj_parent),
            info.repo_root,
            _base(info.repo_root),
            _relative_below(info.jj_parent, cwd),
        )
    if info is not None:
        return (
            truncate_session_id(session_id),
            info.repo_root,
            _base(info.repo_root),
            _relative_below(info.repo_root, cwd),
        )
    return truncate_session_id(session_id), cwd, _base(cwd), ""