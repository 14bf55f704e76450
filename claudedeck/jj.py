"""Operations on jj repositories and workspaces via the jj command."""

from __future__ import annotations

import os
import subprocess

from claudedeck import debuglog

# Path of the jj executable; set from configuration before use.
COMMAND = "jj"


class JJError(Exception):
    """Raised when a jj command fails or a workspace cannot be prepared."""


def _run(args: list[str], cwd: str) -> tuple[int, str]:
    """Run jj with combined output; raise JJError if it cannot start."""
    try:
        proc = subprocess.run(
            [COMMAND, *args],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            check=False,
        )
    except OSError as exc:
        raise JJError(f"jj {' '.join(args)}: {exc}") from exc
    return proc.returncode, proc.stdout.decode("utf-8", errors="replace")


def create_workspace_at(
    repo_path: str, name: str, ws_path: str, extra_symlinks: list[str] | None = None
) -> None:
    """Create a jj workspace ``name`` at ``ws_path`` on top of trunk.

    A colocated repository gets a ``.git`` symlink in the workspace so git
    based tools keep working; ``extra_symlinks`` are paths relative to the
    repository root linked into the workspace.
    """
    debuglog.debug("[jj.create_workspace_at] repo=%r name=%r ws=%r", repo_path, name, ws_path)
    try:
        os.makedirs(os.path.dirname(os.path.abspath(ws_path)), mode=0o755, exist_ok=True)
    except OSError as exc:
        raise JJError(f"creating workspace parent dir: {exc}") from exc

    code, output = _run(["workspace", "add", "--name", name, ws_path], repo_path)
    if code != 0:
        debuglog.debug("[jj.create_workspace_at] workspace add failed: %d %r", code, output)
        raise JJError(f"jj workspace add: {output.strip()}: exit status {code}")

    git_dir = os.path.join(repo_path, ".git")
    if os.path.isdir(git_dir):
        link = os.path.join(ws_path, ".git")
        if not os.path.lexists(link):
            try:
                os.symlink(git_dir, link)
            except OSError as exc:
                raise JJError(f"symlinking .git to workspace: {exc}") from exc

    for rel in extra_symlinks or ():
        create_extra_symlink(repo_path, ws_path, rel)

    # A failed fetch (e.g. offline) is not fatal.
    try:
        code, output = _run(["git", "fetch"], ws_path)
        debuglog.debug("[jj.create_workspace_at] git fetch: %d %r", code, output.strip())
    except JJError as exc:
        debuglog.debug("[jj.create_workspace_at] git fetch: %s", exc)

    code, output = _run(["new", "trunk()"], ws_path)
    if code != 0:
        debuglog.debug("[jj.create_workspace_at] new trunk() failed: %d %r", code, output)
        raise JJError(f"jj new trunk(): {output.strip()}: exit status {code}")


def create_extra_symlink(repo_path: str, ws_path: str, rel: str) -> bool:
    """Link ``rel`` from the repository into the workspace.

    Absolute paths, paths containing ``..``, missing sources and existing
    destinations are skipped. Returns whether a link was made.
    """
    if os.path.isabs(rel) or ".." in rel:
        return False

    src = os.path.normpath(os.path.join(repo_path, rel))
    try:
        os.stat(src)
    except FileNotFoundError:
        return False
    except OSError:
        pass

    ws_root = os.path.normpath(ws_path)
    dst = os.path.normpath(os.path.join(ws_root, rel))
    if os.path.lexists(dst):
        return False

    parent = os.path.dirname(dst)
    if parent != ws_root:
        try:
            os.makedirs(parent, mode=0o755, exist_ok=True)
        except OSError as exc:
            raise JJError(f"creating parent dir for symlink {rel}: {exc}") from exc

    try:
        os.symlink(src, dst)
    except OSError as exc:
        raise JJError(f"symlinking {rel} to workspace: {exc}") from exc
    return True


def first_local_bookmark(raw: str) -> str:
    """Return the first bookmark without a ``@remote`` suffix, or ``""``."""
    return next((name for name in raw.split() if "@" not in name), "")


def get_nearest_bookmark(directory: str) -> str:
    """Return the local bookmark of the closest bookmarked ancestor of ``@``."""
    debuglog.debug("[jj.get_nearest_bookmark] dir=%r", directory)
    code, output = _run(
        [
            "log",
            "--no-graph",
            "--color=never",
            "-r",
            "latest(::@ & bookmarks())",
            "-T",
            "bookmarks",
        ],
        directory,
    )
    if code != 0:
        raise JJError(f"exit status {code}: {output.strip()}")
    return first_local_bookmark(output.strip())


def forget_workspace(repo_path: str, name: str) -> None:
    """Make jj forget the workspace ``name``."""
    code, output = _run(["workspace", "forget", name], repo_path)
    if code != 0:
        raise JJError(f"jj workspace forget: {output.strip()}: exit status {code}")