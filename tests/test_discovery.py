import os

import pytest

from claudedeck.discovery import (
    JJRepoInfo,
    resolve_external_session_paths,
    resolve_jj_repo,
    truncate_session_id,
)

SESSION_ID = "abcd1234-5678-9012-3456-789012345678"


def _make_workspace(tmp_path, main_name, ws_name):
    main_repo = os.path.join(str(tmp_path), main_name)
    main_jj_repo = os.path.join(main_repo, ".jj", "repo")
    os.makedirs(main_jj_repo)
    ws_dir = os.path.join(str(tmp_path), "workspace", ws_name)
    os.makedirs(os.path.join(ws_dir, ".jj"))
    with open(os.path.join(ws_dir, ".jj", "repo"), "w", encoding="utf-8") as f:
        f.write(main_jj_repo)
    return main_repo, ws_dir


def test_resolve_real_repo(tmp_path):
    repo = os.path.join(str(tmp_path), "myrepo")
    os.makedirs(os.path.join(repo, ".jj", "repo"))
    info = resolve_jj_repo(repo)
    assert info == JJRepoInfo(jj_parent=repo, repo_root=repo, is_workspace=False)


def test_resolve_real_repo_from_subdir(tmp_path):
    repo = os.path.join(str(tmp_path), "myrepo")
    os.makedirs(os.path.join(repo, ".jj", "repo"))
    sub = os.path.join(repo, "src", "pkg")
    os.makedirs(sub)
    info = resolve_jj_repo(sub)
    assert info is not None
    assert info.repo_root == repo
    assert info.is_workspace is False


def test_resolve_workspace(tmp_path):
    main_repo, ws_dir = _make_workspace(tmp_path, "mainrepo", "anna-8cc7")
    info = resolve_jj_repo(ws_dir)
    assert info is not None
    assert info.jj_parent == ws_dir
    assert info.repo_root == main_repo
    assert info.is_workspace is True


def test_resolve_no_jj(tmp_path):
    assert resolve_jj_repo(str(tmp_path)) is None


def test_external_paths_workspace(tmp_path):
    main_repo, ws_dir = _make_workspace(tmp_path, "ADeT-AI", "anna-8cc7")
    name, repo_path, repo_name, sub = resolve_external_session_paths(ws_dir, SESSION_ID)
    assert name != repo_name
    assert name == "anna-8cc7"
    assert repo_name == "ADeT-AI"
    assert repo_path == main_repo
    assert sub == ""


def test_external_paths_workspace_subdir(tmp_path):
    main_repo, ws_dir = _make_workspace(tmp_path, "ADeT-AI", "anna-8cc7")
    sub_dir = os.path.join(ws_dir, "packages", "api")
    os.makedirs(sub_dir)
    name, repo_path, _, sub = resolve_external_session_paths(sub_dir, SESSION_ID)
    assert name == "anna-8cc7"
    assert repo_path == main_repo
    assert sub == os.path.join("packages", "api")


def test_external_paths_main_repo(tmp_path):
    main_repo = os.path.join(str(tmp_path), "myproject")
    os.makedirs(os.path.join(main_repo, ".jj", "repo"))
    name, repo_path, repo_name, sub = resolve_external_session_paths(main_repo, SESSION_ID)
    assert name == "abcd1234"
    assert repo_name == "myproject"
    assert repo_path == main_repo
    assert sub == ""


def test_external_paths_main_repo_subdir(tmp_path):
    main_repo = os.path.join(str(tmp_path), "myproject")
    os.makedirs(os.path.join(main_repo, ".jj", "repo"))
    sub_dir = os.path.join(main_repo, "packages", "api")
    os.makedirs(sub_dir)
    _, _, repo_name, sub = resolve_external_session_paths(sub_dir, SESSION_ID)
    assert repo_name == "myproject"
    assert sub == "packages/api".replace("/", os.sep)


def test_external_paths_no_jj(tmp_path):
    directory = os.path.join(str(tmp_path), "somedir")
    os.makedirs(directory)
    name, repo_path, repo_name, sub = resolve_external_session_paths(directory, SESSION_ID)
    assert name == "abcd1234"
    assert repo_name == "somedir"
    assert repo_path == directory
    assert sub == ""


@pytest.mark.parametrize(
    ("value", "expected"),
    [(SESSION_ID, "abcd1234"), ("abc", "abc"), ("", "")],
)
def test_truncate_session_id(value, expected):
    assert truncate_session_id(value) == expected