from __future__ import annotations

from pathlib import Path

import pytest

from study_exam.core import workspace


def test_ensure_workspace_creates_directories(tmp_path, monkeypatch):
    root = tmp_path / "data"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root
    assert set(layout.directories) == {"config", "logs"}
    for path in layout.directories.values():
        assert path.is_dir()


def test_ensure_workspace_is_idempotent(tmp_path):
    root = tmp_path / "existing"

    first = workspace.ensure_workspace(path=root)
    second = workspace.ensure_workspace(path=root)

    assert first == second


def test_explicit_path_beats_env(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "env-root"))
    custom = tmp_path / "custom-root"

    layout = workspace.ensure_workspace(path=custom)

    assert layout.home == custom
    assert not (tmp_path / "env-root").exists()


def test_env_mapping_is_used_when_given(tmp_path):
    root = tmp_path / "mapped"

    layout = workspace.ensure_workspace(env={workspace.WORKSPACE_ENV: str(root)})

    assert layout.home == root


def test_ensure_workspace_without_create(tmp_path):
    root = tmp_path / "deferred"

    layout = workspace.ensure_workspace(path=root, create=False)

    assert layout.path_for("config") == root / "config"
    assert not root.exists()


def test_ensure_workspace_errors_when_path_is_file(tmp_path):
    root = tmp_path / "file"
    root.write_text("not a dir", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=root)


def test_ensure_workspace_errors_when_subdir_is_file(tmp_path):
    root = tmp_path / "root"
    root.mkdir()
    (root / "logs").write_text("oops", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError, match="non-directory"):
        workspace.ensure_workspace(path=root)


def test_default_home_falls_back_to_tempdir(tmp_path, monkeypatch):
    blocked = tmp_path / "blocked"
    fallback = tmp_path / "fallback"
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == blocked:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)
    monkeypatch.setattr(workspace, "DEFAULT_WORKSPACE", blocked)
    monkeypatch.setattr(workspace, "_fallback_home", lambda: fallback)

    layout = workspace.ensure_workspace(env={})

    assert layout.home == fallback
    assert (fallback / "logs").is_dir()


def test_explicit_home_never_falls_back(tmp_path, monkeypatch):
    blocked = tmp_path / "blocked"
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == blocked:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)

    with pytest.raises(workspace.WorkspaceError, match="Unable to prepare"):
        workspace.ensure_workspace(path=blocked)


def test_path_for_unknown_key_errors(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "ws", create=False)

    with pytest.raises(KeyError):
        layout.path_for("unknown")
