from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from plugin_repo_builder import executor as executor_module
from plugin_repo_builder.exceptions import ExecutorError
from plugin_repo_builder.executor import DockerExecutor, LocalExecutor, PluginWorkspace
from plugin_repo_builder.models import Manifest

MANIFEST = Manifest(id="alpha", repository="https://example.com/a.git", commit="c1", command="make")


def _record_calls(monkeypatch: pytest.MonkeyPatch, returncode: int = 0) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(args, cwd=None):
        calls.append(args)
        return subprocess.CompletedProcess(args, returncode)

    monkeypatch.setattr(executor_module.subprocess, "run", fake_run)
    return calls


def test_docker_command_mounts_only_workspace(tmp_path: Path) -> None:
    workspace = PluginWorkspace(tmp_path / "alpha")
    cmd = DockerExecutor(image="example/builder:1").command(workspace)

    assert cmd[:3] == ["docker", "run", "--rm"]
    assert cmd[-1] == "example/builder:1"
    mounts = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-v"]
    assert mounts == [
        f"{(tmp_path / 'alpha' / 'dist').resolve()}:/work/dist",
        f"{(tmp_path / 'alpha' / 'manifest.json').resolve()}:/work/manifest.json",
    ]


def test_docker_run_success(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _record_calls(monkeypatch)
    DockerExecutor().run(MANIFEST, PluginWorkspace(tmp_path))
    assert len(calls) == 1
    assert "bn-plugins/plugin-builder:latest" in calls[0]


def test_nonzero_exit_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _record_calls(monkeypatch, returncode=3)
    with pytest.raises(ExecutorError) as exc_info:
        DockerExecutor().run(MANIFEST, PluginWorkspace(tmp_path))
    assert exc_info.value.returncode == 3
    assert exc_info.value.plugin_id == "alpha"


def test_missing_binary_raises(tmp_path: Path) -> None:
    executor = DockerExecutor(docker=str(tmp_path / "no-such-docker"))
    with pytest.raises(ExecutorError) as exc_info:
        executor.run(MANIFEST, PluginWorkspace(tmp_path))
    assert exc_info.value.returncode is None


def test_local_executor_runs_worker_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _record_calls(monkeypatch)
    LocalExecutor().run(MANIFEST, PluginWorkspace(tmp_path / "alpha"))
    assert calls == [
        [sys.executable, "-m", "builder_ci.worker", "--work-dir", str(tmp_path / "alpha")]
    ]
