"""隔離実行環境（isolated executor）の抽象と実装.

コアはビルド手順の中身を知らない。ワークスペース（空の dist/ と manifest.json）を渡し、
成果物が dist/ に置かれるか、例外で失敗するかだけを扱う。
"""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from loguru import logger

from plugin_repo_builder.exceptions import ExecutorError
from plugin_repo_builder.models import Manifest

DEFAULT_IMAGE = "bn-plugins/plugin-builder:latest"
CONTAINER_WORK_DIR = "/work"


@dataclass(frozen=True)
class PluginWorkspace:
    """1プラグイン・1実行ごとの専用ワークスペース."""

    root: Path

    @property
    def manifest_path(self) -> Path:
        return self.root / "manifest.json"

    @property
    def dist_dir(self) -> Path:
        return self.root / "dist"


class IsolatedExecutor(Protocol):
    def run(self, manifest: Manifest, workspace: PluginWorkspace) -> None:
        """Build `manifest` into `workspace.dist_dir`, raising ExecutorError on failure."""


def _run_process(plugin_id: str, args: list[str], cwd: Path | None = None) -> None:
    logger.debug(f"Running: {' '.join(args)}")
    try:
        result = subprocess.run(args, cwd=cwd)
    except OSError as e:
        raise ExecutorError(plugin_id, None, str(e)) from e
    if result.returncode != 0:
        raise ExecutorError(plugin_id, result.returncode, args[0])


class DockerExecutor:
    """ビルダーイメージをコンテナで実行する.

    dist/ と manifest.json だけをマウントするため、他プラグインのワークスペースや
    公開ツリーには触れられない。
    """

    def __init__(self, image: str = DEFAULT_IMAGE, docker: str = "docker") -> None:
        self.image = image
        self.docker = docker

    def command(self, workspace: PluginWorkspace) -> list[str]:
        return [
            self.docker,
            "run",
            "--rm",
            "-v",
            f"{workspace.dist_dir.resolve()}:{CONTAINER_WORK_DIR}/dist",
            "-v",
            f"{workspace.manifest_path.resolve()}:{CONTAINER_WORK_DIR}/manifest.json",
            self.image,
        ]

    def run(self, manifest: Manifest, workspace: PluginWorkspace) -> None:
        logger.info(f"Building {manifest.id} in {self.image}")
        _run_process(manifest.id, self.command(workspace))


class LocalExecutor:
    """コンテナを使わずにビルダーワーカーを子プロセスで実行する（開発用）."""

    def __init__(self, python: str | None = None) -> None:
        self.python = python or sys.executable

    def command(self, workspace: PluginWorkspace) -> list[str]:
        return [self.python, "-m", "builder_ci.worker", "--work-dir", str(workspace.root)]

    def run(self, manifest: Manifest, workspace: PluginWorkspace) -> None:
        logger.info(f"Building {manifest.id} locally in {workspace.root}")
        _run_process(manifest.id, self.command(workspace))


class CallableExecutor:
    """任意の関数を executor として扱う（テスト・組み込み用）."""

    def __init__(self, func: Callable[[Manifest, PluginWorkspace], None]) -> None:
        self.func = func

    def run(self, manifest: Manifest, workspace: PluginWorkspace) -> None:
        self.func(manifest, workspace)
