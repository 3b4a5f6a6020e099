"""変更されたプラグインのビルドと公開ツリーへの反映."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

from loguru import logger

from plugin_repo_builder.exceptions import EmptyBuildOutputError
from plugin_repo_builder.executor import IsolatedExecutor, PluginWorkspace
from plugin_repo_builder.models import Manifest


def plugins_root(dist_path: Path) -> Path:
    return Path(dist_path) / "plugins"


def remove_path(path: Path) -> bool:
    """ディレクトリは再帰的に、ファイルやシンボリックリンクは単体で削除する.

    Returns:
        何かを削除した場合 True
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink(missing_ok=True)
        return True
    return False


def _reset_dir(path: Path) -> None:
    remove_path(path)
    path.mkdir(parents=True)


class BuildDispatcher:
    """プラグインを1つずつビルドし、スロットを丸ごと置き換える.

    Args:
        executor: 隔離実行環境
        work_path: 実行ごとのワークスペースのルート
        dist_path: 公開ツリーのルート（スロットは `<dist>/plugins/<id>`）
        changes_path: 変更エクスポートツリーのルート（任意）
    """

    def __init__(
        self,
        executor: IsolatedExecutor,
        work_path: Path,
        dist_path: Path,
        changes_path: Path | None = None,
    ) -> None:
        self.executor = executor
        self.work_path = Path(work_path)
        self.dist_path = Path(dist_path)
        self.changes_path = Path(changes_path) if changes_path else None

    def prepare(self) -> None:
        """ワークスペースと変更エクスポートツリーを空の状態にする."""
        _reset_dir(self.work_path)
        if self.changes_path is not None:
            _reset_dir(self.changes_path)

    def workspace_for(self, plugin_id: str) -> PluginWorkspace:
        return PluginWorkspace(self.work_path / plugin_id)

    def build(self, manifest: Manifest) -> Path:
        """1プラグインをビルドして公開する.

        Args:
            manifest: ビルド対象のマニフェスト

        Returns:
            公開されたスロットのパス

        Raises:
            ExecutorError: executor が失敗した場合
            EmptyBuildOutputError: 成果物が空だった場合
        """
        plugin_id = manifest.id
        workspace = self.workspace_for(plugin_id)
        remove_path(workspace.root)
        workspace.dist_dir.mkdir(parents=True)

        with open(workspace.manifest_path, "w", encoding="utf-8") as f:
            json.dump(manifest.to_dict(), f, indent=2, ensure_ascii=False)

        self.executor.run(manifest, workspace)

        if not any(workspace.dist_dir.iterdir()):
            raise EmptyBuildOutputError(plugin_id, workspace.dist_dir)

        slot = self.publish(plugin_id, workspace.dist_dir)
        self.export_change(plugin_id, workspace.dist_dir)
        return slot

    def publish(self, plugin_id: str, artifacts: Path) -> Path:
        """スロットを削除してから成果物一式をコピーする."""
        slot = plugins_root(self.dist_path) / plugin_id
        remove_path(slot)
        slot.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(artifacts, slot)
        logger.info(f"Published {plugin_id} to {slot}")
        return slot

    def export_change(self, plugin_id: str, artifacts: Path) -> None:
        if self.changes_path is None:
            return
        target = self.changes_path / plugin_id
        try:
            shutil.copytree(artifacts, target, dirs_exist_ok=True)
        except OSError as e:
            logger.warning(f"Failed to export changes for {plugin_id} to {target}: {e}")
