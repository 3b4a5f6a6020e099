"""プラグインリポジトリの増分ビルド.

- 差分検知（commit比較）
- 隔離環境でのビルドとスロット置換
- 撤去とリポジトリインデックスの再生成
"""

from plugin_repo_builder.diff import diff_snapshots
from plugin_repo_builder.dispatcher import BuildDispatcher
from plugin_repo_builder.executor import (
    CallableExecutor,
    DockerExecutor,
    IsolatedExecutor,
    LocalExecutor,
    PluginWorkspace,
)
from plugin_repo_builder.index import publish_index
from plugin_repo_builder.ledger import InMemoryLedger, StateLedger
from plugin_repo_builder.manifest_store import load_manifests
from plugin_repo_builder.models import DiffResult, Manifest, Snapshot
from plugin_repo_builder.pipeline import RunOutcome, run_pipeline
from plugin_repo_builder.report import format_changes
from plugin_repo_builder.retirement import retire_plugin

__version__ = "0.1.0"

__all__ = [
    "Manifest",
    "Snapshot",
    "DiffResult",
    "load_manifests",
    "StateLedger",
    "InMemoryLedger",
    "diff_snapshots",
    "IsolatedExecutor",
    "PluginWorkspace",
    "DockerExecutor",
    "LocalExecutor",
    "CallableExecutor",
    "BuildDispatcher",
    "retire_plugin",
    "publish_index",
    "format_changes",
    "run_pipeline",
    "RunOutcome",
]
