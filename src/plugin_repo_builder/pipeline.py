"""変更検知からビルド・撤去・インデックス公開までの一連の処理."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol

from loguru import logger

from plugin_repo_builder.diff import diff_snapshots
from plugin_repo_builder.dispatcher import BuildDispatcher
from plugin_repo_builder.executor import IsolatedExecutor
from plugin_repo_builder.index import publish_index
from plugin_repo_builder.manifest_store import load_manifests
from plugin_repo_builder.models import DiffResult, Snapshot
from plugin_repo_builder.report import format_changes, write_changelog
from plugin_repo_builder.retirement import retire_plugin

LedgerCommit = Literal["after_build", "before_build"]
LEDGER_COMMIT_CHOICES = ("after_build", "before_build")


class Ledger(Protocol):
    def load(self) -> Snapshot: ...

    def save(self, snapshot: Snapshot) -> None: ...


@dataclass(frozen=True)
class RunOutcome:
    diff: DiffResult
    index: dict[str, dict] = field(default_factory=dict)
    report_lines: list[str] = field(default_factory=list)
    noop: bool = False


def _log_ids(title: str, ids: list[str]) -> None:
    if not ids:
        return
    logger.info(title)
    for plugin_id in ids:
        logger.info(f"\t- {plugin_id}")


def run_pipeline(
    manifests_path: Path,
    dist_path: Path,
    work_path: Path,
    ledger: Ledger,
    executor: IsolatedExecutor,
    changes_path: Path | None = None,
    ledger_commit: LedgerCommit = "after_build",
    changelog_path: Path | None = None,
) -> RunOutcome:
    """1回分の増分ビルドを実行.

    Args:
        manifests_path: マニフェストディレクトリ
        dist_path: 公開ツリーのルート
        work_path: ワークスペースのルート（実行ごとに空にされる）
        ledger: 前回スナップショットの読み書き先
        executor: 隔離実行環境
        changes_path: 変更エクスポートツリーのルート（任意）
        ledger_commit: レジャーを書き込むタイミング。
            "after_build" はビルド・撤去・インデックス公開が全て成功した後、
            "before_build" はビルド開始前（途中失敗時に公開ツリーとずれる）
        changelog_path: 変更行を書き出すファイル（任意）

    Returns:
        RunOutcome

    Raises:
        BuildError: いずれかのプラグインのビルドが失敗した場合（以降は処理しない）
    """
    if ledger_commit not in LEDGER_COMMIT_CHOICES:
        raise ValueError(f"Unknown ledger_commit: {ledger_commit}")

    current = load_manifests(manifests_path)
    previous = ledger.load()

    diff = diff_snapshots(previous, current)
    if diff.is_empty:
        logger.info("No changes detected")
        return RunOutcome(diff=diff, noop=True)

    _log_ids("Changed plugins:", diff.changed)
    _log_ids("Deleted plugins:", diff.deleted)

    if ledger_commit == "before_build":
        ledger.save(current)

    dispatcher = BuildDispatcher(executor, work_path, dist_path, changes_path)
    dispatcher.prepare()

    for plugin_id in diff.changed:
        dispatcher.build(current[plugin_id])

    report_lines = format_changes(diff, previous, current)
    for line in report_lines:
        logger.info(line)

    for plugin_id in diff.deleted:
        retire_plugin(dist_path, plugin_id)

    index = publish_index(dist_path)

    if ledger_commit == "after_build":
        ledger.save(current)

    if changelog_path is not None:
        write_changelog(report_lines, changelog_path)

    return RunOutcome(diff=diff, index=index, report_lines=report_lines)
