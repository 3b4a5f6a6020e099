"""スナップショット間の差分計算."""

from __future__ import annotations

from loguru import logger

from plugin_repo_builder.models import DiffResult, Snapshot


def diff_snapshots(previous: Snapshot, current: Snapshot) -> DiffResult:
    """前回スナップショットと現在のマニフェストを比較.

    `commit` のみを比較する。`command` や `repository` だけが変わった場合は変更なし扱い。

    Args:
        previous: レジャーから読み込んだ前回スナップショット
        current: マニフェストストアから読み込んだ現在のスナップショット

    Returns:
        changed（追加・commit変更）と deleted（前回のみに存在）
    """
    changed = []
    for plugin_id, manifest in current.items():
        prev = previous.get(plugin_id)
        if prev is None or prev.commit != manifest.commit:
            changed.append(plugin_id)

    deleted = [plugin_id for plugin_id in previous if plugin_id not in current]

    unchanged = len(current) - len(changed)
    logger.info(
        f"Revision comparison: {len(changed)} changed, {len(deleted)} deleted, {unchanged} unchanged"
    )
    return DiffResult(changed=changed, deleted=deleted)
