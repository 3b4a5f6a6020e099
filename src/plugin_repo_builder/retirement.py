"""削除されたプラグインのスロット撤去."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from plugin_repo_builder.dispatcher import plugins_root, remove_path


def retire_plugin(dist_path: Path, plugin_id: str) -> bool:
    """公開ツリーから `plugin_id` のスロットを削除する.

    存在しないスロットの削除は何もしない。ディレクトリ以外（ファイルやリンク）も削除する。
    変更エクスポートツリーには触れない。

    Returns:
        スロットを削除した場合 True
    """
    slot = plugins_root(dist_path) / plugin_id
    if not remove_path(slot):
        logger.debug(f"No slot to retire for {plugin_id}")
        return False

    logger.info(f"Retired {plugin_id} from {slot}")
    return True
