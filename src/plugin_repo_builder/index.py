"""リポジトリインデックス（repo.json）の再生成."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from plugin_repo_builder.dispatcher import plugins_root
from plugin_repo_builder.exceptions import IndexPublishError

INDEX_FILENAME = "repo.json"
SLOT_MANIFEST = "manifest.json"


def _read_slot_version(plugin_id: str, slot: Path) -> object | None:
    manifest_path = slot / SLOT_MANIFEST
    try:
        with open(manifest_path, encoding="utf-8") as f:
            manifest = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise IndexPublishError(plugin_id, manifest_path, str(e)) from e
    if not isinstance(manifest, dict):
        raise IndexPublishError(plugin_id, manifest_path, "manifest is not an object")
    return manifest.get("version")


def publish_index(dist_path: Path) -> dict[str, dict]:
    """公開ツリーを走査して repo.json を丸ごと書き直す.

    メモリ上の状態ではなくディスク上のスロットから導出するため、インデックスは
    実際に公開されているものと常に一致する。

    Args:
        dist_path: 公開ツリーのルート

    Returns:
        {plugin_id: {"version": ...}}
    """
    dist_path = Path(dist_path)
    index_path = dist_path / INDEX_FILENAME
    index_path.unlink(missing_ok=True)

    root = plugins_root(dist_path)
    repo: dict[str, dict] = {}
    if root.is_dir():
        for slot in sorted(root.iterdir()):
            if slot.is_symlink() or not slot.is_dir():
                continue
            repo[slot.name] = {"version": _read_slot_version(slot.name, slot)}

    dist_path.mkdir(parents=True, exist_ok=True)
    with open(index_path, "w", encoding="utf-8") as f:
        json.dump(repo, f, indent=2, ensure_ascii=False)

    logger.info(f"Repository index written to {index_path} ({len(repo)} plugins)")
    return repo
