"""プラグインマニフェストディレクトリの読み込み."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from plugin_repo_builder.exceptions import ConfigurationError, ManifestError
from plugin_repo_builder.models import Manifest, Snapshot

MANIFEST_SUFFIX = ".json"


def load_manifest_file(manifest_path: Path, plugin_id: str | None = None) -> Manifest:
    """単一のマニフェストJSONを読み込む.

    Args:
        manifest_path: マニフェストJSONファイルパス
        plugin_id: 保存キーから導出したプラグインID

    Returns:
        Manifest
    """
    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ManifestError(f"invalid JSON: {e}", plugin_id, manifest_path) from e
    except OSError as e:
        raise ManifestError(f"cannot read manifest: {e}", plugin_id, manifest_path) from e

    try:
        return Manifest.from_dict(data, plugin_id)
    except ManifestError as e:
        raise ManifestError(str(e), plugin_id, manifest_path) from e


def load_manifests(manifests_dir: Path) -> Snapshot:
    """マニフェストディレクトリから現在のスナップショットを構築.

    `*.json` の通常ファイルのみを対象とし、ファイル名（拡張子除く）をプラグインIDとする。

    Args:
        manifests_dir: マニフェストディレクトリ

    Returns:
        プラグインID順にソートされたスナップショット
    """
    manifests_dir = Path(manifests_dir)
    if not manifests_dir.is_dir():
        raise ConfigurationError("MANIFESTS_PATH", f"{manifests_dir} is not a directory")

    snapshot: Snapshot = {}
    for path in sorted(manifests_dir.iterdir()):
        if not path.is_file() or path.suffix != MANIFEST_SUFFIX:
            continue
        plugin_id = path.stem
        snapshot[plugin_id] = load_manifest_file(path, plugin_id)

    logger.info(f"Loaded {len(snapshot)} plugin manifests from {manifests_dir}")
    return snapshot
