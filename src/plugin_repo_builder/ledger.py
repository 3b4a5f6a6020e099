"""State ledger (state.json) の永続化."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from loguru import logger

from plugin_repo_builder.exceptions import ManifestError
from plugin_repo_builder.models import Snapshot, snapshot_from_dict, snapshot_to_dict


class StateLedger:
    """最後に適用したスナップショットをJSONファイルとして保持する.

    Args:
        path: レジャーファイルのパス（通常 `<dist>/state.json`）
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Snapshot:
        """前回スナップショットを読み込む. ファイルがなければ空."""
        if not self.path.exists():
            logger.info(f"No state ledger at {self.path}, treating every plugin as new")
            return {}

        with open(self.path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ManifestError(f"state ledger is not valid JSON: {e}", path=self.path) from e

        snapshot = snapshot_from_dict(data)
        logger.info(f"Loaded state ledger with {len(snapshot)} plugins from {self.path}")
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        """スナップショット全体で上書き.

        同一ディレクトリの一時ファイルに書き出してから置き換える。
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".state-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot_to_dict(snapshot), f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"State ledger written to {self.path} ({len(snapshot)} plugins)")


class InMemoryLedger:
    """StateLedger と同じインターフェースのメモリ実装."""

    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self.snapshot: Snapshot = dict(snapshot or {})
        self.saves = 0

    def load(self) -> Snapshot:
        return dict(self.snapshot)

    def save(self, snapshot: Snapshot) -> None:
        self.snapshot = dict(snapshot)
        self.saves += 1
