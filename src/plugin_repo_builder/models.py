"""マニフェスト・スナップショット・差分結果のデータモデル."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from plugin_repo_builder.exceptions import ManifestError

REQUIRED_FIELDS = ("repository", "commit", "command")


@dataclass(frozen=True)
class Manifest:
    """1プラグインのビルド元を表すマニフェスト.

    `commit` が変更検知の唯一のフィンガープリントとなる。
    未知のキーは `extra` に保持し、ディスクへの書き戻しで失われないようにする。
    """

    id: str
    repository: str
    commit: str
    command: str
    dist_folder: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict, plugin_id: str | None = None) -> Manifest:
        """JSON辞書からマニフェストを生成.

        Args:
            data: マニフェストのJSON辞書
            plugin_id: 保存キー（ファイル名）から導出したID。指定時は `data["id"]` と一致する必要がある

        Returns:
            Manifest
        """
        if not isinstance(data, dict):
            raise ManifestError(f"manifest must be an object, got {type(data).__name__}", plugin_id)

        record_id = data.get("id")
        if plugin_id is not None and record_id is not None and record_id != plugin_id:
            raise ManifestError(f"manifest id {record_id!r} does not match storage key", plugin_id)
        resolved_id = plugin_id if plugin_id is not None else record_id
        if not resolved_id:
            raise ManifestError("manifest has no id")

        missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
        if missing:
            raise ManifestError(f"missing required fields: {', '.join(missing)}", resolved_id)

        known = {"id", "distFolder", *REQUIRED_FIELDS}
        return cls(
            id=resolved_id,
            repository=data["repository"],
            commit=str(data["commit"]),
            command=data["command"],
            dist_folder=data.get("distFolder"),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "repository": self.repository,
            "commit": self.commit,
            "command": self.command,
        }
        if self.dist_folder is not None:
            data["distFolder"] = self.dist_folder
        data.update(self.extra)
        return data

    @property
    def resolved_dist_folder(self) -> str:
        return self.dist_folder or f"dist/plugins/{self.id}"


# plugin id -> manifest
Snapshot = dict[str, Manifest]


@dataclass(frozen=True)
class DiffResult:
    """前回スナップショットとの差分.

    `changed` と `deleted` は互いに素。変更のないIDはどちらにも含まれない。
    """

    changed: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.changed and not self.deleted


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    return {plugin_id: manifest.to_dict() for plugin_id, manifest in snapshot.items()}


def snapshot_from_dict(data: dict) -> Snapshot:
    return {plugin_id: Manifest.from_dict(record, plugin_id) for plugin_id, record in data.items()}
