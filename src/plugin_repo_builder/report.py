"""差分の人間向け表示（changelog行）の生成."""

from __future__ import annotations

from pathlib import Path

from plugin_repo_builder.models import DiffResult, Snapshot

NONE_COMMIT = "<none>"
GITHUB_PREFIX = "https://github.com/"


def _github_link(repository: str, old_commit: str, new_commit: str) -> str | None:
    if not repository.startswith(GITHUB_PREFIX):
        return None
    repo_url = repository.removesuffix(".git")
    if old_commit == NONE_COMMIT:
        return f"{repo_url}/tree/{new_commit}"
    return f"{repo_url}/compare/{old_commit}...{new_commit}"


def format_changes(diff: DiffResult, previous: Snapshot, current: Snapshot) -> list[str]:
    """`id: old -> new` 形式の変更行を生成.

    GitHub上のリポジトリには比較リンク（新規の場合はツリーリンク）を付与する。
    """
    lines = []
    for plugin_id in diff.changed:
        manifest = current[plugin_id]
        prev = previous.get(plugin_id)
        old_commit = prev.commit if prev else NONE_COMMIT
        line = f"{plugin_id}: {old_commit} -> {manifest.commit}"
        link = _github_link(manifest.repository, old_commit, manifest.commit)
        if link:
            line += f" ({link})"
        lines.append(line)

    for plugin_id in diff.deleted:
        prev = previous.get(plugin_id)
        old_commit = prev.commit if prev else NONE_COMMIT
        lines.append(f"{plugin_id}: {old_commit} -> {NONE_COMMIT}")
    return lines


def write_changelog(lines: list[str], output_path: Path) -> None:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
