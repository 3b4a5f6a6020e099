"""単一プラグインのビルドワーカー.

ビルダーイメージのエントリポイント。`<work>/manifest.json` を読み、リポジトリを
固定commitでcloneしてビルドコマンドを実行し、成果物を `<work>/dist` にコピーする。
"""

from __future__ import annotations

import argparse
import shutil
import subprocess
import sys
from pathlib import Path

from loguru import logger

from plugin_repo_builder.exceptions import EmptyBuildOutputError, ExecutorError, PluginRepoError
from plugin_repo_builder.manifest_store import load_manifest_file
from plugin_repo_builder.models import Manifest


def _run(plugin_id: str, args: list[str] | str, cwd: Path | None = None, shell: bool = False) -> None:
    try:
        subprocess.run(args, cwd=cwd, shell=shell, check=True)
    except subprocess.CalledProcessError as e:
        raise ExecutorError(plugin_id, e.returncode, str(e.cmd)) from e
    except OSError as e:
        raise ExecutorError(plugin_id, None, str(e)) from e


def build_plugin(manifest: Manifest, work_dir: Path) -> Path:
    """リポジトリをclone・checkoutしてビルドし、成果物を `<work>/dist` に集める.

    Args:
        manifest: ビルド対象のマニフェスト
        work_dir: 作業ディレクトリ（`git/` と `dist/` を配下に作る）

    Returns:
        成果物ディレクトリ
    """
    work_dir = Path(work_dir)
    git_dir = work_dir / "git"
    dist_dir = work_dir / "dist"

    if git_dir.exists():
        logger.warning(f"Removing existing checkout: {git_dir}")
        shutil.rmtree(git_dir)
    work_dir.mkdir(parents=True, exist_ok=True)

    logger.info(f"Cloning {manifest.id} from {manifest.repository}")
    _run(manifest.id, ["git", "clone", manifest.repository, str(git_dir)])
    _run(manifest.id, ["git", "checkout", manifest.commit], cwd=git_dir)
    logger.info(f"Checked out {manifest.id} at commit {manifest.commit[:8]}")

    logger.info(f"Running build command: {manifest.command}")
    _run(manifest.id, manifest.command, cwd=git_dir, shell=True)

    output_dir = git_dir / manifest.resolved_dist_folder
    if not output_dir.is_dir():
        raise EmptyBuildOutputError(manifest.id, output_dir)

    shutil.copytree(output_dir, dist_dir, dirs_exist_ok=True)
    logger.info(f"Copied build output from {output_dir} to {dist_dir}")
    return dist_dir


def main() -> None:
    p = argparse.ArgumentParser(description="Build a single plugin from its manifest")
    p.add_argument(
        "--work-dir",
        type=Path,
        default=Path("/work"),
        help="directory holding manifest.json; receives git/ and dist/",
    )
    args = p.parse_args()

    try:
        manifest = load_manifest_file(args.work_dir / "manifest.json")
        build_plugin(manifest, args.work_dir)
    except PluginRepoError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
