"""CI orchestrator: detect changed plugins, rebuild them, retire removed ones, and republish the index."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from builder_ci.config import EXECUTOR_CHOICES, RunnerConfig, resolve_config
from plugin_repo_builder.exceptions import PluginRepoError
from plugin_repo_builder.executor import DockerExecutor, IsolatedExecutor, LocalExecutor
from plugin_repo_builder.ledger import StateLedger
from plugin_repo_builder.pipeline import LEDGER_COMMIT_CHOICES, RunOutcome, run_pipeline


def _make_executor(config: RunnerConfig) -> IsolatedExecutor:
    if config.executor == "local":
        return LocalExecutor()
    return DockerExecutor(image=config.docker_image)


def orchestrate(config: RunnerConfig) -> RunOutcome:
    logger.info(f"=== Plugin build start: {config.manifests_path} -> {config.dist_path} ===")
    outcome = run_pipeline(
        manifests_path=config.manifests_path,
        dist_path=config.dist_path,
        work_path=config.work_path,
        ledger=StateLedger(config.state_path),
        executor=_make_executor(config),
        changes_path=config.changes_path,
        ledger_commit=config.ledger_commit,
        changelog_path=config.changelog_path,
    )
    if not outcome.noop:
        logger.info(
            f"=== Plugin build done: {len(outcome.diff.changed)} built, "
            f"{len(outcome.diff.deleted)} retired, {len(outcome.index)} published ==="
        )
    return outcome


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="Incremental plugin repository builder")
    p.add_argument("--config", type=Path, default=None, help="builder.yml path")
    p.add_argument("--manifests-path", type=Path, default=None, help="manifest directory (env: MANIFESTS_PATH)")
    p.add_argument("--dist-path", type=Path, default=None, help="published output root (env: DIST_PATH)")
    p.add_argument("--work-path", type=Path, default=None, help="build workspace root (env: WORK_PATH)")
    p.add_argument(
        "--changes-path",
        type=Path,
        default=None,
        help="export root for plugins built in this run (env: CHANGES_PATH)",
    )
    p.add_argument("--executor", choices=EXECUTOR_CHOICES, default=None, help="isolated executor")
    p.add_argument("--docker-image", default=None, help="builder image (env: BUILDER_IMAGE)")
    p.add_argument(
        "--ledger-commit",
        choices=LEDGER_COMMIT_CHOICES,
        default=None,
        help="when to overwrite state.json (default: after_build)",
    )
    p.add_argument("--changelog", type=Path, default=None, help="write change lines to this file")
    p.add_argument("--verbose", action="store_true", help="debug logging")

    args = p.parse_args(argv)

    if args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")

    try:
        config = resolve_config(
            overrides={
                "manifests_path": args.manifests_path,
                "dist_path": args.dist_path,
                "work_path": args.work_path,
                "changes_path": args.changes_path,
                "executor": args.executor,
                "docker_image": args.docker_image,
                "ledger_commit": args.ledger_commit,
                "changelog_path": args.changelog,
            },
            config_yml=args.config,
        )
        orchestrate(config)
    except (PluginRepoError, OSError) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
