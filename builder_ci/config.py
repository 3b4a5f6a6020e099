"""Runner configuration: CLI flags, environment variables, and builder.yml."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml
from loguru import logger

from plugin_repo_builder.exceptions import ConfigurationError
from plugin_repo_builder.executor import DEFAULT_IMAGE
from plugin_repo_builder.pipeline import LEDGER_COMMIT_CHOICES

EXECUTOR_CHOICES = ("docker", "local")

# config key -> environment variable
ENV_VARS = {
    "manifests_path": "MANIFESTS_PATH",
    "dist_path": "DIST_PATH",
    "work_path": "WORK_PATH",
    "changes_path": "CHANGES_PATH",
    "docker_image": "BUILDER_IMAGE",
}
REQUIRED_PATHS = ("manifests_path", "dist_path", "work_path")
PATH_KEYS = ("manifests_path", "dist_path", "work_path", "changes_path", "changelog_path")


@dataclass(frozen=True)
class RunnerConfig:
    manifests_path: Path
    dist_path: Path
    work_path: Path
    changes_path: Path | None = None
    executor: str = "docker"
    docker_image: str = DEFAULT_IMAGE
    ledger_commit: str = "after_build"
    changelog_path: Path | None = None

    @property
    def state_path(self) -> Path:
        return self.dist_path / "state.json"


def load_config_file(config_yml: Path) -> dict:
    """builder.yml の `runner:` セクションを読み込む."""
    if not config_yml.exists():
        raise ConfigurationError("--config", f"{config_yml} does not exist")
    with open(config_yml, encoding="utf-8") as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError("--config", f"{config_yml} is not valid YAML: {e}") from e
    if not isinstance(config, dict):
        raise ConfigurationError("--config", f"expected a mapping at the top of {config_yml}")
    runner = config.get("runner") or {}
    if not isinstance(runner, dict):
        raise ConfigurationError("runner", f"expected a mapping in {config_yml}")
    unknown = set(runner) - set(RunnerConfig.__dataclass_fields__)
    if unknown:
        logger.warning(f"Ignoring unknown runner keys in {config_yml}: {sorted(unknown)}")
    logger.info(f"Loaded runner config from {config_yml}")
    return {k: v for k, v in runner.items() if k not in unknown}


def resolve_config(
    overrides: Mapping[str, object] | None = None,
    config_yml: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> RunnerConfig:
    """CLI > 環境変数 > builder.yml > デフォルト の順で設定を解決する."""
    environ = os.environ if environ is None else environ
    values: dict[str, object] = {}

    if config_yml is not None:
        values.update(load_config_file(config_yml))

    for key, env_name in ENV_VARS.items():
        if environ.get(env_name):
            values[key] = environ[env_name]

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    for key in REQUIRED_PATHS:
        if not values.get(key):
            raise ConfigurationError(ENV_VARS[key])

    for key in PATH_KEYS:
        if values.get(key):
            values[key] = Path(values[key])
        else:
            values.pop(key, None)

    if values.get("executor", "docker") not in EXECUTOR_CHOICES:
        raise ConfigurationError("executor", f"must be one of {', '.join(EXECUTOR_CHOICES)}")
    if values.get("ledger_commit", "after_build") not in LEDGER_COMMIT_CHOICES:
        raise ConfigurationError("ledger_commit", f"must be one of {', '.join(LEDGER_COMMIT_CHOICES)}")

    return RunnerConfig(**values)
