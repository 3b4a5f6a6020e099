"""builder_ci: CI統合レイヤ.

設定の解決、オーケストレーション、コンテナ内で動くビルドワーカーを提供する。
"""

from builder_ci.config import RunnerConfig, load_config_file, resolve_config
from builder_ci.worker import build_plugin

__version__ = "0.1.0"

__all__ = [
    # config
    "RunnerConfig",
    "load_config_file",
    "resolve_config",
    # worker
    "build_plugin",
]
