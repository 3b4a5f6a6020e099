"""Plugin repository builder exceptions.

実行を中断させる致命的エラーのクラスを定義します。
"""

from __future__ import annotations

from pathlib import Path


class PluginRepoError(Exception):
    """plugin_repo_builder の全例外の基底クラス."""


class ConfigurationError(PluginRepoError):
    """必須の設定値（パス等）が未設定または不正な場合の例外.

    出力ツリーやレジャーを変更する前に送出される。

    Attributes:
        name: 問題のある設定名（環境変数名など）
        reason: 詳細
    """

    def __init__(self, name: str, reason: str = "is not set") -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Missing or invalid configuration {name}: {reason}")


class ManifestError(PluginRepoError):
    """プラグインマニフェストの読み込み・検証に失敗した場合の例外.

    Attributes:
        plugin_id: 対象プラグインID（判明している場合）
        path: マニフェストファイルパス（判明している場合）
    """

    def __init__(self, message: str, plugin_id: str | None = None, path: Path | None = None) -> None:
        self.plugin_id = plugin_id
        self.path = path
        location = f" ({path})" if path else ""
        prefix = f"{plugin_id}: " if plugin_id else ""
        super().__init__(f"{prefix}{message}{location}")


class BuildError(PluginRepoError):
    """プラグインのビルドが失敗した場合の例外.

    1つのプラグインの失敗で実行全体を中断する。

    Attributes:
        plugin_id: 失敗したプラグインID
    """

    def __init__(self, plugin_id: str, message: str) -> None:
        self.plugin_id = plugin_id
        super().__init__(f"Build failed for {plugin_id}: {message}")


class ExecutorError(BuildError):
    """隔離実行環境（docker等）が異常終了した場合の例外.

    Attributes:
        plugin_id: 失敗したプラグインID
        returncode: プロセスの終了コード（起動自体に失敗した場合は None）
    """

    def __init__(self, plugin_id: str, returncode: int | None, detail: str = "") -> None:
        self.returncode = returncode
        if returncode is None:
            message = f"executor could not be started{': ' + detail if detail else ''}"
        else:
            message = f"process exited with code {returncode}{' (' + detail + ')' if detail else ''}"
        super().__init__(plugin_id, message)


class EmptyBuildOutputError(BuildError):
    """ビルドは成功したが成果物ディレクトリが空だった場合の例外.

    空の出力はビルドコマンドの誤設定とみなし、実行失敗と同等に扱う。

    Attributes:
        plugin_id: 対象プラグインID
        dist_dir: 空だった成果物ディレクトリ
    """

    def __init__(self, plugin_id: str, dist_dir: Path) -> None:
        self.dist_dir = dist_dir
        super().__init__(plugin_id, f"plugin dist {dist_dir} is empty")


class IndexPublishError(PluginRepoError):
    """リポジトリインデックス（repo.json）の生成に失敗した場合の例外.

    Attributes:
        plugin_id: 読み込めなかったスロットのID
        manifest_path: 読み込もうとしたマニフェストのパス
    """

    def __init__(self, plugin_id: str, manifest_path: Path, reason: str) -> None:
        self.plugin_id = plugin_id
        self.manifest_path = manifest_path
        super().__init__(f"Cannot read published manifest for {plugin_id} ({manifest_path}): {reason}")
