"""
設定管理モジュール

設計ドキュメント参照: DESIGN.md
関連クラス:
  - client.NimbleClient: この設定を使用するファサード
  - transport.HttpTransport: タイムアウト設定を使用
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

DEFAULT_NAMESPACE = "http://ws.nimblev5.nicoceron.com/"
DEFAULT_USER_URL = "http://10.0.2.2:8080/nimblev5-1.0-SNAPSHOT/UserService"
DEFAULT_TASK_URL = "http://10.0.2.2:8080/nimblev5-1.0-SNAPSHOT/TaskService"
DEFAULT_TIMEOUT_MS = 60000


@dataclass(frozen=True)
class ServiceConfig:
    """サービス接続設定（呼び出し間で共有される唯一の状態、読み取り専用）"""

    # ユーザーサービス
    user_url: str = DEFAULT_USER_URL
    user_namespace: str = DEFAULT_NAMESPACE

    # タスクサービス
    task_url: str = DEFAULT_TASK_URL
    task_namespace: str = DEFAULT_NAMESPACE

    # トランスポート
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    # ログ設定
    log_level: str = "INFO"
    log_file: str = "logs/nimble_client.log"

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "ServiceConfig":
        """YAMLファイルから設定を読み込む

        Args:
            config_path: 設定ファイルパス（省略時はconfig/app_config.yamlを使用）

        Returns:
            ServiceConfig: 設定インスタンス

        Raises:
            ConfigurationError: 設定ファイルが見つからない、または形式が不正な場合
        """
        if config_path is None:
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "config" / "app_config.yaml"
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(f"設定ファイルが見つかりません: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_data: Dict[str, Any] = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"設定ファイルの形式が不正です: {e}") from e

        services = yaml_data.get("services", {}) or {}
        user_data = services.get("user", {}) or {}
        task_data = services.get("task", {}) or {}
        transport_data = yaml_data.get("transport", {}) or {}
        log_data = yaml_data.get("log", {}) or {}

        return cls(
            user_url=user_data.get("url", DEFAULT_USER_URL),
            user_namespace=user_data.get("namespace", DEFAULT_NAMESPACE),
            task_url=task_data.get("url", DEFAULT_TASK_URL),
            task_namespace=task_data.get("namespace", DEFAULT_NAMESPACE),
            timeout_ms=int(transport_data.get("timeout_ms", DEFAULT_TIMEOUT_MS)),
            log_level=log_data.get("level", "INFO"),
            log_file=log_data.get("file", "logs/nimble_client.log"),
        )

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """環境変数から設定を読み込む"""
        return cls(
            user_url=os.getenv("NIMBLE_USER_URL", DEFAULT_USER_URL),
            user_namespace=os.getenv("NIMBLE_USER_NAMESPACE", DEFAULT_NAMESPACE),
            task_url=os.getenv("NIMBLE_TASK_URL", DEFAULT_TASK_URL),
            task_namespace=os.getenv("NIMBLE_TASK_NAMESPACE", DEFAULT_NAMESPACE),
            timeout_ms=int(os.getenv("NIMBLE_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "logs/nimble_client.log"),
        )
