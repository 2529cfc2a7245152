"""
ロギング設定モジュール

設計ドキュメント参照: DESIGN.md

クライアントの各モジュールは logging.getLogger(__name__) でロガーを取得し、
出力先とレベルはここでまとめて設定する。
"""

import logging
from pathlib import Path
from typing import List, Optional

from .exceptions import ConfigurationError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP接続プールのログ（接続ごとに出力される）
NOISY_LOGGERS = ("urllib3",)


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"不明なログレベルです: {log_level}")
    return level


def setup_logger(log_level: str = "INFO", log_file: Optional[str] = "logs/nimble_client.log") -> None:
    """
    ロガーのセットアップ

    Args:
        log_level: ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: ログファイルのパス（空またはNoneの場合はコンソールのみ）

    Raises:
        ConfigurationError: ログレベルが不明な場合
    """
    level = _resolve_level(log_level)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)

    # DEBUG時のSOAPエンベロープ出力に接続ログが混ざらないようにする
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
