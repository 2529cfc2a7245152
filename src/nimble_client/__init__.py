"""Nimble Client

Nimbleのユーザー/タスクSOAPサービスに対するプロトコルアダプタです。
レスポンスのラップ方法が一定しないサーバーに対して、Faultの検出・
ペイロードの探索・ドメインモデルへの変換を行います。

Design Reference: DESIGN.md

Example:
    >>> from src.nimble_client import create_client
    >>> client = create_client()
    >>> result = client.login("alice", "secret")
    >>> if result.ok:
    ...     print(result.value.username)
"""

from pathlib import Path
from typing import Optional

from .exceptions import (
    NimbleClientError,
    TransportError,
    ProtocolError,
    RequestError,
    RemoteFault,
    MappingError,
    ConfigurationError,
)
from .config import ServiceConfig
from .logger import setup_logger
from .models import Task, TaskPriority, TaskStatus, User
from .tree import ResponseTree
from .envelope import NIL, SoapRequest, decode_response, encode_request
from .transport import HttpTransport
from .client import AsyncNimbleClient, CallResult, CallState, NimbleClient


__all__ = [
    "NimbleClientError",
    "TransportError",
    "ProtocolError",
    "RequestError",
    "RemoteFault",
    "MappingError",
    "ConfigurationError",
    "ServiceConfig",
    "setup_logger",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
    "ResponseTree",
    "NIL",
    "SoapRequest",
    "decode_response",
    "encode_request",
    "HttpTransport",
    "AsyncNimbleClient",
    "CallResult",
    "CallState",
    "NimbleClient",
    "create_client",
]


def create_client(
    config_path: Optional[Path] = None, configure_logging: bool = True
) -> NimbleClient:
    """
    設定ファイルからNimbleClientを作成するファクトリー関数

    Args:
        config_path: 設定ファイルのパス（省略時はconfig/app_config.yaml）
        configure_logging: 設定のログレベル・ログファイルでロガーを初期化するか

    Returns:
        設定済みのNimbleClientインスタンス

    Raises:
        ConfigurationError: 設定の読み込みに失敗した場合
    """
    config = ServiceConfig.from_yaml(config_path)

    if configure_logging:
        setup_logger(config.log_level, config.log_file)

    return NimbleClient(config=config)
