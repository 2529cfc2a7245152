"""Nimble Clientのカスタム例外定義

このモジュールは、プロトコルアダプタの各層で使用される
例外クラスを定義します。ファサード(client.NimbleClient)はこれらを
捕捉し、CallResultとして呼び出し元へ返します。

Design Reference: DESIGN.md
"""

from typing import Optional


class NimbleClientError(Exception):
    """Nimble Client基底例外"""

    pass


class TransportError(NimbleClientError):
    """ネットワーク・タイムアウトなどの通信エラー"""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ProtocolError(NimbleClientError):
    """レスポンスが有効なエンベロープとして解釈できない"""

    pass


class RequestError(ProtocolError):
    """リクエストをエンコードできない"""

    pass


class RemoteFault(NimbleClientError):
    """サーバーが明示的に返したビジネスエラー"""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class MappingError(NimbleClientError):
    """ペイロードはあるが、必須フィールドを満たすレコードがない"""

    pass


class ConfigurationError(NimbleClientError):
    """設定エラー"""

    pass
