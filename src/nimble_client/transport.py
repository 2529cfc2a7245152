"""HTTP transport for SOAP calls."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .exceptions import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 60000


class HttpTransport:
    """
    SOAPエンベロープをHTTP POSTで送信するトランスポート

    リトライは行わない（リトライ方針は呼び出し側の責務）
    """

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS, session: Optional[requests.Session] = None):
        """
        Args:
            timeout_ms: タイムアウト（ミリ秒）
            session: 使用するrequests.Session（Noneの場合はrequests.postを直接使用）
        """
        self.timeout_ms = timeout_ms
        self.session = session

    def send(self, url: str, action: str, envelope: bytes) -> bytes:
        """
        エンベロープを送信し、レスポンスのバイト列を返す

        Args:
            url: サービスのエンドポイント
            action: SOAPAction（名前空間 + メソッド名）
            envelope: エンコード済みのリクエスト

        Returns:
            レスポンスボディ

        Raises:
            TransportError: タイムアウト・接続失敗・想定外のHTTPステータス
        """
        headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": f'"{action}"',
        }
        post = self.session.post if self.session is not None else requests.post

        logger.debug(f"POST {url} (SOAPAction={action}, timeout={self.timeout_ms}ms)")
        try:
            response = post(
                url,
                data=envelope,
                headers=headers,
                timeout=self.timeout_ms / 1000,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"SOAP call timed out after {self.timeout_ms}ms: {action}")
            raise TransportError(f"タイムアウトしました: {self.timeout_ms}ms", cause=e) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"SOAP call failed for action '{action}': {e}")
            raise TransportError(f"通信に失敗しました: {e}", cause=e) from e

        # SOAP 1.1のFaultはHTTP 500で返る
        if response.status_code == 500:
            logger.debug("HTTP 500 received, passing body on for fault detection")
            return response.content

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            logger.error(f"Unexpected HTTP status {response.status_code} for action '{action}'")
            raise TransportError(f"HTTPエラー: {response.status_code}", cause=e) from e

        return response.content
