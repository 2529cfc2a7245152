"""nimble_clientテスト共通のフィクスチャ"""

from typing import Callable
from unittest.mock import Mock

import pytest

ENVELOPE_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<S:Envelope xmlns:S="http://schemas.xmlsoap.org/soap/envelope/">'
    "<S:Body>{body}</S:Body>"
    "</S:Envelope>"
)


@pytest.fixture
def soap_body() -> Callable[[str], bytes]:
    """Body部分のXMLからSOAPレスポンスのバイト列を作る"""

    def build(body: str) -> bytes:
        return ENVELOPE_TEMPLATE.format(body=body).encode("utf-8")

    return build


@pytest.fixture
def http_response() -> Callable[..., Mock]:
    """requests.Responseのモックを作る"""

    def build(content: bytes, status_code: int = 200) -> Mock:
        response = Mock()
        response.content = content
        response.status_code = status_code
        response.raise_for_status = Mock()
        return response

    return build
