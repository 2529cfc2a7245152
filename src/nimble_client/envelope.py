"""
SOAPエンベロープのエンコード/デコード

送信側: メソッド名・名前空間・順序付きパラメータからSOAP 1.1エンベロープを生成
受信側: レスポンスのBodyをResponseTree / スカラー / 空(None) に変換

関連クラス:
  - tree.ResponseTree: デコード結果
  - transport.HttpTransport: エンコード結果を送信
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from .exceptions import ProtocolError
from .tree import ResponseTree, Value

logger = logging.getLogger(__name__)

SOAP_ENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XSD_NS = "http://www.w3.org/2001/XMLSchema"


class _Nil:
    """明示的なnullマーカー（xsi:nil="true"として送信）"""

    def __repr__(self) -> str:
        return "NIL"


NIL = _Nil()


@dataclass
class SoapRequest:
    """送信するRPC呼び出し1件分"""

    namespace: str
    method_name: str
    params: List[Tuple[str, Any]] = field(default_factory=list)

    @property
    def action(self) -> str:
        return self.namespace + self.method_name

    def add(self, name: str, value: Any) -> "SoapRequest":
        """パラメータを追加（Noneは送信時に省略、NILはnullマーカー）"""
        self.params.append((name, value))
        return self


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def encode_request(request: SoapRequest) -> bytes:
    """SoapRequestをSOAP 1.1エンベロープのバイト列に変換"""
    envelope = ET.Element(
        "soap:Envelope",
        {
            "xmlns:soap": SOAP_ENV_NS,
            "xmlns:xsi": XSI_NS,
            "xmlns:xsd": XSD_NS,
        },
    )
    ET.SubElement(envelope, "soap:Header")
    body = ET.SubElement(envelope, "soap:Body")
    method = ET.SubElement(body, f"n0:{request.method_name}", {"xmlns:n0": request.namespace})

    for name, value in request.params:
        if value is None:
            continue
        if value is NIL:
            ET.SubElement(method, name, {"xsi:nil": "true"})
            continue
        child = ET.SubElement(method, name)
        child.text = _format_value(value)

    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _is_nil(element: ET.Element) -> bool:
    nil = element.get(f"{{{XSI_NS}}}nil")
    return nil is not None and nil.strip().lower() in ("true", "1")


def _decode_element(element: ET.Element) -> Value:
    if _is_nil(element):
        return None
    children = list(element)
    if children:
        return ResponseTree(
            _local_name(element.tag),
            [(_local_name(child.tag), _decode_element(child)) for child in children],
        )
    return element.text or ""


def decode_response(raw: bytes) -> Union[ResponseTree, str, None]:
    """
    レスポンスのバイト列をデコード

    Returns:
        ResponseTree（構造化レスポンス）、str（スカラーのみのBody）、
        None（空Body・voidレスポンス）

    Raises:
        ProtocolError: XMLとして解釈できない、またはEnvelope/Bodyがない場合
    """
    if not raw or not raw.strip():
        logger.debug("Empty response payload, treating as void body")
        return None

    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise ProtocolError(f"レスポンスをXMLとして解析できません: {e}") from e

    if _local_name(root.tag) != "Envelope":
        raise ProtocolError(f"SOAP Envelopeではありません: <{_local_name(root.tag)}>")

    body: Optional[ET.Element] = None
    for child in root:
        if _local_name(child.tag) == "Body":
            body = child
            break
    if body is None:
        raise ProtocolError("SOAP Bodyが見つかりません")

    elements = list(body)
    if not elements:
        logger.debug("SOAP Body is empty (void response)")
        return None
    if len(elements) > 1:
        logger.debug("SOAP Body has %d elements, decoding the first one", len(elements))

    top = elements[0]
    decoded = _decode_element(top)
    if isinstance(decoded, str) and not decoded.strip():
        # 空の応答要素は空ツリーとして扱う
        return ResponseTree(_local_name(top.tag))
    return decoded
