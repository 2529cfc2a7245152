"""エンベロープのエンコード/デコードのテスト"""

import xml.etree.ElementTree as ET

import pytest

from src.nimble_client.envelope import (
    NIL,
    SOAP_ENV_NS,
    XSI_NS,
    SoapRequest,
    decode_response,
    encode_request,
)
from src.nimble_client.exceptions import ProtocolError
from src.nimble_client.models import TaskPriority
from src.nimble_client.tree import ResponseTree

NAMESPACE = "http://ws.nimblev5.nicoceron.com/"


def _method_element(raw: bytes) -> ET.Element:
    root = ET.fromstring(raw)
    body = root.find(f"{{{SOAP_ENV_NS}}}Body")
    assert body is not None
    return list(body)[0]


class TestEncodeRequest:
    """encode_requestのテスト"""

    def test_action(self) -> None:
        request = SoapRequest(NAMESPACE, "loginUser")
        assert request.action == "http://ws.nimblev5.nicoceron.com/loginUser"

    def test_method_and_parameter_order(self) -> None:
        """パラメータは追加順に出力される"""
        request = (
            SoapRequest(NAMESPACE, "registerUser")
            .add("username", "alice")
            .add("email", "alice@example.com")
            .add("plainPassword", "secret")
        )

        method = _method_element(encode_request(request))

        assert method.tag == f"{{{NAMESPACE}}}registerUser"
        assert [child.tag for child in method] == ["username", "email", "plainPassword"]
        assert [child.text for child in method] == ["alice", "alice@example.com", "secret"]

    def test_value_formatting(self) -> None:
        request = (
            SoapRequest(NAMESPACE, "m")
            .add("userId", 3)
            .add("priority", TaskPriority.HIGH)
            .add("flag", True)
        )

        method = _method_element(encode_request(request))

        assert [child.text for child in method] == ["3", "HIGH", "true"]

    def test_none_is_omitted_and_nil_is_sent(self) -> None:
        """Noneは省略、NILはxsi:nil付きで送信"""
        request = (
            SoapRequest(NAMESPACE, "updateTask")
            .add("taskId", 1)
            .add("note", None)
            .add("dueDate", NIL)
        )

        method = _method_element(encode_request(request))

        assert [child.tag for child in method] == ["taskId", "dueDate"]
        due_date = method.find("dueDate")
        assert due_date.get(f"{{{XSI_NS}}}nil") == "true"
        assert not due_date.text

    def test_special_characters_are_escaped(self) -> None:
        request = SoapRequest(NAMESPACE, "m").add("title", "<Buy> milk & eggs")

        raw = encode_request(request)

        assert b"&lt;Buy&gt; milk &amp; eggs" in raw
        assert _method_element(raw).find("title").text == "<Buy> milk & eggs"


class TestDecodeResponse:
    """decode_responseのテスト"""

    def test_structured_response(self, soap_body) -> None:
        raw = soap_body(
            '<ns2:getTasksForUserResponse xmlns:ns2="http://ws.nimblev5.nicoceron.com/">'
            "<return><taskId>1</taskId><user><userId>3</userId></user></return>"
            "<return><taskId>2</taskId></return>"
            "</ns2:getTasksForUserResponse>"
        )

        tree = decode_response(raw)

        assert isinstance(tree, ResponseTree)
        assert tree.name == "getTasksForUserResponse"
        assert tree.names() == ["return", "return"]
        first = tree.value_at(0)
        assert first.first_scalar("taskId") == "1"
        assert first.first_tree("user").first_scalar("userId") == "3"

    def test_nil_element_is_absent(self, soap_body) -> None:
        raw = soap_body(
            '<r xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
            '<return><taskId>1</taskId><dueDate xsi:nil="true"/></return></r>'
        )

        record = decode_response(raw).value_at(0)

        assert record.has_property("dueDate")
        assert record.first_value("dueDate") is None

    def test_leaf_text_is_kept_as_sent(self, soap_body) -> None:
        """リーフのテキストは前後の空白も含めてそのまま"""
        raw = soap_body("<r><return><title>  Ship it  </title><blank>   </blank></return></r>")

        record = decode_response(raw).value_at(0)

        assert record.first_scalar("title") == "  Ship it  "
        assert record.first_scalar("blank") == "   "

    def test_blank_response_element_is_empty_tree(self, soap_body) -> None:
        tree = decode_response(soap_body("<deleteTaskResponse>  </deleteTaskResponse>"))

        assert isinstance(tree, ResponseTree)
        assert tree.is_empty()

    def test_scalar_body(self, soap_body) -> None:
        assert decode_response(soap_body("<deleteTaskResponse>true</deleteTaskResponse>")) == "true"

    def test_empty_response_element_is_empty_tree(self, soap_body) -> None:
        tree = decode_response(soap_body("<deleteTaskResponse/>"))

        assert isinstance(tree, ResponseTree)
        assert tree.is_empty()

    def test_empty_body(self, soap_body) -> None:
        """空のBodyはNone（void）"""
        assert decode_response(soap_body("")) is None
        assert decode_response(b"") is None

    def test_fault(self, soap_body) -> None:
        raw = soap_body(
            "<S:Fault><faultcode>S:Server</faultcode>"
            "<faultstring>Invalid credentials</faultstring></S:Fault>"
        )

        tree = decode_response(raw)

        assert tree.name == "Fault"
        assert tree.first_scalar("faultcode") == "S:Server"
        assert tree.first_scalar("faultstring") == "Invalid credentials"

    def test_header_is_skipped(self) -> None:
        raw = (
            f'<S:Envelope xmlns:S="{SOAP_ENV_NS}"><S:Header><x>1</x></S:Header>'
            "<S:Body><r><return>ok</return></r></S:Body></S:Envelope>"
        ).encode()

        assert decode_response(raw).first_scalar("return") == "ok"

    @pytest.mark.parametrize(
        "raw",
        [
            b"<html><body>502 Bad Gateway</body></html>",
            b"not xml at all",
            f'<S:Envelope xmlns:S="{SOAP_ENV_NS}"></S:Envelope>'.encode(),
        ],
    )
    def test_malformed_raises_protocol_error(self, raw: bytes) -> None:
        with pytest.raises(ProtocolError):
            decode_response(raw)
