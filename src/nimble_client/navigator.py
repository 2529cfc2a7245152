"""
レスポンスナビゲーター

設計ドキュメント参照: DESIGN.md
関連クラス:
  - tree.ResponseTree: 探索対象
  - mappers: 見つかったペイロードをドメインモデルに変換

サーバーはメソッドやバージョンによって結果のラップ方法が一定しないため、
具体的なものから順に以下を試す:
  1. Faultの検出（トップレベル、または結果フィールド経由で1階層下）
  2. 単一の結果フィールド("return")。二重にラップされている場合は1階層だけ降りる
  3. 同名の結果フィールドの列挙（リスト呼び出し）
  4. ツリー自体がレコードの形をしている場合はそれをペイロードとする
  5. 直下の子ノードから形が一致するものを全て採用（リスト呼び出しのみ）

どの段階も具体的なノードを返すか何も返さないかのどちらかで、値を推測しない。
フィールド名の比較は大文字小文字を区別しない。
"""

import logging
from typing import Callable, List, Optional

from .exceptions import RemoteFault
from .tree import ResponseTree, Value

logger = logging.getLogger(__name__)

RESULT_FIELD = "return"
FAULT_CODE_FIELD = "faultcode"
FAULT_STRING_FIELD = "faultstring"
# Faultを探すときに1階層だけ辿るフィールド
FAULT_HOP_FIELDS = (RESULT_FIELD, "Fault")

UNKNOWN_FAULT_MESSAGE = "Unknown SOAP fault"

ShapeProbe = Callable[[ResponseTree], bool]


def looks_like_user(node: ResponseTree) -> bool:
    return node.has_property("userId") and (
        node.has_property("username") or node.has_property("email")
    )


def looks_like_task(node: ResponseTree) -> bool:
    return node.has_property("taskId") and (
        node.has_property("title") or node.has_property("status") or node.has_property("user")
    )


def _fault_from(node: ResponseTree) -> Optional[RemoteFault]:
    if not node.has_property(FAULT_CODE_FIELD):
        return None
    code = node.first_scalar(FAULT_CODE_FIELD)
    message = (node.first_scalar(FAULT_STRING_FIELD) or "").strip() or UNKNOWN_FAULT_MESSAGE
    return RemoteFault(message, code=code)


def find_fault(tree: ResponseTree) -> Optional[RemoteFault]:
    """
    Faultを検出

    Args:
        tree: デコード済みレスポンス

    Returns:
        Faultが見つかった場合はRemoteFault、なければNone
    """
    fault = _fault_from(tree)
    if fault is not None:
        logger.error(f"SOAP Fault: {fault.message}")
        return fault

    for hop in FAULT_HOP_FIELDS:
        for value in tree.values_named(hop):
            if isinstance(value, ResponseTree):
                fault = _fault_from(value)
                if fault is not None:
                    logger.error(f"SOAP Fault (nested in '{hop}'): {fault.message}")
                    return fault
    return None


def _descend_once(node: ResponseTree, probe: ShapeProbe) -> ResponseTree:
    """形が一致しないノードが"return"を1つだけ持ち、その中身が一致する場合は中身を返す"""
    if probe(node):
        return node
    inner = node.values_named(RESULT_FIELD)
    if len(inner) == 1 and isinstance(inner[0], ResponseTree) and probe(inner[0]):
        logger.debug(f"'{node.name}' wraps a record-shaped '{RESULT_FIELD}', descending one level")
        return inner[0]
    return node


def extract_single(tree: ResponseTree, probe: ShapeProbe) -> Value:
    """
    単一結果のペイロードを取り出す

    Returns:
        "return"フィールドの値（ツリーまたはスカラー。さらに"return"で1階層
        ラップされている場合はその中身）、ツリー自体がレコードの形なら
        ツリー自体、どちらでもなければNone
    """
    results = tree.values_named(RESULT_FIELD)
    if results:
        if len(results) > 1:
            logger.warning(
                f"Expected a single '{RESULT_FIELD}' field but found {len(results)}, using the first"
            )
        payload = results[0]
        if isinstance(payload, ResponseTree):
            logger.debug(f"Detected '{RESULT_FIELD}' tree, passing it to the mapper")
            return _descend_once(payload, probe)
        logger.debug(f"Detected '{RESULT_FIELD}' scalar: {payload!r}")
        return payload

    if probe(tree):
        logger.debug(f"No '{RESULT_FIELD}' field; response itself looks like a record")
        return tree

    logger.debug(f"No '{RESULT_FIELD}' field and response is not record-shaped: {tree.names()}")
    return None


def extract_scalar(tree: ResponseTree) -> Optional[str]:
    """プリミティブ値を返す呼び出し用。"return"か、先頭フィールドのスカラーを返す。"""
    for value in tree.values_named(RESULT_FIELD):
        if isinstance(value, str):
            return value
    if tree.property_count() > 0 and isinstance(tree.value_at(0), str):
        logger.debug(f"Using first property '{tree.name_at(0)}' as primitive payload")
        return tree.value_at(0)  # type: ignore[return-value]
    return None


def _unwrap(node: ResponseTree, probe: ShapeProbe) -> List[ResponseTree]:
    """形が一致しない単一ラッパーの中にレコードが並んでいる場合は中身を返す"""
    if probe(node):
        return [node]
    inner = [value for _, value in node if isinstance(value, ResponseTree) and probe(value)]
    if inner:
        logger.debug(f"'{node.name}' wraps {len(inner)} record-shaped nodes")
        return inner
    return [node]


def extract_records(tree: ResponseTree, probe: ShapeProbe) -> List[ResponseTree]:
    """
    リスト呼び出しのペイロードノードを元の順序で全て取り出す

    Args:
        tree: デコード済みレスポンス
        probe: レコードの形かどうかを判定する関数

    Returns:
        マッパーに渡すノードのリスト（空の場合あり）
    """
    logger.debug(f"Response properties: {tree.names()}")
    nodes: List[ResponseTree] = []

    results = tree.values_named(RESULT_FIELD)
    logger.debug(f"Response contains {len(results)} '{RESULT_FIELD}' properties")
    for index, value in enumerate(results):
        if isinstance(value, ResponseTree):
            nodes.extend(_unwrap(value, probe))
        else:
            logger.debug(f"'{RESULT_FIELD}' #{index} is not a tree ({value!r}), skipping")

    if not results and probe(tree):
        logger.debug("Response itself looks like a record")
        nodes.append(tree)

    if not nodes:
        for index, (name, value) in enumerate(tree):
            if isinstance(value, ResponseTree) and probe(value):
                logger.debug(f"Found record-shaped property '{name}' at index {index}")
                nodes.append(value)

    return nodes
