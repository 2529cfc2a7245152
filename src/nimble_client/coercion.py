"""
スカラー変換モジュール

レスポンスの文字列値を識別子・列挙型・日時・真偽値に変換する純粋関数群。
どの関数も例外を送出せず、変換できない場合はNoneを返す。

関連モジュール:
  - mappers: ドメインモデルへの変換で使用
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Type, TypeVar

from .models import TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

# ksoap系サーバーが空要素の代わりに返すプレースホルダ
_PLACEHOLDERS = {"anyType{}"}

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_DECIMAL = re.compile(r"[+-]?[0-9]+")


def blank_to_none(raw: Optional[str]) -> Optional[str]:
    """空白のみ・プレースホルダの値をNoneとして扱う（それ以外は値をそのまま返す）"""
    if raw is None:
        return None
    value = raw.strip()
    if not value or value in _PLACEHOLDERS:
        return None
    return raw


def clean_scalar(raw: Optional[str]) -> Optional[str]:
    """blank_to_noneに加えて前後の空白を除去（数値・列挙型・日時の変換用）"""
    value = blank_to_none(raw)
    return value.strip() if value is not None else None


def to_identifier(raw: Optional[str]) -> Optional[int]:
    """10進整数(int64)に変換"""
    value = clean_scalar(raw)
    if value is None:
        return None
    if not _DECIMAL.fullmatch(value):
        return None
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number


def _build_enum_table(enum_cls: Type[E]) -> Dict[str, E]:
    return {member.name.casefold(): member for member in enum_cls}


# 列挙型ごとの名前テーブル（インポート時に構築）
ENUM_TABLES: Dict[Type[Enum], Dict[str, Enum]] = {
    TaskPriority: _build_enum_table(TaskPriority),
    TaskStatus: _build_enum_table(TaskStatus),
}


def to_enum(enum_cls: Type[E], raw: Optional[str]) -> Optional[E]:
    """メンバー名で列挙型に変換（大文字小文字を区別しない）"""
    value = clean_scalar(raw)
    if value is None:
        return None
    table = ENUM_TABLES.get(enum_cls) or _build_enum_table(enum_cls)
    member = table.get(value.casefold())
    if member is None:
        logger.warning("Unknown enum value '%s' for %s", raw, enum_cls.__name__)
    return member


_TRUE_VALUES = {"true", "1"}
_FALSE_VALUES = {"false", "0"}


def to_boolean(raw: Optional[str]) -> Optional[bool]:
    value = clean_scalar(raw)
    if value is None:
        return None
    folded = value.casefold()
    if folded in _TRUE_VALUES:
        return True
    if folded in _FALSE_VALUES:
        return False
    logger.warning("Unrecognized boolean value '%s'", raw)
    return None


@dataclass(frozen=True)
class TimestampPattern:
    """日時フォーマット1件分の解析ストラテジー"""

    name: str
    fmt: str
    utc: bool = False

    def parse(self, value: str) -> Optional[datetime]:
        try:
            parsed = datetime.strptime(value, self.fmt)
        except ValueError:
            return None
        if self.utc or parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


# 先に一致したものを採用する（順序に意味がある）
TIMESTAMP_PATTERNS: List[TimestampPattern] = [
    TimestampPattern("offset_millis", "%Y-%m-%dT%H:%M:%S.%f%z"),
    TimestampPattern("offset", "%Y-%m-%dT%H:%M:%S%z"),
    TimestampPattern("zulu_millis", "%Y-%m-%dT%H:%M:%S.%fZ", utc=True),
    TimestampPattern("zulu", "%Y-%m-%dT%H:%M:%SZ", utc=True),
    TimestampPattern("date", "%Y-%m-%d", utc=True),
]


def to_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """TIMESTAMP_PATTERNSを順に試し、最初に成功した結果を返す"""
    value = clean_scalar(raw)
    if value is None:
        return None
    for pattern in TIMESTAMP_PATTERNS:
        parsed = pattern.parse(value)
        if parsed is not None:
            return parsed
    logger.warning("Could not parse date-time string '%s' with any known format", raw)
    return None
