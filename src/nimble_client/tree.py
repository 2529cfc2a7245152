"""
レスポンスツリー

デコード済みレスポンスの読み取り専用ビュー。(名前, 値) の順序付きリストで、
値はスカラー(str)・入れ子のResponseTree・None(値なし)のいずれか。
同名エントリの重複を許し、順序を保持する（配列構造を持たないプロトコルでは
同名の繰り返しがリストを表すため）。

名前の検索は大文字小文字を区別しない。完全一致を優先する。
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple, Union

Value = Union[str, "ResponseTree", None]


class ResponseTree:
    """名前付きフィールドの順序付きマルチマップ"""

    def __init__(self, name: str = "", entries: Optional[Sequence[Tuple[str, Value]]] = None):
        self.name = name
        self._entries: Tuple[Tuple[str, Value], ...] = tuple(entries or ())

    def property_count(self) -> int:
        return len(self._entries)

    def name_at(self, index: int) -> str:
        return self._entries[index][0]

    def value_at(self, index: int) -> Value:
        return self._entries[index][1]

    def names(self) -> List[str]:
        return [name for name, _ in self._entries]

    def has_property(self, name: str) -> bool:
        folded = name.casefold()
        return any(entry_name.casefold() == folded for entry_name, _ in self._entries)

    def first_value(self, name: str) -> Value:
        """nameに一致する最初の値（存在しなければNone）"""
        for entry_name, value in self._entries:
            if entry_name == name:
                return value
        folded = name.casefold()
        for entry_name, value in self._entries:
            if entry_name.casefold() == folded:
                return value
        return None

    def values_named(self, name: str) -> List[Value]:
        """nameに一致する全ての値を元の順序で返す"""
        folded = name.casefold()
        return [value for entry_name, value in self._entries if entry_name.casefold() == folded]

    def first_scalar(self, name: str) -> Optional[str]:
        value = self.first_value(name)
        return value if isinstance(value, str) else None

    def first_tree(self, name: str) -> Optional["ResponseTree"]:
        value = self.first_value(name)
        return value if isinstance(value, ResponseTree) else None

    def is_empty(self) -> bool:
        return not self._entries

    def __iter__(self) -> Iterator[Tuple[str, Value]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResponseTree):
            return NotImplemented
        return self.name == other.name and self._entries == other._entries

    def __repr__(self) -> str:
        body = "; ".join(f"{name}={value!r}" for name, value in self._entries)
        return f"{self.name or 'anyType'}{{{body}}}"
