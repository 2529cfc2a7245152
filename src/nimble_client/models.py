"""
ドメインモデル定義

設計ドキュメント: DESIGN.md
関連モジュール:
- src/nimble_client/mappers.py - レスポンスツリーからの変換
- src/nimble_client/client.py - ファサード
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskPriority(str, Enum):
    """タスクの優先度"""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TaskStatus(str, Enum):
    """タスクのステータス。PENDING → IN_PROGRESS → COMPLETED の順に進む。"""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    def next_status(self) -> Optional["TaskStatus"]:
        """次のステータスを返す（COMPLETEDの場合はNone）"""
        order = list(TaskStatus)
        index = order.index(self)
        if index + 1 < len(order):
            return order[index + 1]
        return None


class User(BaseModel):
    """サーバー上のユーザー。同じuser_idを持つ値は同一エンティティとみなす。"""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[int] = Field(None, description="ユーザーID（未作成の場合はNone）")
    username: Optional[str] = Field(None, description="ユーザー名")
    email: Optional[str] = Field(None, description="メールアドレス")
    created_date: Optional[datetime] = Field(None, description="作成日時")

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, User) and self.user_id is not None:
            return self.user_id == other.user_id
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(("User", self.user_id))


class Task(BaseModel):
    """サーバー上のタスク。user_idは所有ユーザーへの参照のみを保持する。"""

    model_config = ConfigDict(frozen=True)

    task_id: Optional[int] = Field(None, description="タスクID")
    user_id: Optional[int] = Field(None, description="所有ユーザーのID")
    title: Optional[str] = Field(None, description="タイトル")
    description: Optional[str] = Field(None, description="説明")
    due_date: Optional[datetime] = Field(None, description="期限")
    priority: Optional[TaskPriority] = Field(None, description="優先度（不明な場合はNone）")
    status: Optional[TaskStatus] = Field(None, description="ステータス（不明な場合はNone）")
    created_date: Optional[datetime] = Field(None, description="作成日時")
    last_modified_date: Optional[datetime] = Field(None, description="最終更新日時")

    @property
    def effective_priority(self) -> TaskPriority:
        return self.priority or TaskPriority.MEDIUM

    @property
    def effective_status(self) -> TaskStatus:
        return self.status or TaskStatus.PENDING

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Task) and self.task_id is not None:
            return self.task_id == other.task_id
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(("Task", self.task_id))
