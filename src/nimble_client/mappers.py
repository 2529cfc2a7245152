"""
ドメインマッパー

ペイロードノードをUser/Taskに変換する。必須フィールド（識別子）が欠けている
場合は部分的な値を作らずNoneを返す。例外は送出しない。
"""

import logging
from typing import Callable, List, Optional

from .coercion import blank_to_none, to_enum, to_identifier, to_timestamp
from .models import Task, TaskPriority, TaskStatus, User
from .tree import ResponseTree

logger = logging.getLogger(__name__)


def _text(node: ResponseTree, name: str) -> Optional[str]:
    return blank_to_none(node.first_scalar(name))


def map_user(node: Optional[ResponseTree]) -> Optional[User]:
    """ノードからUserを生成（userId・username・emailが必須）"""
    if node is None or node.is_empty():
        logger.warning("map_user received an empty node")
        return None

    user_id = to_identifier(node.first_scalar("userId"))
    username = _text(node, "username")
    email = _text(node, "email")
    created_date = to_timestamp(node.first_scalar("createdDate"))

    if user_id is None or username is None or email is None:
        logger.error(
            f"Failed to map essential User fields (userId={user_id}, username={username}, "
            f"email={email}); fields present: {node.names()}"
        )
        return None

    user = User(user_id=user_id, username=username, email=email, created_date=created_date)
    logger.debug(f"Mapped User: id={user.user_id}, username={user.username}")
    return user


def _nested_user_id(node: ResponseTree) -> Optional[int]:
    user = node.first_tree("user")
    if user is None:
        return None
    return to_identifier(user.first_scalar("userId"))


def _flat_user_id(node: ResponseTree) -> Optional[int]:
    return to_identifier(node.first_scalar("userId"))


# 所有ユーザーIDの探索順（入れ子 → フラット）
USER_ID_STRATEGIES: List[Callable[[ResponseTree], Optional[int]]] = [
    _nested_user_id,
    _flat_user_id,
]


def resolve_owner_id(node: ResponseTree) -> Optional[int]:
    for strategy in USER_ID_STRATEGIES:
        user_id = strategy(node)
        if user_id is not None:
            return user_id
    return None


def map_task(node: Optional[ResponseTree]) -> Optional[Task]:
    """ノードからTaskを生成（taskIdと所有ユーザーIDが必須）"""
    if node is None or node.is_empty():
        logger.warning("map_task received an empty node")
        return None

    task_id = to_identifier(node.first_scalar("taskId"))
    user_id = resolve_owner_id(node)

    if task_id is None or user_id is None:
        logger.error(
            f"Failed to map essential Task fields (taskId={task_id}, userId={user_id}); "
            f"skipping. Fields present: {node.names()}"
        )
        return None

    task = Task(
        task_id=task_id,
        user_id=user_id,
        title=_text(node, "title"),
        description=_text(node, "description"),
        due_date=to_timestamp(node.first_scalar("dueDate")),
        priority=to_enum(TaskPriority, node.first_scalar("priority")),
        status=to_enum(TaskStatus, node.first_scalar("status")),
        created_date=to_timestamp(node.first_scalar("createdDate")),
        last_modified_date=to_timestamp(node.first_scalar("lastModifiedDate")),
    )
    logger.debug(
        f"Mapped Task: id={task.task_id}, title='{task.title}', priority={task.priority}, "
        f"status={task.status}, userId={task.user_id}"
    )
    return task


def map_tasks(nodes: List[ResponseTree]) -> List[Task]:
    """ノード列をTaskのリストに変換（変換できないノードは読み飛ばす）"""
    tasks: List[Task] = []
    for index, node in enumerate(nodes):
        task = map_task(node)
        if task is None:
            logger.debug(f"Dropped record #{index}: not a valid task")
            continue
        tasks.append(task)
    logger.debug(f"Mapped {len(tasks)} of {len(nodes)} records: {[t.task_id for t in tasks]}")
    return tasks
