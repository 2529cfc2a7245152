"""ドメインマッパーのテスト"""

from datetime import datetime, timezone

from src.nimble_client.mappers import USER_ID_STRATEGIES, map_task, map_tasks, map_user, resolve_owner_id
from src.nimble_client.models import TaskPriority, TaskStatus
from src.nimble_client.tree import ResponseTree


def _user_ref(user_id: str) -> ResponseTree:
    return ResponseTree("user", [("userId", user_id), ("username", "someone")])


class TestMapUser:
    """map_userのテスト"""

    def test_full_user(self) -> None:
        node = ResponseTree(
            "return",
            [
                ("userId", "12"),
                ("username", "alice"),
                ("email", "alice@example.com"),
                ("createdDate", "2024-01-02T03:04:05Z"),
            ],
        )

        user = map_user(node)

        assert user.user_id == 12
        assert user.username == "alice"
        assert user.email == "alice@example.com"
        assert user.created_date == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_missing_required_field(self) -> None:
        """必須フィールドが欠けている場合は部分的な値を返さない"""
        assert map_user(ResponseTree("r", [("username", "a"), ("email", "a@b")])) is None
        assert map_user(ResponseTree("r", [("userId", "x"), ("username", "a"), ("email", "a@b")])) is None
        assert map_user(ResponseTree("r", [("userId", "1"), ("username", " "), ("email", "a@b")])) is None

    def test_text_fields_are_not_trimmed(self) -> None:
        node = ResponseTree("r", [("userId", " 1 "), ("username", " alice "), ("email", "a@b")])

        user = map_user(node)

        assert user.user_id == 1
        assert user.username == " alice "

    def test_bad_created_date_is_absent(self) -> None:
        node = ResponseTree(
            "r", [("userId", "1"), ("username", "a"), ("email", "a@b"), ("createdDate", "soon")]
        )

        assert map_user(node).created_date is None

    def test_empty_node(self) -> None:
        assert map_user(None) is None
        assert map_user(ResponseTree("r")) is None


class TestMapTask:
    """map_taskのテスト"""

    def test_nested_user_scenario(self) -> None:
        """{return: {taskId, title, status, user: {userId}}} の変換"""
        node = ResponseTree(
            "return",
            [
                ("taskId", "7"),
                ("title", "Buy milk"),
                ("status", "PENDING"),
                ("user", ResponseTree("user", [("userId", "3")])),
            ],
        )

        task = map_task(node)

        assert task.task_id == 7
        assert task.user_id == 3
        assert task.title == "Buy milk"
        assert task.status is TaskStatus.PENDING
        assert task.priority is None

    def test_all_fields(self) -> None:
        node = ResponseTree(
            "return",
            [
                ("taskId", "1"),
                ("title", "Write report"),
                ("description", "Quarterly numbers"),
                ("dueDate", "2024-06-01"),
                ("priority", "high"),
                ("status", "in_progress"),
                ("createdDate", "2024-05-01T09:00:00.000+00:00"),
                ("lastModifiedDate", "2024-05-02T09:00:00Z"),
                ("user", _user_ref("4")),
            ],
        )

        task = map_task(node)

        assert task.description == "Quarterly numbers"
        assert task.due_date == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert task.priority is TaskPriority.HIGH
        assert task.status is TaskStatus.IN_PROGRESS
        assert task.created_date == datetime(2024, 5, 1, 9, tzinfo=timezone.utc)
        assert task.last_modified_date == datetime(2024, 5, 2, 9, tzinfo=timezone.utc)

    def test_flat_user_id(self) -> None:
        """入れ子のuserがない場合はフラットなuserIdを使う"""
        task = map_task(ResponseTree("return", [("taskId", "2"), ("userId", "8")]))

        assert task.user_id == 8

    def test_nested_user_id_wins(self) -> None:
        node = ResponseTree("return", [("taskId", "2"), ("userId", "8"), ("user", _user_ref("3"))])

        assert resolve_owner_id(node) == 3
        assert [s(node) for s in USER_ID_STRATEGIES] == [3, 8]

    def test_nested_user_without_id_falls_back(self) -> None:
        node = ResponseTree(
            "return",
            [("taskId", "2"), ("userId", "8"), ("user", ResponseTree("user", [("username", "x")]))],
        )

        assert map_task(node).user_id == 8

    def test_missing_ids(self) -> None:
        """taskIdまたはuserIdが欠けている場合はNone"""
        assert map_task(ResponseTree("r", [("title", "x"), ("user", _user_ref("3"))])) is None
        assert map_task(ResponseTree("r", [("taskId", "1"), ("title", "x")])) is None
        assert map_task(ResponseTree("r", [("taskId", "one"), ("userId", "3")])) is None

    def test_unknown_enums_are_absent(self) -> None:
        node = ResponseTree(
            "r", [("taskId", "1"), ("userId", "3"), ("priority", "URGENT"), ("status", "DONE")]
        )

        task = map_task(node)

        assert task.priority is None
        assert task.status is None
        assert task.effective_priority is TaskPriority.MEDIUM
        assert task.effective_status is TaskStatus.PENDING


def test_map_tasks_drops_invalid_records() -> None:
    """不正なレコードは読み飛ばし、順序は保持する"""
    nodes = [
        ResponseTree("return", [("taskId", "1"), ("userId", "3")]),
        ResponseTree("return", [("taskId", "bad"), ("userId", "3")]),
        ResponseTree("return", [("taskId", "2"), ("user", _user_ref("3"))]),
    ]

    assert [t.task_id for t in map_tasks(nodes)] == [1, 2]
