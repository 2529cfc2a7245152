"""
プロトコルアダプタ（ファサード）

設計ドキュメント参照: DESIGN.md
関連クラス:
  - envelope: リクエストのエンコード・レスポンスのデコード
  - transport.HttpTransport: HTTP送受信
  - navigator: Fault検出とペイロードの探索
  - mappers: ドメインモデルへの変換

各呼び出しは Idle → Encoding → Sent → Decoding → NavigatingPayload → Mapping
→ Success/Failed の順に進み、結果は常にCallResultとして返す（例外を外に出さない）。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, TypeVar, Union

from .coercion import to_boolean
from .config import ServiceConfig
from .envelope import NIL, SoapRequest, decode_response, encode_request
from .exceptions import MappingError, NimbleClientError, ProtocolError, RequestError
from .mappers import map_tasks, map_task, map_user
from .models import Task, TaskPriority, TaskStatus, User
from .navigator import extract_records, extract_scalar, extract_single, find_fault
from .navigator import looks_like_task, looks_like_user
from .transport import HttpTransport
from .tree import ResponseTree

logger = logging.getLogger(__name__)

T = TypeVar("T")

Decoded = Union[ResponseTree, str, None]


class CallState(str, Enum):
    """1回の呼び出しの状態"""

    IDLE = "idle"
    ENCODING = "encoding"
    SENT = "sent"
    DECODING = "decoding"
    NAVIGATING_PAYLOAD = "navigating_payload"
    MAPPING = "mapping"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class CallResult(Generic[T]):
    """呼び出し結果（値またはエラーのどちらか）"""

    action: str
    value: Optional[T] = None
    error: Optional[NimbleClientError] = None
    state: CallState = CallState.IDLE
    failed_at: Optional[CallState] = None

    @property
    def ok(self) -> bool:
        return self.state is CallState.SUCCESS

    def unwrap(self) -> T:
        """成功時は値を返し、失敗時は保持しているエラーを送出する"""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def _fault_checked(decoded: Decoded) -> Decoded:
    if isinstance(decoded, ResponseTree):
        fault = find_fault(decoded)
        if fault is not None:
            raise fault
    return decoded


def _single(probe: Callable[[ResponseTree], bool]) -> Callable[[Decoded], Any]:
    def navigate(decoded: Decoded) -> Any:
        decoded = _fault_checked(decoded)
        if isinstance(decoded, ResponseTree):
            return extract_single(decoded, probe)
        return decoded

    return navigate


def _records(probe: Callable[[ResponseTree], bool]) -> Callable[[Decoded], List[ResponseTree]]:
    def navigate(decoded: Decoded) -> List[ResponseTree]:
        decoded = _fault_checked(decoded)
        if isinstance(decoded, ResponseTree):
            return extract_records(decoded, probe)
        if decoded is not None:
            logger.warning(f"Expected a list of records but got a scalar body: {decoded!r}")
        return []

    return navigate


def _primitive(decoded: Decoded) -> Optional[str]:
    decoded = _fault_checked(decoded)
    if isinstance(decoded, ResponseTree):
        return extract_scalar(decoded)
    return decoded


def _require_user(payload: Any) -> User:
    user = map_user(payload) if isinstance(payload, ResponseTree) else None
    if user is None:
        raise MappingError("レスポンスに有効なユーザー情報がありません")
    return user


def _require_task(payload: Any) -> Task:
    task = map_task(payload) if isinstance(payload, ResponseTree) else None
    if task is None:
        raise MappingError("レスポンスに有効なタスク情報がありません")
    return task


def _require_boolean(payload: Optional[str]) -> bool:
    value = to_boolean(payload)
    if value is None:
        raise MappingError(f"真偽値の応答を期待しましたが取得できませんでした: {payload!r}")
    return value


class NimbleClient:
    """ユーザー/タスクサービスのSOAPクライアント"""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        transport: Optional[HttpTransport] = None,
    ):
        """
        初期化

        Args:
            config: サービス接続設定（省略時はデフォルト値）
            transport: HTTPトランスポート（省略時は設定のタイムアウトで生成）
        """
        self.config = config or ServiceConfig()
        self.transport = transport or HttpTransport(timeout_ms=self.config.timeout_ms)
        self.logger = logging.getLogger(__name__)

    # --- User Service ---

    def login(self, username: str, password: str) -> CallResult[User]:
        """ログイン（成功時はUserを返す）"""
        return self._call(
            self.config.user_url,
            lambda: SoapRequest(self.config.user_namespace, "loginUser")
            .add("username", username)
            .add("plainPassword", password),
            _single(looks_like_user),
            _require_user,
        )

    def register(self, username: str, email: str, password: str) -> CallResult[User]:
        """ユーザー登録（成功時は作成されたUserを返す）"""
        return self._call(
            self.config.user_url,
            lambda: SoapRequest(self.config.user_namespace, "registerUser")
            .add("username", username)
            .add("email", email)
            .add("plainPassword", password),
            _single(looks_like_user),
            _require_user,
        )

    # --- Task Service ---

    def list_tasks_for_user(self, user_id: int) -> CallResult[List[Task]]:
        """
        ユーザーのタスク一覧を取得

        不正なレコードは読み飛ばし、有効なものだけを元の順序で返す
        """
        self.logger.debug(f"Requesting tasks for userId: {user_id}")
        return self._call(
            self.config.task_url,
            lambda: SoapRequest(self.config.task_namespace, "getTasksForUser").add("userId", user_id),
            _records(looks_like_task),
            map_tasks,
        )

    def create_task(
        self,
        user_id: int,
        title: str,
        description: Optional[str] = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> CallResult[Task]:
        """期限なしのタスクを作成"""
        self.logger.debug(f"Creating task: userId={user_id}, title={title}")
        return self._call(
            self.config.task_url,
            lambda: SoapRequest(self.config.task_namespace, "createTaskWithoutDate")
            .add("userId", user_id)
            .add("title", title)
            .add("description", description or "")
            .add("priority", priority or TaskPriority.MEDIUM),
            _single(looks_like_task),
            _require_task,
        )

    def delete_task(self, task_id: int) -> CallResult[bool]:
        """タスクを削除（サーバーが返した真偽値を返す）"""
        self.logger.debug(f"Deleting task: taskId={task_id}")
        return self._call(
            self.config.task_url,
            lambda: SoapRequest(self.config.task_namespace, "deleteTask").add("taskId", task_id),
            _primitive,
            _require_boolean,
        )

    def update_task_status(self, task: Task, new_status: TaskStatus) -> CallResult[Task]:
        """
        タスクのステータスを更新

        ステータスは前進のみ（PENDING → IN_PROGRESS → COMPLETED）という前提は
        呼び出し側のポリシーであり、ここでは検証しない。
        """

        def build() -> SoapRequest:
            if task.task_id is None:
                raise RequestError("更新対象のタスクIDがありません")
            # 廃止済みのdueDateも常にnilで送る（引数の位置を維持）
            return (
                SoapRequest(self.config.task_namespace, "updateTask")
                .add("taskId", task.task_id)
                .add("title", task.title or "")
                .add("description", task.description or "")
                .add("dueDate", NIL)
                .add("priority", task.effective_priority)
                .add("status", new_status)
            )

        self.logger.debug(f"Updating task: taskId={task.task_id}, newStatus={new_status}")
        return self._call(
            self.config.task_url,
            build,
            _single(looks_like_task),
            _require_task,
        )

    # --- Helper Functions ---

    def _call(
        self,
        url: str,
        build: Callable[[], SoapRequest],
        navigate: Callable[[Decoded], Any],
        map_payload: Callable[[Any], T],
    ) -> CallResult[T]:
        result: CallResult[T] = CallResult(action="")

        def advance(state: CallState) -> None:
            self.logger.debug(f"[{result.action or '?'}] {result.state.value} -> {state.value}")
            result.state = state

        try:
            advance(CallState.ENCODING)
            request = build()
            result.action = request.action
            envelope = encode_request(request)

            self.logger.debug(f"Executing SOAP Call: Action={result.action}, URL={url}")
            advance(CallState.SENT)
            raw = self.transport.send(url, result.action, envelope)

            advance(CallState.DECODING)
            self.logger.debug(f"Raw SOAP Response: {raw!r}")
            decoded = decode_response(raw)
            self.logger.debug(f"Decoded SOAP Body: {decoded!r}")

            advance(CallState.NAVIGATING_PAYLOAD)
            payload = navigate(decoded)

            advance(CallState.MAPPING)
            value = map_payload(payload)
        except NimbleClientError as e:
            return self._fail(result, e)
        except Exception as e:
            self.logger.exception(f"Unexpected error during SOAP call '{result.action}'")
            return self._fail(result, ProtocolError(f"予期しないエラー: {e}"))

        result.value = value
        advance(CallState.SUCCESS)
        return result

    def _fail(self, result: CallResult[T], error: NimbleClientError) -> CallResult[T]:
        self.logger.error(
            f"SOAP Call failed for action '{result.action}' during {result.state.value}: "
            f"{type(error).__name__}: {error}"
        )
        result.failed_at = result.state
        result.error = error
        result.state = CallState.FAILED
        return result


class AsyncNimbleClient:
    """
    NimbleClientの非同期ラッパー

    各呼び出しをワーカースレッドで実行し、呼び出し側のイベントループはブロックしない。
    キャンセルしても送信済みリクエストのサーバー側の結果は不定となる。
    """

    def __init__(self, client: Optional[NimbleClient] = None):
        self.client = client or NimbleClient()

    async def login(self, username: str, password: str) -> CallResult[User]:
        return await asyncio.to_thread(self.client.login, username, password)

    async def register(self, username: str, email: str, password: str) -> CallResult[User]:
        return await asyncio.to_thread(self.client.register, username, email, password)

    async def list_tasks_for_user(self, user_id: int) -> CallResult[List[Task]]:
        return await asyncio.to_thread(self.client.list_tasks_for_user, user_id)

    async def create_task(
        self,
        user_id: int,
        title: str,
        description: Optional[str] = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> CallResult[Task]:
        return await asyncio.to_thread(
            self.client.create_task, user_id, title, description, priority
        )

    async def delete_task(self, task_id: int) -> CallResult[bool]:
        return await asyncio.to_thread(self.client.delete_task, task_id)

    async def update_task_status(self, task: Task, new_status: TaskStatus) -> CallResult[Task]:
        return await asyncio.to_thread(self.client.update_task_status, task, new_status)
