"""工单存储

工单集合的唯一写入入口。对外只暴露 list / get / create / update，
两种实现可互换，在启动时由 create_store 按配置选择：

- InMemoryTicketStore: 进程内存储，可选 JSON 快照落盘；更新不存在的工单时静默忽略
- SQLiteTicketStore: 基于 TicketDAO 的持久化存储；更新不存在的工单时抛出 NotFound

写入失败时集合保持原状，不会出现部分更新。
并发更新同一工单时以最后提交者为准（无版本号校验）。
"""
import json
import logging
import os
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ticketdesk.core.notifier import ChangeNotifier
from ticketdesk.dao import TicketDAO, get_default_db_path
from ticketdesk.errors import AdapterFailure, NotFound, ValidationError
from ticketdesk.models import Status, Ticket, TicketCreate, TicketEvent, TicketPatch
from ticketdesk.utils.config import StoreConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
ModelT = TypeVar("ModelT", bound=BaseModel)


def utc_now() -> datetime:
    """当前 UTC 时间（带时区）"""
    return datetime.now(timezone.utc)


def generate_ticket_id() -> str:
    """生成工单 ID，格式: tkt_{12 位十六进制}"""
    return f"tkt_{uuid.uuid4().hex[:12]}"


def coerce_model(model_cls: Type[ModelT], payload: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """
    将请求数据校验为指定模型

    Args:
        model_cls: 目标模型类（TicketCreate / TicketPatch）
        payload: 模型实例或字典

    Returns:
        模型实例

    Raises:
        ValidationError: 缺少必填字段、枚举值未知、出现未知字段
    """
    if isinstance(payload, model_cls):
        return payload
    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(details) from e


class TicketStore(ABC):
    """工单存储接口

    create / update 的公共流程（校验、默认值、时间戳、事件发布）在基类实现，
    子类只负责读写底层集合。
    """

    def __init__(
        self,
        notifier: Optional[ChangeNotifier] = None,
        clock: Optional[Clock] = None,
    ):
        self.notifier = notifier or ChangeNotifier()
        self._clock = clock or utc_now
        # 单写者：同一进程内的写操作串行执行
        self._write_lock = threading.RLock()

    # ===== 读 =====

    @abstractmethod
    def list_tickets(self) -> List[Ticket]:
        """返回全部工单的新列表，最近创建的在前"""

    @abstractmethod
    def get(self, ticket_id: str) -> Optional[Ticket]:
        """按 ID 获取工单，不存在返回 None"""

    # ===== 写 =====

    def create(self, payload: Union[TicketCreate, Mapping[str, Any]]) -> Ticket:
        """
        创建工单

        先填默认值（id、时间戳、status=open、comments=[]、assignee_id=None），
        再用请求数据覆盖，因此请求中的 status / assignee_id 优先。

        Args:
            payload: TicketCreate 或等价字典

        Returns:
            新创建的工单

        Raises:
            ValidationError: 请求数据不合法
            AdapterFailure: 持久化失败
        """
        data = coerce_model(TicketCreate, payload)
        supplied = data.model_dump()
        if supplied["status"] is None:
            supplied.pop("status")

        with self._write_lock:
            now = self._clock()
            defaults: Dict[str, Any] = {
                "id": generate_ticket_id(),
                "created_at": now,
                "updated_at": now,
                "status": Status.OPEN,
                "comments": [],
                "assignee_id": None,
            }
            ticket = Ticket(**{**defaults, **supplied})
            self._insert(ticket)

        logger.debug(f"工单已创建: {ticket.id}")
        self._publish("created", ticket.id)
        return ticket

    def update(
        self, ticket_id: str, patch: Union[TicketPatch, Mapping[str, Any]]
    ) -> Optional[Ticket]:
        """
        更新工单

        浅覆盖 patch 中显式设置的字段，然后无条件刷新 updated_at（空 patch 也刷新）。
        updated_at 不会早于更新前的值。

        Args:
            ticket_id: 工单 ID
            patch: TicketPatch 或等价字典

        Returns:
            更新后的工单；工单不存在时由子类决定返回 None 或抛出 NotFound

        Raises:
            ValidationError: patch 不合法
            NotFound: 工单不存在（SQLite 实现）
            AdapterFailure: 持久化失败
        """
        changes = coerce_model(TicketPatch, patch).changes()

        with self._write_lock:
            current = self.get(ticket_id)
            if current is None:
                return self._on_missing(ticket_id)

            updated_at = max(self._clock(), current.updated_at)
            updated = current.model_copy(update={**changes, "updated_at": updated_at})
            self._replace(updated)

        logger.debug(f"工单已更新: {ticket_id} {sorted(changes)}")
        self._publish("updated", ticket_id)
        return updated

    # ===== 子类实现 =====

    @abstractmethod
    def _insert(self, ticket: Ticket) -> None:
        """插入新工单（失败时不得留下可见的部分结果）"""

    @abstractmethod
    def _replace(self, ticket: Ticket) -> None:
        """按 ID 整体替换工单"""

    @abstractmethod
    def _on_missing(self, ticket_id: str) -> Optional[Ticket]:
        """更新目标不存在时的处理"""

    def _publish(self, kind: str, ticket_id: str) -> None:
        self.notifier.publish(TicketEvent(kind=kind, ticket_id=ticket_id, at=self._clock()))


class InMemoryTicketStore(TicketStore):
    """进程内工单存储

    集合以不可变快照的方式替换：每次写入构造新列表，成功后再替换引用，
    未被修改的工单对象保持原样。
    """

    def __init__(
        self,
        tickets: Iterable[Ticket] = (),
        snapshot_path: Optional[str] = None,
        notifier: Optional[ChangeNotifier] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            tickets: 初始工单（按给定顺序）
            snapshot_path: JSON 快照文件；存在时启动加载，每次写入后重写
            notifier: 变更通知器
            clock: 时钟（测试时注入）
        """
        super().__init__(notifier=notifier, clock=clock)
        self.snapshot_path = Path(snapshot_path) if snapshot_path else None
        self._tickets: List[Ticket] = list(tickets)

        if self.snapshot_path and self.snapshot_path.exists() and not self._tickets:
            self._tickets = self._load_snapshot()

    def list_tickets(self) -> List[Ticket]:
        return list(self._tickets)

    def get(self, ticket_id: str) -> Optional[Ticket]:
        for ticket in self._tickets:
            if ticket.id == ticket_id:
                return ticket
        return None

    def _insert(self, ticket: Ticket) -> None:
        self._commit([ticket] + self._tickets)

    def _replace(self, ticket: Ticket) -> None:
        self._commit([ticket if t.id == ticket.id else t for t in self._tickets])

    def _on_missing(self, ticket_id: str) -> Optional[Ticket]:
        logger.debug(f"更新目标不存在，忽略: {ticket_id}")
        return None

    def _commit(self, tickets: List[Ticket]) -> None:
        # 先落盘再替换引用，落盘失败时内存集合保持不变
        if self.snapshot_path:
            self._write_snapshot(tickets)
        self._tickets = tickets

    def _load_snapshot(self) -> List[Ticket]:
        try:
            with open(self.snapshot_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"加载工单快照失败 {self.snapshot_path}: {e}")
            raise AdapterFailure(f"加载工单快照失败: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("tickets", []), list):
            logger.error(f"工单快照格式错误 {self.snapshot_path}: 根元素应为包含 tickets 数组的对象")
            raise AdapterFailure(f"工单快照格式错误: {self.snapshot_path}")
        try:
            return [Ticket.model_validate(item) for item in data.get("tickets", [])]
        except ValueError as e:
            logger.error(f"加载工单快照失败 {self.snapshot_path}: {e}")
            raise AdapterFailure(f"加载工单快照失败: {e}") from e

    def _write_snapshot(self, tickets: List[Ticket]) -> None:
        tmp_path = self.snapshot_path.with_name(self.snapshot_path.name + ".tmp")
        payload = {"tickets": [t.model_dump(mode="json") for t in tickets]}
        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.snapshot_path)
        except OSError as e:
            logger.error(f"写入工单快照失败 {self.snapshot_path}: {e}")
            raise AdapterFailure(f"写入工单快照失败: {e}") from e


class SQLiteTicketStore(TicketStore):
    """基于 SQLite 的工单存储"""

    def __init__(
        self,
        db_path: Optional[str] = None,
        notifier: Optional[ChangeNotifier] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(notifier=notifier, clock=clock)
        self.dao = TicketDAO(db_path)

    @property
    def db_path(self) -> str:
        return self.dao.db_path

    def list_tickets(self) -> List[Ticket]:
        return self.dao.get_all()

    def get(self, ticket_id: str) -> Optional[Ticket]:
        return self.dao.get_by_id(ticket_id)

    def _insert(self, ticket: Ticket) -> None:
        self.dao.insert(ticket)

    def _replace(self, ticket: Ticket) -> None:
        if self.dao.update(ticket) == 0:
            raise NotFound(ticket.id)

    def _on_missing(self, ticket_id: str) -> Optional[Ticket]:
        raise NotFound(ticket_id)


def create_store(
    config: StoreConfig,
    notifier: Optional[ChangeNotifier] = None,
    clock: Optional[Clock] = None,
) -> TicketStore:
    """
    按配置创建工单存储（每个进程创建一次，注入给使用方）

    Args:
        config: 存储配置
        notifier: 变更通知器
        clock: 时钟

    Returns:
        TicketStore 实例
    """
    if config.backend == "memory":
        logger.info(f"使用内存工单存储 (snapshot={config.snapshot_path})")
        return InMemoryTicketStore(
            snapshot_path=config.snapshot_path, notifier=notifier, clock=clock
        )

    db_path = config.db_path or get_default_db_path()
    if not Path(db_path).exists():
        from ticketdesk.scripts.init_db import init_database

        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        init_database(db_path)

    logger.info(f"使用 SQLite 工单存储: {db_path}")
    return SQLiteTicketStore(db_path, notifier=notifier, clock=clock)
