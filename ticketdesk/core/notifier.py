"""工单变更通知

进程内的发布/订阅：存储层在每次成功写入后发布事件，
订阅方（如 WebSocket 推送）据此重新查询。
"""
import logging
import threading
from typing import Callable, List

from ticketdesk.models import TicketEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[TicketEvent], None]


class ChangeNotifier:
    """变更通知器"""

    def __init__(self):
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        注册订阅

        Args:
            callback: 收到事件时调用

        Returns:
            取消订阅的函数（重复调用无副作用）
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: TicketEvent) -> None:
        """向所有订阅方发送事件；单个订阅方出错不影响其他订阅方"""
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"变更通知回调失败: {event.kind} {event.ticket_id}")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
