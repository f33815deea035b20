"""变更通知单元测试"""
from datetime import datetime, timezone
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ticketdesk.core.notifier import ChangeNotifier
from ticketdesk.models import TicketEvent


def _event(ticket_id: str = "tkt_1") -> TicketEvent:
    return TicketEvent(kind="created", ticket_id=ticket_id, at=datetime.now(timezone.utc))


class TestChangeNotifier:
    """ChangeNotifier 测试"""

    def test_publish_to_subscribers(self):
        """测试: 所有订阅方都收到事件"""
        notifier = ChangeNotifier()
        received_a, received_b = [], []
        notifier.subscribe(received_a.append)
        notifier.subscribe(received_b.append)

        event = _event()
        notifier.publish(event)

        assert received_a == [event]
        assert received_b == [event]

    def test_unsubscribe(self):
        """测试: 取消订阅后不再收到事件，重复取消无副作用"""
        notifier = ChangeNotifier()
        received = []
        unsubscribe = notifier.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        notifier.publish(_event())

        assert received == []
        assert notifier.subscriber_count == 0

    def test_failing_subscriber_isolated(self):
        """测试: 单个订阅方出错不影响其他订阅方"""
        notifier = ChangeNotifier()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        notifier.subscribe(broken)
        notifier.subscribe(received.append)

        notifier.publish(_event())

        assert len(received) == 1

    def test_unsubscribe_during_publish(self):
        """测试: 回调中取消订阅不影响本次分发"""
        notifier = ChangeNotifier()
        received = []
        holder = {}

        def once(event):
            received.append(event)
            holder["unsubscribe"]()

        holder["unsubscribe"] = notifier.subscribe(once)
        notifier.publish(_event("a"))
        notifier.publish(_event("b"))

        assert [e.ticket_id for e in received] == ["a"]
