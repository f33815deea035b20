"""渲染器单元测试"""
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ticketdesk.cli.rendering import TicketRenderer
from ticketdesk.core.analytics import summarize
from ticketdesk.core.query import group_by_status
from ticketdesk.models import Status, Ticket

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_ticket(ticket_id: str, **overrides) -> Ticket:
    data = dict(
        id=ticket_id,
        title="Wifi down",
        description="Library wifi keeps dropping",
        category="technical",
        priority="high",
        created_by="usr_1",
        created_at=T0,
        updated_at=T0,
    )
    data.update(overrides)
    return Ticket(**data)


class TestTicketRenderer:
    """TicketRenderer 测试"""

    @pytest.fixture
    def console(self):
        return Console(record=True, width=140, force_terminal=False)

    @pytest.fixture
    def renderer(self, console):
        return TicketRenderer(console)

    def _text(self, console, renderable) -> str:
        console.print(renderable)
        return console.export_text()

    def test_status_text_uses_label(self, renderer):
        """测试: 状态显示标签"""
        assert renderer.status_text(Status.IN_PROGRESS).plain == "In Progress"

    def test_ticket_table(self, renderer, console):
        """测试: 工单列表"""
        tickets = [make_ticket("tkt_1"), make_ticket("tkt_2", title="Printer jam", status="resolved")]

        table = renderer.render_ticket_table(tickets, total=5)

        assert isinstance(table, Table)
        assert table.row_count == 2
        output = self._text(console, table)
        assert "2 / 5 个工单" in output
        assert "Printer jam" in output
        assert "Resolved" in output
        assert "Technical" in output

    def test_ticket_detail(self, renderer, console):
        """测试: 工单详情"""
        ticket = make_ticket(
            "tkt_1",
            assignee_id="usr_admin",
            attachment={"name": "shot.png", "url": "blob:1", "size": 2048, "type": "image/png"},
            updated_at=T0 + timedelta(hours=1),
        )

        panel = renderer.render_ticket_detail(ticket)

        assert isinstance(panel, Panel)
        output = self._text(console, panel)
        assert "usr_admin" in output
        assert "shot.png (2.0 KB)" in output
        assert "Library wifi keeps dropping" in output

    def test_ticket_detail_unassigned(self, renderer, console):
        """测试: 未分派工单"""
        output = self._text(console, renderer.render_ticket_detail(make_ticket("tkt_1")))
        assert "未分派" in output

    def test_stats(self, renderer, console):
        """测试: 统计面板"""
        tickets = [
            make_ticket("tkt_1"),
            make_ticket("tkt_2", status="resolved", updated_at=T0 + timedelta(hours=5)),
        ]

        group = renderer.render_stats(summarize(tickets))

        assert isinstance(group, Group)
        output = self._text(console, group)
        assert "平均处理时长 5h" in output
        assert "Human Resources" in output

    def test_grouped(self, renderer, console):
        """测试: 分组视图包含空状态"""
        groups = group_by_status([make_ticket("tkt_1")])
        output = self._text(console, renderer.render_grouped(groups))
        assert "Open (1)" in output
        assert "Closed (0)" in output
        assert "暂无工单" in output
