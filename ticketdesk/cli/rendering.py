"""工单渲染

CLI 使用的 Rich 渲染逻辑，所有方法返回 Rich 可渲染对象，由调用方决定如何输出。
"""
from typing import Dict, List, Optional

from rich.box import SIMPLE
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ticketdesk.models import (
    CATEGORY_ICONS,
    CATEGORY_LABELS,
    PRIORITY_LABELS,
    STATUS_LABELS,
    Category,
    DashboardStats,
    Priority,
    Status,
    Ticket,
)


class TicketRenderer:
    """工单渲染器"""

    STATUS_STYLES = {
        Status.OPEN: "red",
        Status.IN_PROGRESS: "yellow",
        Status.RESOLVED: "green",
        Status.CLOSED: "bright_black",
    }

    PRIORITY_STYLES = {
        Priority.LOW: "dim",
        Priority.MEDIUM: "blue",
        Priority.HIGH: "dark_orange",
        Priority.URGENT: "bold red",
    }

    def __init__(self, console: Console = None):
        """初始化渲染器

        Args:
            console: Rich Console 实例
        """
        self.console = console or Console()

    def status_text(self, status: Status) -> Text:
        return Text(STATUS_LABELS[status], style=self.STATUS_STYLES[status])

    def priority_text(self, priority: Priority) -> Text:
        return Text(PRIORITY_LABELS[priority], style=self.PRIORITY_STYLES[priority])

    @staticmethod
    def category_text(category: Category) -> Text:
        return Text(f"{CATEGORY_ICONS[category]} {CATEGORY_LABELS[category]}")

    def render_ticket_table(self, tickets: List[Ticket], total: Optional[int] = None) -> Table:
        """渲染工单列表

        Args:
            tickets: 要显示的工单
            total: 筛选前的总数，提供时在标题中显示 "x / total"

        Returns:
            Rich Table 对象
        """
        shown = len(tickets)
        title = f"{shown} / {total} 个工单" if total is not None else f"{shown} 个工单"
        table = Table(title=title, box=SIMPLE, title_justify="left")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("标题")
        table.add_column("分类")
        table.add_column("优先级")
        table.add_column("状态")
        table.add_column("提交人", style="dim")
        table.add_column("创建时间", style="dim", no_wrap=True)

        for ticket in tickets:
            table.add_row(
                ticket.id,
                ticket.title,
                self.category_text(ticket.category),
                self.priority_text(ticket.priority),
                self.status_text(ticket.status),
                ticket.created_by,
                ticket.created_at.strftime("%Y-%m-%d %H:%M"),
            )
        return table

    def render_ticket_detail(self, ticket: Ticket) -> Panel:
        """渲染单个工单详情"""
        body = Text()
        body.append("分类: ", style="dim")
        body.append_text(self.category_text(ticket.category))
        body.append("  │  ", style="dim")
        body.append("优先级: ", style="dim")
        body.append_text(self.priority_text(ticket.priority))
        body.append("  │  ", style="dim")
        body.append("状态: ", style="dim")
        body.append_text(self.status_text(ticket.status))
        body.append("\n")
        body.append("提交人: ", style="dim")
        body.append(ticket.created_by)
        body.append("  │  ", style="dim")
        body.append("处理人: ", style="dim")
        body.append(ticket.assignee_id or "未分派")
        body.append("\n")
        body.append("创建: ", style="dim")
        body.append(ticket.created_at.strftime("%Y-%m-%d %H:%M:%S"))
        body.append("  │  ", style="dim")
        body.append("更新: ", style="dim")
        body.append(ticket.updated_at.strftime("%Y-%m-%d %H:%M:%S"))
        body.append("\n\n")
        body.append(ticket.description)

        if ticket.attachment:
            size_kb = ticket.attachment.size / 1024
            body.append("\n\n附件: ", style="dim")
            body.append(f"{ticket.attachment.name} ({size_kb:.1f} KB)")

        return Panel(body, title=f"[bold]{ticket.title}[/bold]", subtitle=ticket.id, title_align="left")

    def _render_counts(self, title: str, rows: List[Text], counts: List[int]) -> Table:
        table = Table(title=title, box=SIMPLE, show_header=False, title_justify="left")
        table.add_column("名称")
        table.add_column("数量", justify="right", style="bold")
        for label, count in zip(rows, counts):
            table.add_row(label, str(count))
        return table

    def render_stats(self, stats: DashboardStats) -> Group:
        """渲染管理面板统计

        Returns:
            Rich Group 对象
        """
        headline = Text()
        headline.append("总数 ", style="dim")
        headline.append(str(stats.total), style="bold")
        headline.append("  │  ", style="dim")
        headline.append("待处理 ", style="dim")
        headline.append(str(stats.by_status.get(Status.OPEN, 0)), style="bold red")
        headline.append("  │  ", style="dim")
        headline.append("已解决 ", style="dim")
        headline.append(str(stats.resolved), style="bold green")
        headline.append("  │  ", style="dim")
        headline.append("高优先级 ", style="dim")
        headline.append(str(stats.high_priority_open), style="bold dark_orange")
        headline.append("  │  ", style="dim")
        headline.append("平均处理时长 ", style="dim")
        headline.append(stats.avg_resolution_time, style="bold")

        status_table = self._render_counts(
            "状态分布",
            [self.status_text(s) for s in Status],
            [stats.by_status.get(s, 0) for s in Status],
        )
        category_table = self._render_counts(
            "分类统计",
            [self.category_text(c) for c in Category],
            [stats.by_category.get(c, 0) for c in Category],
        )

        parts = [headline, status_table, category_table]
        if stats.recent:
            parts.append(self.render_ticket_table(stats.recent))
        return Group(*parts)

    def render_grouped(self, groups: Dict[Status, List[Ticket]]) -> Group:
        """按状态分组渲染（看板视图）"""
        parts = []
        for status, tickets in groups.items():
            header = Text()
            header.append_text(self.status_text(status))
            header.append(f" ({len(tickets)})", style="dim")
            parts.append(header)
            if tickets:
                for ticket in tickets:
                    line = Text("  ")
                    line.append(ticket.id, style="cyan")
                    line.append("  ")
                    line.append_text(self.priority_text(ticket.priority))
                    line.append(f"  {ticket.title}")
                    parts.append(line)
            else:
                parts.append(Text("  暂无工单", style="dim"))
        return Group(*parts)
