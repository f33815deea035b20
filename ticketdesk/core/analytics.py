"""工单统计

每次调用都基于传入的集合完整重算，不做缓存或增量维护。
"""
import math
from typing import Dict, Iterable, List, Optional

from ticketdesk.core.query import sort_tickets
from ticketdesk.models import Category, DashboardStats, Priority, SortBy, Status, Ticket

NOT_AVAILABLE = "N/A"

HIGH_PRIORITIES = {Priority.HIGH, Priority.URGENT}
ACTIVE_STATUSES = {Status.OPEN, Status.IN_PROGRESS}
DONE_STATUSES = {Status.RESOLVED, Status.CLOSED}


def count_by_status(tickets: Iterable[Ticket]) -> Dict[Status, int]:
    """各状态的工单数，空状态计 0"""
    counts = {status: 0 for status in Status}
    for ticket in tickets:
        counts[ticket.status] += 1
    return counts


def count_by_category(tickets: Iterable[Ticket]) -> Dict[Category, int]:
    """各分类的工单数，空分类计 0"""
    counts = {category: 0 for category in Category}
    for ticket in tickets:
        counts[ticket.category] += 1
    return counts


def high_priority_open_count(tickets: Iterable[Ticket]) -> int:
    """高优先级（high / urgent）且未处理完（open / in_progress）的工单数"""
    return sum(
        1 for t in tickets
        if t.priority in HIGH_PRIORITIES and t.status in ACTIVE_STATUSES
    )


def average_resolution_hours(tickets: Iterable[Ticket]) -> Optional[float]:
    """
    已解决/已关闭工单的平均处理时长（小时）

    单个工单的处理时长取 updated_at - created_at。

    Returns:
        平均小时数；没有已解决/已关闭的工单时返回 None
    """
    durations = [
        (t.updated_at - t.created_at).total_seconds() / 3600
        for t in tickets
        if t.status in DONE_STATUSES
    ]
    if not durations:
        return None
    return sum(durations) / len(durations)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_duration(hours: float) -> str:
    """
    格式化时长：不足 24 小时显示整小时（"5h"），否则显示整天数（"2d"）

    四舍五入（0.5 进位），不截断。判断阈值使用原始小时数，
    因此 23.5 小时显示为 "24h"。
    """
    if hours < 24:
        return f"{_round_half_up(hours)}h"
    return f"{_round_half_up(hours / 24)}d"


def average_resolution_time(tickets: Iterable[Ticket]) -> str:
    """平均处理时长的展示值，无数据时为 "N/A" """
    hours = average_resolution_hours(tickets)
    if hours is None:
        return NOT_AVAILABLE
    return format_duration(hours)


def recent_tickets(tickets: Iterable[Ticket], limit: int = 10) -> List[Ticket]:
    """最近创建的工单（按 created_at 倒序）"""
    return sort_tickets(tickets, SortBy.NEWEST)[:limit]


def summarize(tickets: Iterable[Ticket], recent_limit: int = 10) -> DashboardStats:
    """
    管理面板汇总

    Args:
        tickets: 工单集合
        recent_limit: 最近工单条数

    Returns:
        DashboardStats
    """
    tickets = list(tickets)
    by_status = count_by_status(tickets)
    return DashboardStats(
        total=len(tickets),
        resolved=by_status[Status.RESOLVED],
        by_status=by_status,
        by_category=count_by_category(tickets),
        high_priority_open=high_priority_open_count(tickets),
        avg_resolution_time=average_resolution_time(tickets),
        recent=recent_tickets(tickets, recent_limit),
    )
