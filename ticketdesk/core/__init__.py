"""核心模块

- store: 工单存储（唯一写入入口）
- query: 筛选 / 排序 / 分组
- analytics: 统计汇总
- notifier: 变更通知
"""
from ticketdesk.core.notifier import ChangeNotifier
from ticketdesk.core.store import (
    InMemoryTicketStore,
    SQLiteTicketStore,
    TicketStore,
    create_store,
)
from ticketdesk.core.query import filter_tickets, group_by_status, sort_tickets
from ticketdesk.core.analytics import average_resolution_time, summarize

__all__ = [
    "ChangeNotifier",
    "InMemoryTicketStore",
    "SQLiteTicketStore",
    "TicketStore",
    "create_store",
    "filter_tickets",
    "group_by_status",
    "sort_tickets",
    "average_resolution_time",
    "summarize",
]
