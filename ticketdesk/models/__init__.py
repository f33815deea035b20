"""数据模型模块

组织结构：
- ticket: 工单及其枚举、创建/更新请求
- user: 用户与角色
- query: 筛选条件、统计结果
- events: 变更通知
"""
from ticketdesk.models.ticket import (
    Attachment,
    Category,
    Comment,
    Priority,
    Status,
    Ticket,
    TicketCreate,
    TicketPatch,
    CATEGORY_ICONS,
    CATEGORY_LABELS,
    PRIORITY_LABELS,
    STATUS_LABELS,
)
from ticketdesk.models.user import Role, User
from ticketdesk.models.query import DashboardStats, QuerySpec, SortBy
from ticketdesk.models.events import TicketEvent

__all__ = [
    # 工单
    "Attachment",
    "Category",
    "Comment",
    "Priority",
    "Status",
    "Ticket",
    "TicketCreate",
    "TicketPatch",
    "CATEGORY_ICONS",
    "CATEGORY_LABELS",
    "PRIORITY_LABELS",
    "STATUS_LABELS",
    # 用户
    "Role",
    "User",
    # 查询与统计
    "DashboardStats",
    "QuerySpec",
    "SortBy",
    # 事件
    "TicketEvent",
]
