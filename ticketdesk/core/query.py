"""工单查询

筛选、排序、分组均为纯函数：返回新列表，不修改输入及其中的工单。
"""
import unicodedata
from typing import Dict, Iterable, List, Optional

from ticketdesk.models import QuerySpec, SortBy, Status, Ticket


def matches(ticket: Ticket, spec: QuerySpec) -> bool:
    """
    判断工单是否满足筛选条件

    三个条件取交集：
    - search: 在 "标题 描述" 中做不区分大小写的子串匹配，空串匹配全部
    - category / status: 精确匹配，"all" 表示不过滤
    """
    if spec.search:
        haystack = f"{ticket.title} {ticket.description}".lower()
        if spec.search.lower() not in haystack:
            return False

    if spec.category != "all" and ticket.category != spec.category:
        return False

    if spec.status != "all" and ticket.status != spec.status:
        return False

    return True


def _title_key(ticket: Ticket):
    # 近似 localeCompare：先按折叠大小写、去除重音比较，再按原文区分
    normalized = unicodedata.normalize("NFKD", ticket.title)
    base = "".join(c for c in normalized if not unicodedata.combining(c))
    return (base.casefold(), ticket.title)


def sort_tickets(tickets: Iterable[Ticket], sort_by: Optional[SortBy]) -> List[Ticket]:
    """
    排序（稳定排序，相等元素保持输入顺序）

    Args:
        tickets: 工单序列
        sort_by: newest / oldest / priority / title；None 表示不排序

    Returns:
        新的工单列表
    """
    tickets = list(tickets)
    if sort_by is None:
        return tickets

    sort_by = SortBy(sort_by)
    if sort_by == SortBy.NEWEST:
        return sorted(tickets, key=lambda t: t.created_at, reverse=True)
    if sort_by == SortBy.OLDEST:
        return sorted(tickets, key=lambda t: t.created_at)
    if sort_by == SortBy.PRIORITY:
        return sorted(tickets, key=lambda t: t.priority.rank, reverse=True)
    return sorted(tickets, key=_title_key)


def filter_tickets(tickets: Iterable[Ticket], spec: Optional[QuerySpec] = None) -> List[Ticket]:
    """
    按查询条件筛选并排序

    Args:
        tickets: 工单序列
        spec: 查询条件，None 等价于默认条件（不过滤、不排序）

    Returns:
        新的工单列表
    """
    spec = spec or QuerySpec()
    filtered = [t for t in tickets if matches(t, spec)]
    return sort_tickets(filtered, spec.sort_by)


def group_by_status(tickets: Iterable[Ticket]) -> Dict[Status, List[Ticket]]:
    """按状态分组，所有状态都有条目，组内保持输入顺序"""
    groups: Dict[Status, List[Ticket]] = {status: [] for status in Status}
    for ticket in tickets:
        groups[ticket.status].append(ticket)
    return groups


def tickets_for_user(tickets: Iterable[Ticket], user_id: str) -> List[Ticket]:
    """某用户提交的工单（"我的工单" 视图）"""
    return [t for t in tickets if t.created_by == user_id]
