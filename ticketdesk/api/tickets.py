"""工单 API 接口"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from ticketdesk.api.deps import get_store
from ticketdesk.core.analytics import summarize
from ticketdesk.core.query import filter_tickets, group_by_status, tickets_for_user
from ticketdesk.core.store import TicketStore, coerce_model
from ticketdesk.models import DashboardStats, QuerySpec, Role, Ticket, TicketCreate, TicketPatch

# 创建路由
router = APIRouter()

# 普通用户不能修改的字段（由调用方而非存储层校验）
ADMIN_ONLY_FIELDS = {"status", "priority", "assignee_id"}


@router.get("/tickets", response_model=List[Ticket])
def list_tickets(
    search: str = "",
    category: str = "all",
    status: str = "all",
    sort_by: Optional[str] = None,
    created_by: Optional[str] = None,
    store: TicketStore = Depends(get_store),
):
    """
    查询工单列表

    search 在标题和描述中做不区分大小写的匹配；category / status 为 "all" 时不过滤；
    sort_by 为空时保持存储顺序（最近创建的在前）。
    created_by 用于 "我的工单" 视图。
    """
    spec = coerce_model(
        QuerySpec,
        {"search": search, "category": category, "status": status, "sort_by": sort_by},
    )
    tickets = store.list_tickets()
    if created_by:
        tickets = tickets_for_user(tickets, created_by)
    return filter_tickets(tickets, spec)


@router.get("/tickets/grouped", response_model=Dict[str, List[Ticket]])
def grouped_tickets(store: TicketStore = Depends(get_store)):
    """按状态分组的工单（看板视图）"""
    groups = group_by_status(store.list_tickets())
    return {status.value: tickets for status, tickets in groups.items()}


@router.get("/tickets/{ticket_id}", response_model=Ticket)
def get_ticket(ticket_id: str, store: TicketStore = Depends(get_store)):
    """获取单个工单"""
    ticket = store.get(ticket_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail="工单不存在")
    return ticket


@router.post("/tickets", response_model=Ticket, status_code=201)
def create_ticket(payload: TicketCreate, store: TicketStore = Depends(get_store)):
    """提交工单，初始状态为 open"""
    return store.create(payload)


@router.patch("/tickets/{ticket_id}", response_model=Ticket)
def update_ticket(
    ticket_id: str,
    patch: TicketPatch,
    x_user_role: Optional[str] = Header(default=None),
    store: TicketStore = Depends(get_store),
):
    """
    更新工单

    请求头 X-User-Role 为 user 时，不允许修改 status / priority / assignee_id。
    """
    if x_user_role == Role.USER.value:
        forbidden = ADMIN_ONLY_FIELDS & patch.model_fields_set
        if forbidden:
            raise HTTPException(
                status_code=403,
                detail=f"仅管理员可修改: {', '.join(sorted(forbidden))}",
            )

    ticket = store.update(ticket_id, patch)
    if ticket is None:
        raise HTTPException(status_code=404, detail="工单不存在")
    return ticket


@router.get("/stats", response_model=DashboardStats)
def get_stats(recent_limit: int = 10, store: TicketStore = Depends(get_store)):
    """管理面板统计"""
    return summarize(store.list_tickets(), recent_limit=recent_limit)
