"""路由依赖

组件在 create_app 中创建一次并挂在 app.state 上，路由通过依赖获取，
不直接访问全局对象。
"""
from fastapi import HTTPException, Request

from ticketdesk.core.notifier import ChangeNotifier
from ticketdesk.core.store import TicketStore
from ticketdesk.services.auth_service import IdentityService


def get_store(request: Request) -> TicketStore:
    return request.app.state.store


def get_notifier(request: Request) -> ChangeNotifier:
    return request.app.state.notifier


def get_identity(request: Request) -> IdentityService:
    identity = request.app.state.identity
    if identity is None:
        raise HTTPException(status_code=501, detail="当前存储后端不支持用户管理")
    return identity
