"""FastAPI 主应用"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ticketdesk.api.tickets import router as tickets_router
from ticketdesk.api.users import router as users_router
from ticketdesk.api.websocket import router as websocket_router
from ticketdesk.core.notifier import ChangeNotifier
from ticketdesk.core.store import SQLiteTicketStore, TicketStore, create_store
from ticketdesk.dao import UserDAO
from ticketdesk.errors import AdapterFailure, AuthenticationError, NotFound, ValidationError
from ticketdesk.services.auth_service import IdentityService
from ticketdesk.utils.config import Config, load_config

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(
    config: Optional[Config] = None,
    store: Optional[TicketStore] = None,
    identity: Optional[IdentityService] = None,
) -> FastAPI:
    """
    创建 FastAPI 应用

    存储、通知器、身份服务在此创建一次，挂在 app.state 上供路由使用。

    Args:
        config: 配置，默认调用 load_config()
        store: 工单存储，默认按 config.store 创建
        identity: 身份服务，默认在 SQLite 后端下基于同一数据库创建

    Returns:
        FastAPI 应用
    """
    if config is None:
        config = load_config()

    if store is None:
        store = create_store(config.store, notifier=ChangeNotifier())

    if identity is None and isinstance(store, SQLiteTicketStore):
        identity = IdentityService(UserDAO(store.db_path))

    # 创建 FastAPI 应用
    app = FastAPI(
        title="工单跟踪系统 API",
        description="工单提交、分派与状态流转",
        version=VERSION,
    )
    app.state.config = config
    app.state.store = store
    app.state.notifier = store.notifier
    app.state.identity = identity

    # 配置 CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # 注册路由
    app.include_router(tickets_router, prefix="/api", tags=["tickets"])
    app.include_router(users_router, prefix="/api", tags=["users"])
    app.include_router(websocket_router, tags=["websocket"])

    @app.get("/")
    async def root():
        """根路径"""
        return {
            "message": "工单跟踪系统 API",
            "version": VERSION,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health():
        """健康检查"""
        return {"status": "ok"}

    return app


def _register_error_handlers(app: FastAPI) -> None:
    """业务异常到 HTTP 状态码的映射"""

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(NotFound)
    async def handle_not_found(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(status_code=401, content={"detail": str(exc)})

    @app.exception_handler(AdapterFailure)
    async def handle_adapter_failure(request: Request, exc: AdapterFailure):
        logger.error(f"{request.method} {request.url.path} 存储失败: {exc}")
        return JSONResponse(status_code=503, content={"detail": "存储服务不可用"})
