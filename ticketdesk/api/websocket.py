"""WebSocket 变更推送端点

连接建立后订阅 ChangeNotifier，每次工单创建/更新都推送一条
{"type": "tickets_changed"} 消息，客户端据此重新拉取列表。
"""
import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ticketdesk.models import TicketEvent

# 配置日志
logger = logging.getLogger(__name__)

# 创建路由
router = APIRouter()


def event_message(event: TicketEvent) -> dict:
    """事件转换为推送消息"""
    return {
        "type": "tickets_changed",
        "kind": event.kind,
        "ticket_id": event.ticket_id,
        "at": event.at.isoformat(),
    }


@router.websocket("/ws/tickets")
async def websocket_tickets(websocket: WebSocket):
    """工单变更推送端点

    客户端发来的消息会被忽略，仅用于感知连接断开。
    """
    await websocket.accept()

    client_host = websocket.client.host if websocket.client else "unknown"
    logger.info(f"[{client_host}] WebSocket 连接建立")

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    notifier = websocket.app.state.notifier

    # 存储层可能在工作线程中发布事件，需切回事件循环
    unsubscribe = notifier.subscribe(
        lambda event: loop.call_soon_threadsafe(queue.put_nowait, event)
    )

    async def push_events():
        try:
            while True:
                event = await queue.get()
                await websocket.send_json(event_message(event))
        except WebSocketDisconnect:
            logger.info(f"[{client_host}] 推送时连接已断开")

    await websocket.send_json({"type": "connected"})
    sender = asyncio.create_task(push_events())

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"[{client_host}] WebSocket 连接断开")
    finally:
        unsubscribe()
        sender.cancel()
        # 推送任务可能已因发送失败结束，需取回其异常
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"[{client_host}] 推送任务异常结束: {e}")
