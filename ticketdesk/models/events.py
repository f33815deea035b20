"""工单变更事件"""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class TicketEvent(BaseModel):
    """工单集合发生变化的通知

    订阅方只需据此重新查询，不依赖事件内容做增量合并。
    """

    kind: Literal["created", "updated"]
    ticket_id: str
    at: datetime
