"""工单数据模型

枚举值即持久化标识（如 "in_progress"），展示用标签单独维护，不写入存储。
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """工单分类"""

    GENERAL = "general"
    ACADEMIC = "academic"
    FACILITIES = "facilities"
    TECHNICAL = "technical"
    HR = "hr"
    FINANCE = "finance"


class Priority(str, Enum):
    """优先级，全序 low < medium < high < urgent"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        """排序用的优先级权重（urgent=4 ... low=1）"""
        return _PRIORITY_RANKS[self]


class Status(str, Enum):
    """工单状态（流转顺序仅是建议，存储层不校验状态迁移）"""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


_PRIORITY_RANKS = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.URGENT: 4,
}

CATEGORY_LABELS = {
    Category.GENERAL: "General Feedback",
    Category.ACADEMIC: "Academic",
    Category.FACILITIES: "Facilities",
    Category.TECHNICAL: "Technical",
    Category.HR: "Human Resources",
    Category.FINANCE: "Finance",
}

CATEGORY_ICONS = {
    Category.GENERAL: "💬",
    Category.ACADEMIC: "📚",
    Category.FACILITIES: "🏢",
    Category.TECHNICAL: "💻",
    Category.HR: "👥",
    Category.FINANCE: "💰",
}

PRIORITY_LABELS = {
    Priority.LOW: "Low",
    Priority.MEDIUM: "Medium",
    Priority.HIGH: "High",
    Priority.URGENT: "Urgent",
}

STATUS_LABELS = {
    Status.OPEN: "Open",
    Status.IN_PROGRESS: "In Progress",
    Status.RESOLVED: "Resolved",
    Status.CLOSED: "Closed",
}


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("不能为空")
    return value


# 去除首尾空白后必须非空
RequiredText = Annotated[str, AfterValidator(_require_text)]


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# 无时区的时间戳按 UTC 处理，保证与存储时钟可比较
UtcDateTime = Annotated[datetime, AfterValidator(_assume_utc)]


class Attachment(BaseModel):
    """附件引用（客户端对象，原样保存，不检查内容）"""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    name: str
    url: str
    size: int = 0
    type: str = ""


class Comment(BaseModel):
    """评论（预留字段，当前功能中始终为空列表）"""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    author_id: str
    body: str
    created_at: UtcDateTime


class Ticket(BaseModel):
    """工单

    不可变对象：所有修改都通过 TicketStore.update 生成新实例。
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    title: str
    description: str
    category: Category
    priority: Priority
    status: Status = Status.OPEN
    created_by: str
    assignee_id: Optional[str] = None
    attachment: Optional[Attachment] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime
    comments: List[Comment] = Field(default_factory=list)


class TicketCreate(BaseModel):
    """创建工单的请求数据

    status / assignee_id 可选，提供时覆盖默认值。
    """

    model_config = ConfigDict(extra="forbid")

    title: RequiredText
    description: RequiredText
    category: Category = Category.GENERAL
    priority: Priority = Priority.MEDIUM
    created_by: str
    attachment: Optional[Attachment] = None
    status: Optional[Status] = None
    assignee_id: Optional[str] = None


class TicketPatch(BaseModel):
    """更新工单的请求数据

    只有显式设置的字段会被覆盖；显式传 None 可清空 assignee_id / attachment。
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[RequiredText] = None
    description: Optional[RequiredText] = None
    category: Optional[Category] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    assignee_id: Optional[str] = None
    attachment: Optional[Attachment] = None

    @field_validator("title", "description", "category", "priority", "status", mode="before")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("不能为空")
        return value

    def changes(self) -> dict:
        """返回显式设置的字段（保留枚举/模型对象）"""
        return {name: getattr(self, name) for name in self.model_fields_set}
