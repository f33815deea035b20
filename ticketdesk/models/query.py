"""查询条件与统计结果模型"""
from enum import Enum
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ticketdesk.models.ticket import Category, Status, Ticket


class SortBy(str, Enum):
    """排序方式"""

    NEWEST = "newest"
    OLDEST = "oldest"
    PRIORITY = "priority"
    TITLE = "title"


class QuerySpec(BaseModel):
    """列表视图的筛选条件 {search, category, status, sortBy}

    sort_by 为 None 时保持输入顺序。
    """

    model_config = ConfigDict(populate_by_name=True)

    search: str = ""
    category: Union[Literal["all"], Category] = "all"
    status: Union[Literal["all"], Status] = "all"
    sort_by: Optional[SortBy] = Field(default=None, alias="sortBy")


class DashboardStats(BaseModel):
    """管理面板统计"""

    total: int
    resolved: int
    by_status: Dict[Status, int]
    by_category: Dict[Category, int]
    high_priority_open: int
    avg_resolution_time: str
    recent: List[Ticket] = []
