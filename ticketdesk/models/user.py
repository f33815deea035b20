"""用户数据模型"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """用户角色"""

    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """用户（工单侧只通过 id 引用，不做存在性校验）"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role = Role.USER
    created_at: datetime
