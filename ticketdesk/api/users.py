"""用户与登录 API 接口"""
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ticketdesk.api.deps import get_identity
from ticketdesk.models import Role, User
from ticketdesk.services.auth_service import IdentityService

# 创建路由
router = APIRouter()


class SignUpRequest(BaseModel):
    """注册请求"""

    email: str
    password: str
    name: str
    role: Role = Role.USER


class SignInRequest(BaseModel):
    """登录请求"""

    email: str
    password: str


@router.post("/users", response_model=User, status_code=201)
def sign_up(request: SignUpRequest, identity: IdentityService = Depends(get_identity)):
    """注册用户"""
    return identity.sign_up(
        email=request.email,
        password=request.password,
        name=request.name,
        role=request.role,
    )


@router.get("/users", response_model=List[User])
def list_users(identity: IdentityService = Depends(get_identity)):
    """列出所有用户（用于分派工单）"""
    return identity.list_users()


@router.post("/auth/sign-in", response_model=User)
def sign_in(request: SignInRequest, identity: IdentityService = Depends(get_identity)):
    """登录，成功返回用户身份信息"""
    return identity.sign_in(request.email, request.password)
