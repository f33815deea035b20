"""身份服务

用户注册、登录与密码哈希。
密码只做一次 bcrypt 哈希（盐随哈希保存），不做额外的摘要预处理。
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import bcrypt

from ticketdesk.dao import UserDAO
from ticketdesk.errors import AuthenticationError, ValidationError
from ticketdesk.models import Role, User

logger = logging.getLogger(__name__)

# bcrypt 只处理前 72 字节，超出部分直接拒绝
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """
    计算密码哈希

    Raises:
        ValidationError: 密码超过 72 字节
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"密码过长（最多 {MAX_PASSWORD_BYTES} 字节）")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    """校验密码，哈希格式不合法或密码超长时返回 False"""
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("ascii"))
    except ValueError:
        return False


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        role=row["role"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class IdentityService:
    """身份服务

    只提供 {id, name, role} 等身份信息，工单存储不依赖它。
    """

    def __init__(self, user_dao: UserDAO):
        self.user_dao = user_dao

    def sign_up(
        self,
        email: str,
        password: str,
        name: str,
        role: Role = Role.USER,
    ) -> User:
        """
        注册用户

        Raises:
            ValidationError: 邮箱/姓名/密码为空，角色未知，或邮箱已被注册
        """
        email = email.strip()
        name = name.strip()
        if not email or not name or not password:
            raise ValidationError("邮箱、姓名和密码均不能为空")
        try:
            role = Role(role)
        except ValueError as e:
            raise ValidationError(f"未知角色: {role}") from e

        if self.user_dao.get_by_email(email):
            raise ValidationError(f"邮箱已被注册: {email}")

        row = {
            "id": f"usr_{uuid.uuid4().hex[:12]}",
            "email": email,
            "name": name,
            "role": role.value,
            "password_hash": hash_password(password),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        self.user_dao.insert(row)
        logger.info(f"用户已注册: {row['id']} ({role.value})")
        return _to_user(row)

    def sign_in(self, email: str, password: str) -> User:
        """
        登录

        Raises:
            AuthenticationError: 邮箱不存在或密码错误
        """
        row = self.user_dao.get_by_email(email.strip())
        if not row or not verify_password(password, row["password_hash"]):
            raise AuthenticationError("邮箱或密码错误")
        return _to_user(row)

    def get_user(self, user_id: str) -> Optional[User]:
        """按 ID 获取用户"""
        row = self.user_dao.get_by_id(user_id)
        return _to_user(row) if row else None

    def list_users(self) -> List[User]:
        """全部用户"""
        return [_to_user(row) for row in self.user_dao.get_all()]
