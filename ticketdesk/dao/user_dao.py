"""User DAO

负责 users 表的数据访问
"""
from typing import List, Optional, Dict, Any

from ticketdesk.dao.base import BaseDAO


class UserDAO(BaseDAO):
    """用户数据访问对象

    返回字典（含 password_hash），由 IdentityService 转换为 User。
    """

    def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        按 ID 获取用户

        Args:
            user_id: 用户 ID

        Returns:
            用户字典，不存在则返回 None
        """
        with self.get_cursor() as (conn, cursor):
            cursor.execute(
                """
                SELECT id, email, name, role, password_hash, created_at
                FROM users
                WHERE id = ?
                """,
                (user_id,),
            )
            row = cursor.fetchone()
            return dict(row) if row else None

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        按邮箱获取用户（不区分大小写）

        Args:
            email: 邮箱

        Returns:
            用户字典，不存在则返回 None
        """
        with self.get_cursor() as (conn, cursor):
            cursor.execute(
                """
                SELECT id, email, name, role, password_hash, created_at
                FROM users
                WHERE lower(email) = lower(?)
                """,
                (email,),
            )
            row = cursor.fetchone()
            return dict(row) if row else None

    def get_all(self) -> List[Dict[str, Any]]:
        """
        获取所有用户

        Returns:
            用户列表（按创建时间）
        """
        with self.get_cursor() as (conn, cursor):
            cursor.execute(
                """
                SELECT id, email, name, role, password_hash, created_at
                FROM users
                ORDER BY created_at, id
                """
            )
            return [dict(row) for row in cursor.fetchall()]

    def insert(self, user: Dict[str, Any]) -> None:
        """
        插入新用户

        Args:
            user: 包含 id, email, name, role, password_hash, created_at 的字典
        """
        with self.get_cursor(row_factory=False) as (conn, cursor):
            cursor.execute(
                """
                INSERT INTO users (id, email, name, role, password_hash, created_at)
                VALUES (:id, :email, :name, :role, :password_hash, :created_at)
                """,
                user,
            )
            conn.commit()
