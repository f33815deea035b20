"""Ticket DAO

负责 tickets 表的数据访问
"""
import json
from datetime import datetime
from typing import List, Optional, Dict, Any

from ticketdesk.dao.base import BaseDAO
from ticketdesk.models import Ticket

_COLUMNS = (
    "id, title, description, category, priority, status, created_by, "
    "assignee_id, attachment_json, comments_json, created_at, updated_at"
)


def row_to_ticket(row) -> Ticket:
    """将数据库行转换为 Ticket"""
    data: Dict[str, Any] = dict(row)
    attachment_json = data.pop("attachment_json")
    comments_json = data.pop("comments_json")
    data["attachment"] = json.loads(attachment_json) if attachment_json else None
    data["comments"] = json.loads(comments_json) if comments_json else []
    data["created_at"] = datetime.fromisoformat(data["created_at"])
    data["updated_at"] = datetime.fromisoformat(data["updated_at"])
    return Ticket.model_validate(data)


def ticket_to_row(ticket: Ticket) -> Dict[str, Any]:
    """将 Ticket 转换为可写入数据库的字段（枚举存储为字符串标识）"""
    data = ticket.model_dump(mode="json")
    return {
        "id": data["id"],
        "title": data["title"],
        "description": data["description"],
        "category": data["category"],
        "priority": data["priority"],
        "status": data["status"],
        "created_by": data["created_by"],
        "assignee_id": data["assignee_id"],
        "attachment_json": (
            json.dumps(data["attachment"], ensure_ascii=False)
            if data["attachment"] is not None
            else None
        ),
        "comments_json": json.dumps(data["comments"], ensure_ascii=False),
        "created_at": ticket.created_at.isoformat(),
        "updated_at": ticket.updated_at.isoformat(),
    }


class TicketDAO(BaseDAO):
    """工单数据访问对象"""

    def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """
        按 ID 获取单个工单

        Args:
            ticket_id: 工单 ID

        Returns:
            工单，不存在则返回 None
        """
        with self.get_cursor() as (conn, cursor):
            cursor.execute(
                f"""
                SELECT {_COLUMNS}
                FROM tickets
                WHERE id = ?
                """,
                (ticket_id,),
            )
            row = cursor.fetchone()
            return row_to_ticket(row) if row else None

    def get_all(self) -> List[Ticket]:
        """
        获取所有工单

        Returns:
            工单列表，最后插入的排在最前
        """
        with self.get_cursor() as (conn, cursor):
            cursor.execute(
                f"""
                SELECT {_COLUMNS}
                FROM tickets
                ORDER BY rowid DESC
                """
            )
            return [row_to_ticket(row) for row in cursor.fetchall()]

    def insert(self, ticket: Ticket) -> None:
        """
        插入新工单

        Args:
            ticket: 工单
        """
        row = ticket_to_row(ticket)
        with self.get_cursor(row_factory=False) as (conn, cursor):
            cursor.execute(
                f"""
                INSERT INTO tickets ({_COLUMNS})
                VALUES (:id, :title, :description, :category, :priority, :status,
                        :created_by, :assignee_id, :attachment_json, :comments_json,
                        :created_at, :updated_at)
                """,
                row,
            )
            conn.commit()

    def update(self, ticket: Ticket) -> int:
        """
        覆盖写入工单的可变字段

        id / created_by / created_at 不会被修改。

        Args:
            ticket: 更新后的工单

        Returns:
            受影响的行数（0 表示工单不存在）
        """
        row = ticket_to_row(ticket)
        with self.get_cursor(row_factory=False) as (conn, cursor):
            cursor.execute(
                """
                UPDATE tickets
                SET title = :title,
                    description = :description,
                    category = :category,
                    priority = :priority,
                    status = :status,
                    assignee_id = :assignee_id,
                    attachment_json = :attachment_json,
                    comments_json = :comments_json,
                    updated_at = :updated_at
                WHERE id = :id
                """,
                row,
            )
            conn.commit()
            return cursor.rowcount

    def count(self) -> int:
        """
        获取工单总数

        Returns:
            工单数量
        """
        with self.get_cursor() as (conn, cursor):
            cursor.execute("SELECT COUNT(*) FROM tickets")
            return cursor.fetchone()[0]
