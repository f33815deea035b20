"""DAO 模块

提供数据访问对象，统一管理数据库操作
"""

from ticketdesk.dao.base import BaseDAO, get_default_db_path
from ticketdesk.dao.ticket_dao import TicketDAO
from ticketdesk.dao.user_dao import UserDAO

__all__ = [
    "BaseDAO",
    "get_default_db_path",
    "TicketDAO",
    "UserDAO",
]
