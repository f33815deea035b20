"""异常定义

核心层只抛出这里定义的异常，由调用方（API / CLI）决定如何呈现。
"""


class TicketDeskError(Exception):
    """所有业务异常的基类"""


class ValidationError(TicketDeskError):
    """写入数据不合法：必填字段为空、枚举值未知、出现未知字段等"""


class NotFound(TicketDeskError):
    """按 ID 查找的对象不存在"""

    def __init__(self, ticket_id: str):
        super().__init__(f"工单不存在: {ticket_id}")
        self.ticket_id = ticket_id


class AdapterFailure(TicketDeskError):
    """持久化层操作失败（I/O、序列化、数据库错误）"""


class AuthenticationError(TicketDeskError):
    """邮箱或密码错误"""
