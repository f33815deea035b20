"""工单导入 / 导出脚本

导出格式为 JSON 数组，每个元素包含工单的全部字段（枚举为字符串标识，
时间为 ISO-8601），导入时按同一格式读取，数组顺序即列表顺序（新的在前）。
"""
import json
from pathlib import Path
from typing import Iterable, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ticketdesk.dao import TicketDAO, get_default_db_path
from ticketdesk.errors import ValidationError
from ticketdesk.models import Ticket


def export_tickets(tickets: Iterable[Ticket], output_path: str) -> int:
    """
    导出工单到 JSON 文件

    Args:
        tickets: 工单（通常为 store.list_tickets() 的结果）
        output_path: 输出文件路径

    Returns:
        导出的工单数
    """
    data = [t.model_dump(mode="json") for t in tickets]
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return len(data)


def import_tickets(data_path: str, db_path: Optional[str] = None) -> Tuple[int, int]:
    """
    从 JSON 文件导入工单到数据库

    已存在的工单 ID 会被跳过。

    Args:
        data_path: JSON 数据文件路径
        db_path: 数据库文件路径，默认为 DATA_DIR 或 data/tickets.db

    Returns:
        (导入数, 跳过数)
    """
    if db_path is None:
        db_path = get_default_db_path()

    data_path = Path(data_path)

    if not data_path.exists():
        raise FileNotFoundError(f"数据文件不存在: {data_path}")

    if not Path(db_path).exists():
        raise FileNotFoundError(
            f"数据库文件不存在: {db_path}\n"
            f"请先运行: python -m ticketdesk init"
        )

    print(f"正在从 {data_path} 导入数据...")
    print(f"目标数据库: {db_path}")

    with open(data_path, "r", encoding="utf-8") as f:
        items = json.load(f)

    if not isinstance(items, list):
        raise ValueError("JSON 数据格式错误：根元素必须是数组")

    try:
        tickets = [Ticket.model_validate(item) for item in items]
    except PydanticValidationError as e:
        raise ValidationError(f"工单数据不合法: {e}") from e

    print(f"共读取 {len(tickets)} 条工单")

    ticket_dao = TicketDAO(db_path)
    imported_count = 0
    skipped_count = 0

    # 倒序插入，使数据库中的列表顺序与文件一致
    for ticket in reversed(tickets):
        if ticket_dao.get_by_id(ticket.id):
            skipped_count += 1
            continue
        ticket_dao.insert(ticket)
        imported_count += 1

    print(f"\n[OK] 导入完成")
    print(f"  成功导入: {imported_count} 条工单")
    print(f"  跳过重复: {skipped_count} 条")
    print(f"\n数据库统计:")
    print(f"  tickets: {ticket_dao.count()}")

    return imported_count, skipped_count


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("用法: python import_tickets.py <data_path> [db_path]")
        sys.exit(1)

    import_tickets(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
