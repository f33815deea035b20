"""ticketdesk 命令行入口

使用方式：
    python -m ticketdesk init           # 初始化数据库
    python -m ticketdesk serve          # 启动 FastAPI 服务
    python -m ticketdesk list           # 查询工单列表
    python -m ticketdesk show <id>      # 查看工单详情
    python -m ticketdesk create         # 提交工单
    python -m ticketdesk update <id>    # 更新工单
    python -m ticketdesk stats          # 管理面板统计
    python -m ticketdesk board          # 按状态分组查看
    python -m ticketdesk add-user       # 注册用户
    python -m ticketdesk export         # 导出工单（JSON）
    python -m ticketdesk import         # 导入工单（JSON）
"""
import sys
from typing import Optional

import click

from ticketdesk.models import Category, Priority, Role, SortBy, Status

CATEGORY_CHOICES = [c.value for c in Category]
PRIORITY_CHOICES = [p.value for p in Priority]
STATUS_CHOICES = [s.value for s in Status]

config_option = click.option(
    "--config",
    "config_path",
    default=None,
    help="配置文件路径（默认: CONFIG_PATH 或 config.yaml）",
)


def _open_store(config_path: Optional[str]):
    """按配置创建工单存储"""
    from ticketdesk.core.store import create_store
    from ticketdesk.utils.config import load_config, setup_logging

    config = load_config(config_path)
    setup_logging(config.logging)
    return create_store(config.store)


def _resolve_db(db: Optional[str], config_path: Optional[str]) -> Optional[str]:
    """--db 优先，其次取配置中的 store.db_path（都为空时由 DAO 使用默认路径）"""
    if db:
        return db
    from ticketdesk.utils.config import load_config

    return load_config(config_path).store.db_path


def _fail(message: str, error: Exception) -> None:
    click.echo(f"\n[ERROR] {message}: {error}", err=True)
    sys.exit(1)


@click.group()
def main():
    """工单跟踪系统"""
    pass


@main.command()
@click.option(
    "--db",
    default=None,
    help="数据库文件路径（默认取配置的 store.db_path）",
)
@config_option
def init(db: Optional[str], config_path: Optional[str]):
    """初始化数据库（仅创建表结构，不导入数据）"""
    from ticketdesk.scripts.init_db import init_database

    try:
        init_database(_resolve_db(db, config_path))
        click.echo("\n[OK] 数据库初始化成功")
    except Exception as e:
        _fail("初始化失败", e)


@main.command()
@click.option("--host", default=None, help="服务监听地址（默认取配置）")
@click.option("--port", default=None, type=int, help="服务监听端口（默认取配置）")
@config_option
def serve(host: Optional[str], port: Optional[int], config_path: Optional[str]):
    """启动 FastAPI 服务"""
    import uvicorn
    from ticketdesk.api.main import create_app
    from ticketdesk.utils.config import load_config, setup_logging

    config = load_config(config_path)
    setup_logging(config.logging)
    host = host or config.web.host
    port = port or config.web.port

    app = create_app(config)
    click.echo(f"正在启动服务: http://{host}:{port}")
    click.echo(f"API 文档: http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port)


@main.command("list")
@click.option("--search", "-s", default="", help="在标题和描述中搜索（不区分大小写）")
@click.option("--category", "-c", type=click.Choice(["all"] + CATEGORY_CHOICES), default="all")
@click.option("--status", type=click.Choice(["all"] + STATUS_CHOICES), default="all")
@click.option("--sort", "sort_by", type=click.Choice([s.value for s in SortBy]), default=None)
@click.option("--mine", "created_by", default=None, help="只显示该用户提交的工单")
@config_option
def list_command(search, category, status, sort_by, created_by, config_path):
    """查询工单列表"""
    from rich.console import Console
    from ticketdesk.cli.rendering import TicketRenderer
    from ticketdesk.core.query import filter_tickets, tickets_for_user
    from ticketdesk.models import QuerySpec

    try:
        store = _open_store(config_path)
        tickets = store.list_tickets()
        if created_by:
            tickets = tickets_for_user(tickets, created_by)
        spec = QuerySpec(search=search, category=category, status=status, sort_by=sort_by)
        result = filter_tickets(tickets, spec)
    except Exception as e:
        _fail("查询失败", e)

    console = Console()
    console.print(TicketRenderer(console).render_ticket_table(result, total=len(tickets)))


@main.command()
@click.argument("ticket_id")
@config_option
def show(ticket_id: str, config_path: Optional[str]):
    """查看工单详情"""
    from rich.console import Console
    from ticketdesk.cli.rendering import TicketRenderer

    try:
        ticket = _open_store(config_path).get(ticket_id)
    except Exception as e:
        _fail("查询失败", e)

    if ticket is None:
        click.echo(f"[ERROR] 工单不存在: {ticket_id}", err=True)
        sys.exit(1)

    console = Console()
    console.print(TicketRenderer(console).render_ticket_detail(ticket))


@main.command()
@click.option("--title", "-t", required=True, help="标题")
@click.option("--description", "-d", required=True, help="描述")
@click.option("--category", "-c", type=click.Choice(CATEGORY_CHOICES), default="general")
@click.option("--priority", "-p", type=click.Choice(PRIORITY_CHOICES), default="medium")
@click.option("--created-by", "-u", required=True, help="提交人 ID")
@config_option
def create(title, description, category, priority, created_by, config_path):
    """提交工单"""
    try:
        ticket = _open_store(config_path).create({
            "title": title,
            "description": description,
            "category": category,
            "priority": priority,
            "created_by": created_by,
        })
    except Exception as e:
        _fail("创建失败", e)

    click.echo(f"[OK] 工单已创建: {ticket.id}")


@main.command()
@click.argument("ticket_id")
@click.option("--title", default=None)
@click.option("--description", default=None)
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), default=None)
@click.option("--priority", type=click.Choice(PRIORITY_CHOICES), default=None)
@click.option("--status", type=click.Choice(STATUS_CHOICES), default=None)
@click.option("--assignee", default=None, help="处理人 ID")
@click.option("--unassign", is_flag=True, help="取消分派")
@config_option
def update(ticket_id, title, description, category, priority, status, assignee, unassign, config_path):
    """更新工单（未指定的字段保持不变）"""
    patch = {
        key: value
        for key, value in {
            "title": title,
            "description": description,
            "category": category,
            "priority": priority,
            "status": status,
            "assignee_id": assignee,
        }.items()
        if value is not None
    }
    if unassign:
        patch["assignee_id"] = None

    try:
        ticket = _open_store(config_path).update(ticket_id, patch)
    except Exception as e:
        _fail("更新失败", e)

    if ticket is None:
        click.echo(f"[ERROR] 工单不存在: {ticket_id}", err=True)
        sys.exit(1)

    click.echo(f"[OK] 工单已更新: {ticket.id} ({ticket.status.value})")


@main.command()
@click.option("--recent", default=10, type=int, help="显示最近工单数")
@config_option
def stats(recent: int, config_path: Optional[str]):
    """管理面板统计"""
    from rich.console import Console
    from ticketdesk.cli.rendering import TicketRenderer
    from ticketdesk.core.analytics import summarize

    try:
        summary = summarize(_open_store(config_path).list_tickets(), recent_limit=recent)
    except Exception as e:
        _fail("统计失败", e)

    console = Console()
    console.print(TicketRenderer(console).render_stats(summary))


@main.command()
@config_option
def board(config_path: Optional[str]):
    """按状态分组查看工单"""
    from rich.console import Console
    from ticketdesk.cli.rendering import TicketRenderer
    from ticketdesk.core.query import group_by_status

    try:
        groups = group_by_status(_open_store(config_path).list_tickets())
    except Exception as e:
        _fail("查询失败", e)

    console = Console()
    console.print(TicketRenderer(console).render_grouped(groups))


@main.command("add-user")
@click.option("--email", required=True)
@click.option("--name", required=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--role", type=click.Choice([r.value for r in Role]), default="user")
@click.option(
    "--db",
    default=None,
    help="数据库文件路径（默认取配置的 store.db_path）",
)
@config_option
def add_user(
    email: str,
    name: str,
    password: str,
    role: str,
    db: Optional[str],
    config_path: Optional[str],
):
    """注册用户"""
    from ticketdesk.dao import UserDAO
    from ticketdesk.services.auth_service import IdentityService

    try:
        identity = IdentityService(UserDAO(_resolve_db(db, config_path)))
        user = identity.sign_up(email, password, name, Role(role))
    except Exception as e:
        _fail("注册失败", e)

    click.echo(f"[OK] 用户已注册: {user.id} ({user.role.value})")


@main.command()
@click.option(
    "--output", "-o",
    default="data/tickets_export.json",
    help="输出文件路径（默认: data/tickets_export.json）",
)
@config_option
def export(output: str, config_path: Optional[str]):
    """导出工单到 JSON 文件"""
    from ticketdesk.scripts.import_tickets import export_tickets

    try:
        count = export_tickets(_open_store(config_path).list_tickets(), output)
    except Exception as e:
        _fail("导出失败", e)

    click.echo(f"[OK] 已导出 {count} 个工单: {output}")


@main.command("import")
@click.option(
    "--data",
    required=True,
    type=click.Path(exists=True),
    help="工单数据文件路径（JSON 格式）",
)
@click.option(
    "--db",
    default=None,
    help="数据库文件路径（默认取配置的 store.db_path）",
)
@config_option
def import_data(data: str, db: Optional[str], config_path: Optional[str]):
    """导入工单数据到数据库"""
    from ticketdesk.scripts.import_tickets import import_tickets

    try:
        import_tickets(data, _resolve_db(db, config_path))
        click.echo("\n[OK] 数据导入成功")
    except Exception as e:
        _fail("导入失败", e)


if __name__ == "__main__":
    main()
