"""数据库初始化脚本

创建 SQLite 数据库的所有表结构

表结构：
- users: 用户（身份信息、密码哈希）
- tickets: 工单
"""
import sqlite3
from pathlib import Path
from typing import Optional


# 数据库 schema SQL
SCHEMA_SQL = """
-- 用户表
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'user',     -- user / admin
    password_hash TEXT NOT NULL,           -- bcrypt 哈希
    created_at TEXT NOT NULL               -- ISO-8601
);

-- 工单表（rowid 顺序即插入顺序，列表默认按 rowid 倒序）
CREATE TABLE IF NOT EXISTS tickets (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    category TEXT NOT NULL,                -- general / academic / facilities / technical / hr / finance
    priority TEXT NOT NULL,                -- low / medium / high / urgent
    status TEXT NOT NULL DEFAULT 'open',   -- open / in_progress / resolved / closed
    created_by TEXT NOT NULL,
    assignee_id TEXT,
    attachment_json TEXT,                  -- JSON: {"name", "url", "size", "type"}
    comments_json TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL,              -- ISO-8601
    updated_at TEXT NOT NULL               -- ISO-8601
);

CREATE INDEX IF NOT EXISTS idx_tickets_created_by ON tickets(created_by);
CREATE INDEX IF NOT EXISTS idx_tickets_status ON tickets(status);
"""


def init_database(db_path: Optional[str] = None) -> None:
    """
    初始化数据库，创建所有表结构（可重复执行）

    Args:
        db_path: 数据库文件路径，默认为 DATA_DIR 或 data/tickets.db
    """
    if db_path is None:
        from ticketdesk.dao.base import get_default_db_path

        db_path = get_default_db_path()
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    print(f"正在初始化数据库: {db_path}")

    # 连接数据库（如果不存在会自动创建）
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.executescript(SCHEMA_SQL)
        conn.commit()
        print("[OK] 数据库表结构创建成功")

        # 显示创建的表
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
        tables = cursor.fetchall()
        print(f"\n已创建的表 ({len(tables)}):")
        for table in tables:
            print(f"  - {table[0]}")

    except Exception as e:
        print(f"[ERROR] 数据库初始化失败: {e}")
        conn.rollback()
        raise
    finally:
        conn.close()

    print(f"\n数据库初始化完成: {db_path}")


if __name__ == "__main__":
    init_database()
