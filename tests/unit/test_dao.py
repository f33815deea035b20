"""DAO 层单元测试"""
import pytest
import sqlite3
import tempfile
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ticketdesk.scripts.init_db import init_database
from ticketdesk.dao import BaseDAO, TicketDAO, UserDAO
from ticketdesk.errors import AdapterFailure
from ticketdesk.models import Attachment, Status, Ticket

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_ticket(ticket_id: str, **overrides) -> Ticket:
    data = dict(
        id=ticket_id,
        title="Wifi down",
        description="Library wifi",
        category="technical",
        priority="high",
        created_by="usr_1",
        created_at=T0,
        updated_at=T0,
    )
    data.update(overrides)
    return Ticket(**data)


class TestBaseDAO:
    """BaseDAO 测试"""

    def test_default_db_path(self):
        """测试: 默认数据库路径"""
        dao = BaseDAO()
        assert dao.db_path.endswith("tickets.db")

    def test_default_db_path_from_env(self, monkeypatch):
        """测试: DATA_DIR 环境变量"""
        monkeypatch.setenv("DATA_DIR", "/srv/ticketdesk")
        dao = BaseDAO()
        assert dao.db_path == str(Path("/srv/ticketdesk") / "tickets.db")

    def test_custom_db_path(self):
        """测试: 自定义数据库路径"""
        dao = BaseDAO("/custom/path.db")
        assert dao.db_path == "/custom/path.db"

    def test_get_cursor_context_manager(self):
        """测试: get_cursor 上下文管理器"""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = os.path.join(tmpdir, "test.db")
            init_database(db_path)

            dao = BaseDAO(db_path)
            with dao.get_cursor() as (conn, cursor):
                cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
                tables = [row[0] for row in cursor.fetchall()]
                assert "tickets" in tables

    def test_sqlite_error_wrapped(self):
        """测试: sqlite 异常转换为 AdapterFailure"""
        with tempfile.TemporaryDirectory() as tmpdir:
            dao = BaseDAO(os.path.join(tmpdir, "test.db"))
            with pytest.raises(AdapterFailure):
                with dao.get_cursor() as (conn, cursor):
                    cursor.execute("SELECT * FROM no_such_table")


class TestTicketDAO:
    """TicketDAO 测试"""

    @pytest.fixture
    def dao(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = os.path.join(tmpdir, "test.db")
            init_database(db_path)
            yield TicketDAO(db_path)

    def test_insert_and_get(self, dao):
        """测试: 插入后按 ID 获取，所有字段无损"""
        ticket = make_ticket(
            "tkt_1",
            status="in_progress",
            assignee_id="usr_admin",
            attachment=Attachment(name="图片.png", url="blob:1", size=2048, type="image/png"),
            updated_at=T0 + timedelta(hours=3),
        )
        dao.insert(ticket)

        assert dao.get_by_id("tkt_1") == ticket

    def test_enums_stored_as_identifiers(self, dao):
        """测试: 枚举以字符串标识存储"""
        dao.insert(make_ticket("tkt_1", status="in_progress"))

        with dao.get_cursor() as (conn, cursor):
            cursor.execute("SELECT status, category, priority FROM tickets")
            row = cursor.fetchone()
        assert tuple(row) == ("in_progress", "technical", "high")

    def test_get_missing(self, dao):
        """测试: 获取不存在的工单"""
        assert dao.get_by_id("tkt_missing") is None

    def test_get_all_newest_insert_first(self, dao):
        """测试: 列表按插入顺序倒序"""
        dao.insert(make_ticket("tkt_a"))
        dao.insert(make_ticket("tkt_b"))
        dao.insert(make_ticket("tkt_c"))

        assert [t.id for t in dao.get_all()] == ["tkt_c", "tkt_b", "tkt_a"]

    def test_update(self, dao):
        """测试: 更新可变字段"""
        dao.insert(make_ticket("tkt_1"))
        changed = make_ticket("tkt_1", status="resolved", updated_at=T0 + timedelta(hours=1))

        assert dao.update(changed) == 1
        assert dao.get_by_id("tkt_1").status == Status.RESOLVED

    def test_update_does_not_touch_immutable_fields(self, dao):
        """测试: 更新不修改 created_by / created_at"""
        dao.insert(make_ticket("tkt_1"))
        forged = make_ticket("tkt_1", created_by="usr_2", created_at=T0 - timedelta(days=1))

        dao.update(forged)

        stored = dao.get_by_id("tkt_1")
        assert stored.created_by == "usr_1"
        assert stored.created_at == T0

    def test_update_missing_returns_zero(self, dao):
        """测试: 更新不存在的工单返回 0"""
        assert dao.update(make_ticket("tkt_missing")) == 0

    def test_duplicate_id(self, dao):
        """测试: 重复 ID 抛出 AdapterFailure"""
        dao.insert(make_ticket("tkt_1"))
        with pytest.raises(AdapterFailure):
            dao.insert(make_ticket("tkt_1"))
        assert dao.count() == 1

    def test_count(self, dao):
        """测试: 计数"""
        assert dao.count() == 0
        dao.insert(make_ticket("tkt_1"))
        assert dao.count() == 1


class TestUserDAO:
    """UserDAO 测试"""

    @pytest.fixture
    def dao(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = os.path.join(tmpdir, "test.db")
            init_database(db_path)
            yield UserDAO(db_path)

    def _user(self, user_id: str, email: str, role: str = "user") -> dict:
        return {
            "id": user_id,
            "email": email,
            "name": user_id,
            "role": role,
            "password_hash": "$2b$12$x",
            "created_at": T0.isoformat(),
        }

    def test_insert_and_get(self, dao):
        """测试: 插入后按 ID / 邮箱获取"""
        dao.insert(self._user("usr_1", "a@example.com"))

        assert dao.get_by_id("usr_1")["email"] == "a@example.com"
        assert dao.get_by_email("A@Example.com")["id"] == "usr_1"
        assert dao.get_by_email("b@example.com") is None

    def test_unique_email(self, dao):
        """测试: 邮箱唯一"""
        dao.insert(self._user("usr_1", "a@example.com"))
        with pytest.raises(AdapterFailure):
            dao.insert(self._user("usr_2", "a@example.com"))

    def test_get_all(self, dao):
        """测试: 获取所有用户"""
        dao.insert(self._user("usr_1", "a@example.com"))
        dao.insert(self._user("usr_2", "b@example.com", role="admin"))

        users = dao.get_all()
        assert [u["id"] for u in users] == ["usr_1", "usr_2"]
        assert users[1]["role"] == "admin"
