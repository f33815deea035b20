"""身份服务单元测试"""
import pytest
import tempfile
import os
from pathlib import Path
import sys

import bcrypt

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ticketdesk.dao import UserDAO
from ticketdesk.errors import AuthenticationError, ValidationError
from ticketdesk.models import Role
from ticketdesk.scripts.init_db import init_database
from ticketdesk.services.auth_service import IdentityService, hash_password, verify_password


class TestPasswordHashing:
    """密码哈希测试"""

    def test_verify(self):
        """测试: 正确密码校验通过，错误密码不通过"""
        hashed = hash_password("s3cret")
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)

    def test_random_salt(self):
        """测试: 同一密码每次哈希结果不同"""
        assert hash_password("s3cret") != hash_password("s3cret")

    def test_bcrypt_format(self):
        """测试: 输出标准 bcrypt 哈希（盐包含在哈希中）"""
        hashed = hash_password("s3cret")
        assert hashed.startswith("$2b$")
        assert bcrypt.checkpw(b"s3cret", hashed.encode("ascii"))

    def test_too_long_password(self):
        """测试: 超过 72 字节的密码被拒绝，校验时返回 False"""
        with pytest.raises(ValidationError):
            hash_password("x" * 73)
        assert not verify_password("x" * 73, hash_password("x" * 72))

    def test_malformed_hash(self):
        """测试: 格式不合法的哈希校验失败而不是抛异常"""
        assert not verify_password("s3cret", "not-a-hash")
        assert not verify_password("s3cret", "$2b$12$short")
        assert not verify_password("s3cret", "scrypt$16384$8$1$abc$def")


class TestIdentityService:
    """IdentityService 测试"""

    @pytest.fixture
    def identity(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = os.path.join(tmpdir, "test.db")
            init_database(db_path)
            yield IdentityService(UserDAO(db_path))

    def test_sign_up_and_sign_in(self, identity):
        """测试: 注册后可登录"""
        user = identity.sign_up("a@example.com", "pw", "Alice")

        assert user.role == Role.USER
        signed_in = identity.sign_in("a@example.com", "pw")
        assert signed_in.id == user.id
        assert signed_in.name == "Alice"

    def test_password_not_stored_in_plain_text(self, identity):
        """测试: 数据库中不保存明文密码"""
        user = identity.sign_up("a@example.com", "pw-plain", "Alice")
        row = identity.user_dao.get_by_id(user.id)
        assert "pw-plain" not in row["password_hash"]

    def test_admin_role(self, identity):
        """测试: 注册管理员"""
        user = identity.sign_up("admin@example.com", "pw", "Admin", role="admin")
        assert user.role == Role.ADMIN

    def test_unknown_role(self, identity):
        """测试: 未知角色被拒绝"""
        with pytest.raises(ValidationError):
            identity.sign_up("a@example.com", "pw", "Alice", role="root")

    def test_duplicate_email(self, identity):
        """测试: 重复邮箱被拒绝"""
        identity.sign_up("a@example.com", "pw", "Alice")
        with pytest.raises(ValidationError):
            identity.sign_up("A@example.com", "pw2", "Alice2")

    def test_blank_fields(self, identity):
        """测试: 必填字段为空被拒绝"""
        with pytest.raises(ValidationError):
            identity.sign_up("  ", "pw", "Alice")
        with pytest.raises(ValidationError):
            identity.sign_up("a@example.com", "", "Alice")

    def test_wrong_password(self, identity):
        """测试: 密码错误"""
        identity.sign_up("a@example.com", "pw", "Alice")
        with pytest.raises(AuthenticationError):
            identity.sign_in("a@example.com", "nope")

    def test_unknown_email(self, identity):
        """测试: 邮箱不存在"""
        with pytest.raises(AuthenticationError):
            identity.sign_in("ghost@example.com", "pw")

    def test_get_and_list_users(self, identity):
        """测试: 获取和列出用户"""
        alice = identity.sign_up("a@example.com", "pw", "Alice")
        identity.sign_up("b@example.com", "pw", "Bob", role=Role.ADMIN)

        assert identity.get_user(alice.id).email == "a@example.com"
        assert identity.get_user("usr_missing") is None
        assert {u.name for u in identity.list_users()} == {"Alice", "Bob"}
