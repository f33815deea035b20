"""Config 模块单元测试"""
import pytest
from pathlib import Path
import sys
import tempfile

import yaml
from pydantic import ValidationError as PydanticValidationError

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ticketdesk.utils.config import Config, LoggingConfig, StoreConfig, WebConfig, load_config


class TestConfigModels:
    """配置模型测试"""

    def test_defaults(self):
        """测试:默认配置"""
        config = Config()

        assert config.store.backend == "sqlite"
        assert config.store.db_path is None
        assert config.web.host == "127.0.0.1"
        assert config.web.port == 8000
        assert config.logging.level == "INFO"

    def test_memory_store(self):
        """测试:memory 后端配置"""
        config = StoreConfig(backend="memory", snapshot_path="data/tickets.json")
        assert config.backend == "memory"
        assert config.snapshot_path == "data/tickets.json"

    def test_unknown_backend_rejected(self):
        """测试:未知后端被拒绝"""
        with pytest.raises(PydanticValidationError):
            StoreConfig(backend="supabase")

    def test_web_config(self):
        """测试:Web 配置"""
        config = WebConfig(host="0.0.0.0", port=9000, cors_origins=["http://localhost:5173"])
        assert config.cors_origins == ["http://localhost:5173"]


class TestLoadConfig:
    """配置加载测试"""

    @pytest.fixture
    def config_file(self):
        """创建临时配置文件"""
        data = {
            "store": {"backend": "memory", "snapshot_path": "/tmp/tickets.json"},
            "web": {"port": 9000},
            "logging": {"level": "DEBUG"},
        }
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8") as f:
            yaml.safe_dump(data, f)
            path = f.name
        yield path
        Path(path).unlink()

    def test_load_explicit_path(self, config_file):
        """测试:从指定路径加载"""
        config = load_config(config_file)

        assert config.store.backend == "memory"
        assert config.web.port == 9000
        assert config.web.host == "127.0.0.1"
        assert config.logging.level == "DEBUG"

    def test_load_from_env(self, config_file, monkeypatch):
        """测试:从 CONFIG_PATH 环境变量加载"""
        monkeypatch.setenv("CONFIG_PATH", config_file)
        config = load_config()
        assert config.store.backend == "memory"

    def test_missing_explicit_file(self):
        """测试:指定的配置文件不存在时报错"""
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/config.yaml")

    def test_empty_file_uses_defaults(self):
        """测试:空配置文件使用默认值"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            path.write_text("", encoding="utf-8")
            config = load_config(str(path))
            assert config == Config()

    def test_logging_config(self):
        """测试:日志配置默认格式"""
        config = LoggingConfig()
        assert "%(levelname)s" in config.format
