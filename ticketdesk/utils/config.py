"""配置加载模块"""
import logging
import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel


class StoreConfig(BaseModel):
    """工单存储配置"""
    backend: Literal["memory", "sqlite"] = "sqlite"
    db_path: Optional[str] = None  # 为空时使用 DATA_DIR 或 data/tickets.db
    snapshot_path: Optional[str] = None  # memory 后端的 JSON 快照文件，为空则不落盘


class WebConfig(BaseModel):
    """Web 服务配置"""
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: List[str] = ["*"]


class LoggingConfig(BaseModel):
    """日志配置"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"


class Config(BaseModel):
    """全局配置"""
    store: StoreConfig = StoreConfig()
    web: WebConfig = WebConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置文件

    Args:
        config_path: 配置文件路径，默认按以下顺序查找：
                     1. 环境变量 CONFIG_PATH
                     2. 项目根目录的 config.yaml（不存在时使用默认配置）

    Returns:
        Config: 配置对象
    """
    if config_path is None:
        # 优先从环境变量读取
        config_path = os.environ.get("CONFIG_PATH")

    if config_path is None:
        # 默认使用项目根目录的 config.yaml
        project_root = Path(__file__).parent.parent.parent
        default_path = project_root / "config.yaml"
        if not default_path.exists():
            return Config()
        config_path = default_path

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"配置文件不存在: {config_path}\n"
            f"请复制 config.yaml.example 并修改为 config.yaml"
        )

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    return Config(**config_dict)


def setup_logging(config: LoggingConfig) -> None:
    """按配置初始化根日志（入口处调用一次）"""
    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.INFO),
        format=config.format,
        datefmt=config.datefmt,
    )
