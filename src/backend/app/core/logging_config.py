"""
日志配置

控制台输出 + 可选文件输出（combined.log 记录全部，error.log 仅记录错误）。
各模块统一使用 logging.getLogger(__name__)。
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from app.core.paths import LOG_DIR, ensure_dir

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _default_level() -> str:
    if os.getenv("DEV_MODE", "false").lower() == "true":
        return "DEBUG"
    return "INFO"


def setup_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> None:
    """
    初始化根 logger（重复调用时不会重复添加 handler）

    Args:
        level: 日志级别，默认读取 LOG_LEVEL，开发模式为 DEBUG
        log_dir: 日志文件目录；设置 LOG_TO_FILE=false 时不写文件
    """
    root = logging.getLogger()
    if getattr(root, "_courser_configured", False):
        return

    level_name = (level or os.getenv("LOG_LEVEL") or _default_level()).upper()
    root.setLevel(level_name)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if os.getenv("LOG_TO_FILE", "true").lower() == "true":
        target_dir = ensure_dir(log_dir or LOG_DIR)

        combined = RotatingFileHandler(
            target_dir / "combined.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        combined.setFormatter(formatter)
        root.addHandler(combined)

        errors = RotatingFileHandler(
            target_dir / "error.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        errors.setLevel(logging.ERROR)
        errors.setFormatter(formatter)
        root.addHandler(errors)

    root._courser_configured = True
