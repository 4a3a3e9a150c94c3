"""
路径配置常量

统一管理项目中的目录路径，避免硬编码。
"""
import os
from pathlib import Path


def _get_project_root() -> Path:
    """获取项目根目录"""
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parents[4]


PROJECT_ROOT = _get_project_root()

# ==================== 目录常量 ====================

# 课程表上传临时目录
UPLOAD_DIR_NAME = "uploads"
UPLOAD_DIR = Path(os.environ.get(
    "UPLOAD_DIR",
    str(PROJECT_ROOT / UPLOAD_DIR_NAME)
))

# 日志目录
LOG_DIR_NAME = "logs"
LOG_DIR = Path(os.environ.get(
    "LOG_DIR",
    str(PROJECT_ROOT / LOG_DIR_NAME)
))


def ensure_dir(path: Path) -> Path:
    """确保目录存在并返回该目录"""
    path.mkdir(parents=True, exist_ok=True)
    return path
