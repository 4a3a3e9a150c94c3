"""
课程表导入配置

配置优先级：环境变量 > 默认值
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet

from app.core.paths import UPLOAD_DIR

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
ALLOWED_EXTENSIONS = frozenset({".csv", ".xls", ".xlsx"})

# 抽取器类型
EXTRACTOR_LLM = "llm"
EXTRACTOR_COLUMNS = "columns"
EXTRACTOR_LLM_WITH_FALLBACK = "llm+columns"
EXTRACTOR_KINDS = (EXTRACTOR_LLM, EXTRACTOR_COLUMNS, EXTRACTOR_LLM_WITH_FALLBACK)


@dataclass
class IngestConfig:
    """
    课程表导入配置

    Attributes:
        upload_dir: 上传文件的临时存放目录
        max_file_size: 单个文件大小上限（字节）
        allowed_extensions: 允许的扩展名（小写，含点）
        extractor: 抽取器类型，llm | columns | llm+columns
        deduplicate: 是否在规范化阶段按 (title, teacher) 去重
        extraction_deadline: 抽取调用的总时限（秒），覆盖 SDK 的全部重试
    """
    upload_dir: Path = UPLOAD_DIR
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_extensions: FrozenSet[str] = field(default_factory=lambda: ALLOWED_EXTENSIONS)
    extractor: str = EXTRACTOR_LLM
    deduplicate: bool = False
    extraction_deadline: float = 180.0


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_ingest_config() -> IngestConfig:
    """
    从环境变量获取导入配置

    环境变量：
        UPLOAD_DIR: 上传目录
        UPLOAD_MAX_BYTES: 文件大小上限
        SCHEDULE_EXTRACTOR: llm | columns | llm+columns
        SCHEDULE_DEDUPLICATE: 是否去重
        SCHEDULE_EXTRACTION_DEADLINE: 抽取总时限（秒）

    Raises:
        ValueError: SCHEDULE_EXTRACTOR 取值非法
    """
    extractor = os.getenv("SCHEDULE_EXTRACTOR", EXTRACTOR_LLM).strip().lower()
    if extractor not in EXTRACTOR_KINDS:
        raise ValueError(f"SCHEDULE_EXTRACTOR 取值非法: {extractor}，可选 {', '.join(EXTRACTOR_KINDS)}")

    return IngestConfig(
        upload_dir=Path(os.getenv("UPLOAD_DIR", str(UPLOAD_DIR))),
        max_file_size=int(os.getenv("UPLOAD_MAX_BYTES", str(DEFAULT_MAX_FILE_SIZE))),
        extractor=extractor,
        deduplicate=_env_bool("SCHEDULE_DEDUPLICATE", False),
        extraction_deadline=float(os.getenv("SCHEDULE_EXTRACTION_DEADLINE", "180.0")),
    )
