"""
课程表导入模块

把上传的课程表文件（CSV/Excel）解析为课程并批量入库：
上传接收 → 格式分发 → LLM 抽取 → 规范化 → 批量入库
"""

from .config import IngestConfig, get_ingest_config
from .errors import (
    IngestError,
    MissingUploadFile,
    UnsupportedFileType,
    FileTooLarge,
    ExtractionServiceError,
    ExtractionParseError,
    PersistenceError,
)
from .models import (
    SourceFormat,
    PipelineStage,
    UploadedFile,
    NormalizedCourse,
    PersistedCourse,
    IngestResult,
)
from .receiver import UploadReceiver
from .readers import FormatDispatcher, ReaderRegistry
from .extractor import (
    ScheduleExtractor,
    LLMScheduleExtractor,
    ColumnScheduleExtractor,
    LayeredScheduleExtractor,
    build_extractor,
    parse_course_array,
)
from .normalizer import CourseNormalizer, UNKNOWN_TITLE, UNKNOWN_TEACHER
from .persister import BatchPersister
from .pipeline import SchedulePipeline

__all__ = [
    "IngestConfig",
    "get_ingest_config",
    "IngestError",
    "MissingUploadFile",
    "UnsupportedFileType",
    "FileTooLarge",
    "ExtractionServiceError",
    "ExtractionParseError",
    "PersistenceError",
    "SourceFormat",
    "PipelineStage",
    "UploadedFile",
    "NormalizedCourse",
    "PersistedCourse",
    "IngestResult",
    "UploadReceiver",
    "FormatDispatcher",
    "ReaderRegistry",
    "ScheduleExtractor",
    "LLMScheduleExtractor",
    "ColumnScheduleExtractor",
    "LayeredScheduleExtractor",
    "build_extractor",
    "parse_course_array",
    "CourseNormalizer",
    "UNKNOWN_TITLE",
    "UNKNOWN_TEACHER",
    "BatchPersister",
    "SchedulePipeline",
]
