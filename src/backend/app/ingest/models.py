"""
课程表导入数据模型

定义导入管道各阶段之间传递的数据结构
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class SourceFormat(str, Enum):
    """课程表源格式"""
    CSV = "csv"
    EXCEL = "excel"

    @property
    def label(self) -> str:
        """提示词中使用的格式名称"""
        return "CSV" if self is SourceFormat.CSV else "Excel"


class PipelineStage(str, Enum):
    """单次导入的阶段（状态机）"""
    RECEIVED = "received"
    DISPATCHED = "dispatched"
    EXTRACTED = "extracted"
    NORMALIZED = "normalized"
    PERSISTED = "persisted"
    FAILED = "failed"


# 从 LLM 响应中取出的原始记录，字段不保证存在
RawCourseRecord = Dict[str, Any]


@dataclass
class UploadedFile:
    """已落盘的上传文件"""
    storage_path: str              # 存储路径
    original_name: str             # 用户上传时的文件名
    declared_size: int             # 实际写入的字节数
    extension: str                 # 小写扩展名，含点
    stored_name: str = ""          # 存储文件名

    def to_response(self) -> Dict[str, Any]:
        """接口返回中的 file 字段"""
        return {
            "filename": self.stored_name,
            "originalname": self.original_name,
            "path": self.storage_path,
            "size": self.declared_size,
        }


@dataclass
class NormalizedCourse:
    """规范化后的课程（id 为临时 id，入库后会被替换）"""
    id: int
    title: str
    teacher: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "teacher": self.teacher}


@dataclass
class PersistedCourse:
    """已入库的课程"""
    id: int
    title: str
    teacher: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "teacher": self.teacher,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class IngestResult:
    """一次导入的结果"""
    uploaded: UploadedFile
    courses: List[PersistedCourse] = field(default_factory=list)
    stage: PipelineStage = PipelineStage.RECEIVED
    source_format: Optional[SourceFormat] = None
