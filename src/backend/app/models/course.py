"""
课程模型

课程有三种来源：课程目录手工创建、视频平台收藏、课程表文件解析。
课程表解析入库的行只填写 title/teacher，其余字段保持 NULL。
"""
from sqlalchemy import Column, String, Integer, Text, DateTime
from datetime import datetime, timezone

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Course(Base):
    """课程模型"""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    title = Column(String(255), nullable=False)  # 课程名称
    teacher = Column(String(100), nullable=True)  # 授课教师
    description = Column(Text, nullable=True)
    cover_url = Column(String(500), nullable=True)
    video_url = Column(String(500), nullable=True)
    duration = Column(Integer, nullable=True)  # 秒
    source = Column(String(50), nullable=True)  # bilibili 等视频平台
    source_id = Column(String(100), nullable=True)
    user_id = Column(Integer, nullable=True, index=True)  # 创建者
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "teacher": self.teacher,
            "description": self.description,
            "cover_url": self.cover_url,
            "video_url": self.video_url,
            "duration": self.duration,
            "source": self.source,
            "source_id": self.source_id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Course(id={self.id} title='{self.title}' teacher='{self.teacher}')>"
