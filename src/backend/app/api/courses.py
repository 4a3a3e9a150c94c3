"""
课程管理API

- 课程列表 / 课程详情
- 课程表上传：文件解析为课程后批量入库
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import get_current_user
from app.ingest import (
    IngestConfig,
    SchedulePipeline,
    UploadReceiver,
    get_ingest_config,
)
from app.services import CourseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["课程管理"])


# Schemas
class UploadedFileInfo(BaseModel):
    """上传文件信息"""
    filename: str
    originalname: str
    path: str
    size: int


class ScheduleCourse(BaseModel):
    """课程表解析入库的课程"""
    id: int
    title: str
    teacher: str
    created_at: Optional[datetime] = None


class ScheduleUploadResponse(BaseModel):
    """课程表上传响应"""
    message: str
    file: UploadedFileInfo
    courses: List[ScheduleCourse]


# Dependencies
def get_ingest_settings() -> IngestConfig:
    """导入配置（测试中可覆盖）"""
    return get_ingest_config()


def get_upload_receiver(config: IngestConfig = Depends(get_ingest_settings)) -> UploadReceiver:
    return UploadReceiver(config)


def get_schedule_pipeline(config: IngestConfig = Depends(get_ingest_settings)) -> SchedulePipeline:
    return SchedulePipeline.from_config(config)


# Endpoints
@router.get("", response_model=dict)
def get_courses(
    limit: int = CourseService.DEFAULT_LIMIT,
    offset: int = 0,
    db: Session = Depends(get_db)
):
    """
    获取课程列表（按创建时间倒序）

    Args:
        limit: 返回数量
        offset: 偏移量（分页）
        db: 数据库会话
    """
    courses = CourseService.get_courses(db, limit=limit, offset=offset)
    return {
        "courses": [c.to_dict() for c in courses],
        "total": CourseService.count_courses(db),
    }


@router.get("/{course_id}", response_model=dict)
def get_course(course_id: int, db: Session = Depends(get_db)):
    """获取课程详情"""
    course = CourseService.get_course_by_id(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="课程不存在")
    return {"course": course.to_dict()}


@router.post("/upload", response_model=ScheduleUploadResponse)
async def upload_course_schedule(
    file: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
    receiver: UploadReceiver = Depends(get_upload_receiver),
    pipeline: SchedulePipeline = Depends(get_schedule_pipeline),
    db: Session = Depends(get_db),
):
    """
    上传课程表（CSV/Excel），解析出课程后批量入库

    失败时由全局异常处理器返回 {message}：
    参数问题 400，解析或入库失败 500。
    """
    logger.info(f"用户 {current_user.get('id')} 上传课程表: {file.filename if file else None}")

    uploaded = await receiver.receive(file)
    result = await pipeline.run(uploaded, db)

    return ScheduleUploadResponse(
        message="课程表上传成功",
        file=UploadedFileInfo(**uploaded.to_response()),
        courses=[ScheduleCourse(**c.to_dict()) for c in result.courses],
    )
