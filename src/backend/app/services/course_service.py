"""
课程服务
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models import Course


class CourseService:
    """课程服务"""

    DEFAULT_LIMIT = 20
    MAX_LIMIT = 100

    @staticmethod
    def get_courses(db: Session, limit: int = DEFAULT_LIMIT, offset: int = 0) -> List[Course]:
        """
        获取课程列表（按创建时间倒序）

        Args:
            db: 数据库会话
            limit: 返回数量，上限 MAX_LIMIT
            offset: 偏移量

        Returns:
            List[Course]: 课程列表
        """
        limit = max(1, min(limit, CourseService.MAX_LIMIT))
        offset = max(0, offset)

        return (
            db.query(Course)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_course_by_id(db: Session, course_id: int) -> Optional[Course]:
        """根据ID获取课程"""
        return db.query(Course).filter(Course.id == course_id).first()

    @staticmethod
    def count_courses(db: Session) -> int:
        return db.query(Course).count()
