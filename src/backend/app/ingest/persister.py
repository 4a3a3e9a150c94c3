"""
课程批量入库

一次 flush 写入全部课程。SQLAlchemy 2.x 对同表多行插入使用
INSERT ... VALUES (...), (...) RETURNING 批量执行，每行的主键由数据库返回，
不依赖自增 id 连续分配。
"""

import logging
from datetime import datetime, timezone
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Course

from .errors import PersistenceError
from .models import NormalizedCourse, PersistedCourse

logger = logging.getLogger(__name__)


class BatchPersister:
    """课程批量写入器"""

    def persist(self, db: Session, courses: Sequence[NormalizedCourse]) -> List[PersistedCourse]:
        """
        写入课程并返回入库结果（顺序与输入一致）

        只写 title/teacher 与时间戳，描述、视频地址、来源、创建者等字段保持为空。

        Raises:
            PersistenceError: 数据库写入失败（已回滚）
        """
        if not courses:
            return []

        now = datetime.now(timezone.utc)
        rows = [
            Course(title=c.title, teacher=c.teacher, created_at=now, updated_at=now)
            for c in courses
        ]

        try:
            db.add_all(rows)
            db.flush()
            persisted = [
                PersistedCourse(id=row.id, title=row.title, teacher=row.teacher, created_at=now)
                for row in rows
            ]
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"课程批量保存失败: {e}")
            raise PersistenceError("课程批量保存失败", cause=e)

        logger.info(f"已保存 {len(persisted)} 门课程到数据库")
        return persisted
