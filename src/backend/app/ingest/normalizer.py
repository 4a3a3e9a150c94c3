"""
课程记录规范化

把抽取到的松散记录映射为固定的 {id, title, teacher} 结构。
"""

import logging
import time
from typing import Any, Iterable, List, Optional

from .models import NormalizedCourse

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "未知课程"
UNKNOWN_TEACHER = "未知教师"


def _text_or_default(value: Any, default: str) -> str:
    if value is None:
        return default
    text = value.strip() if isinstance(value, str) else str(value).strip()
    return text or default


class CourseNormalizer:
    """
    课程记录规范化器

    默认输出与输入等长、同序；开启 deduplicate 后按 (title, teacher) 保留首次出现的记录。
    """

    def __init__(self, deduplicate: bool = False):
        self.deduplicate = deduplicate

    def normalize(self, records: Iterable[Any], base_id: Optional[int] = None) -> List[NormalizedCourse]:
        """
        Args:
            records: 抽取到的原始记录，非字典记录按空记录处理
            base_id: 临时 id 起点，默认当前毫秒时间戳

        Returns:
            规范化后的课程列表
        """
        if base_id is None:
            base_id = int(time.time() * 1000)

        courses: List[NormalizedCourse] = []
        seen = set()
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning(f"第 {index + 1} 条记录不是对象，按空记录处理: {record!r}")
                record = {}

            title = _text_or_default(record.get("title"), UNKNOWN_TITLE)
            teacher = _text_or_default(record.get("teacher"), UNKNOWN_TEACHER)

            if self.deduplicate:
                key = (title, teacher)
                if key in seen:
                    continue
                seen.add(key)

            courses.append(NormalizedCourse(id=base_id + index, title=title, teacher=teacher))

        logger.info(f"课程规范化完成，共 {len(courses)} 门课程")
        return courses
