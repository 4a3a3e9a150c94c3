"""
课程表抽取

从统一文本中抽取 {title, teacher} 记录。抽取能力以 ScheduleExtractor 接口暴露：
- LLMScheduleExtractor: 调用 OpenAI 兼容服务，从自由文本回复中恢复 JSON 数组
- ColumnScheduleExtractor: 按表头匹配课程名/教师列的确定性解析
- LayeredScheduleExtractor: 主抽取器失败时使用备用抽取器
"""

import asyncio
import csv
import io
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.llm import ChatResponse, LLMClient, LLMError, get_llm_client, trace_llm_call
from prompts import PromptLoader, prompt_loader

from .config import (
    EXTRACTOR_COLUMNS,
    EXTRACTOR_LLM_WITH_FALLBACK,
    IngestConfig,
)
from .errors import ExtractionParseError, ExtractionServiceError
from .models import RawCourseRecord, SourceFormat

logger = logging.getLogger(__name__)

JSON_FENCE_PATTERN = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
FIRST_BRACKET_PATTERN = re.compile(r"\[(.*?)\]", re.DOTALL)
OUTER_BRACKET_PATTERN = re.compile(r"\[(.*)\]", re.DOTALL)


def locate_json_candidates(text: str) -> List[str]:
    """
    在回复中定位 JSON 片段

    依次为：```json 代码块内部 → 第一个 [...] 的内部 → 最外层 [...] 的内部 → 整段回复
    """
    candidates = []
    for pattern in (JSON_FENCE_PATTERN, FIRST_BRACKET_PATTERN, OUTER_BRACKET_PATTERN):
        match = pattern.search(text)
        if match and match.group(1) not in candidates:
            candidates.append(match.group(1))
    candidates.append(text)
    return candidates


def _load_array(candidate: str) -> List[Any]:
    candidate = candidate.strip()
    if not candidate.startswith("["):
        candidate = f"[{candidate}]"
    return json.loads(candidate)


def parse_course_array(text: str) -> List[Any]:
    """
    把 LLM 回复转换为课程记录数组

    按顺序尝试每个候选片段，取第一个能解析为数组的结果。
    候选片段不以 "[" 开头时先包上一层 [...] 再解析。

    Raises:
        ExtractionParseError: 所有候选片段都无法得到 JSON 数组
    """
    last_error: Optional[Exception] = None
    for candidate in locate_json_candidates(text or ""):
        try:
            return _load_array(candidate)
        except json.JSONDecodeError as e:
            last_error = e

    logger.error(f"解析 LLM 返回的 JSON 失败: {last_error}")
    raise ExtractionParseError(f"LLM 返回的 JSON 格式无效: {last_error}", cause=last_error)


class ScheduleExtractor(ABC):
    """课程表抽取器接口"""

    @abstractmethod
    async def extract(self, text: str, source_format: SourceFormat) -> List[RawCourseRecord]:
        """
        从统一文本中抽取课程记录

        Raises:
            ExtractionServiceError: 外部服务不可用
            ExtractionParseError: 结果无法转换为课程数组
        """
        pass


class LLMScheduleExtractor(ScheduleExtractor):
    """基于 LLM 的课程表抽取器，每次抽取只发起一次逻辑调用"""

    PROMPT_NAME = "schedule_extraction"

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        deadline: Optional[float] = None,
        loader: Optional[PromptLoader] = None,
    ):
        """
        Args:
            llm_client: LLM 客户端，为 None 时使用全局客户端
            deadline: 整个调用（含 SDK 重试）的时限，单位秒
            loader: 提示词加载器
        """
        self._llm_client = llm_client
        self.deadline = deadline
        self.loader = loader or prompt_loader

    @property
    def llm_client(self) -> LLMClient:
        """延迟初始化 LLM 客户端"""
        if self._llm_client is None:
            try:
                self._llm_client = get_llm_client()
            except ValueError as e:
                raise ExtractionServiceError(str(e), cause=e)
        return self._llm_client

    def build_messages(self, text: str, source_format: SourceFormat) -> List[Dict[str, str]]:
        return self.loader.get_messages(
            self.PROMPT_NAME,
            file_content=text,
            source_label=source_format.label,
        )

    @trace_llm_call("schedule_extraction", tags=["ingest"])
    async def _complete(self, messages: List[Dict[str, str]]) -> ChatResponse:
        return await self.llm_client.chat(messages)

    async def extract(self, text: str, source_format: SourceFormat) -> List[RawCourseRecord]:
        messages = self.build_messages(text, source_format)

        try:
            if self.deadline:
                response = await asyncio.wait_for(self._complete(messages), timeout=self.deadline)
            else:
                response = await self._complete(messages)
        except asyncio.TimeoutError as e:
            logger.error(f"课程表解析服务超时（{self.deadline}s）")
            raise ExtractionServiceError("课程表解析服务超时", cause=e)
        except LLMError as e:
            logger.error(f"课程表解析服务调用失败: {e}")
            raise ExtractionServiceError("课程表解析服务调用失败", cause=e)

        logger.info(f"LLM 返回的原始消息: {response.content}")
        records = parse_course_array(response.content)
        logger.info(f"LLM 抽取到 {len(records)} 条课程记录")
        return records


class ColumnScheduleExtractor(ScheduleExtractor):
    """
    确定性抽取器

    按表头名称匹配课程名与教师列，同名课程只保留第一条。
    """

    TITLE_HEADERS = ("课程名称", "课程名", "课程", "科目", "title", "course", "course name", "subject")
    TEACHER_HEADERS = ("教师", "教师姓名", "任课教师", "授课教师", "老师", "teacher", "instructor")

    async def extract(self, text: str, source_format: SourceFormat) -> List[RawCourseRecord]:
        rows = list(self._iter_rows(text, source_format))
        headers = self._collect_headers(rows)

        title_key = self._match_column(headers, self.TITLE_HEADERS)
        if title_key is None:
            raise ExtractionParseError(f"未找到课程名称列，表头: {headers}")
        teacher_key = self._match_column(headers, self.TEACHER_HEADERS, exclude=title_key)

        records: List[RawCourseRecord] = []
        seen = set()
        for row in rows:
            title = str(row.get(title_key) or "").strip()
            if not title or title in seen:
                continue
            seen.add(title)
            teacher = str(row.get(teacher_key) or "").strip() if teacher_key else ""
            records.append({"title": title, "teacher": teacher})

        logger.info(f"按列匹配抽取到 {len(records)} 条课程记录（课程列: {title_key}, 教师列: {teacher_key}）")
        return records

    @staticmethod
    def _iter_rows(text: str, source_format: SourceFormat) -> Iterable[Dict[str, Any]]:
        if source_format is SourceFormat.CSV:
            for row in csv.DictReader(io.StringIO(text)):
                yield {k.strip(): v for k, v in row.items() if isinstance(k, str)}
            return

        for line in text.splitlines():
            _, sep, payload = line.partition(": ")
            if not sep:
                continue
            try:
                row = json.loads(payload)
            except json.JSONDecodeError:
                continue
            if isinstance(row, dict):
                yield {str(k).strip(): v for k, v in row.items()}

    @staticmethod
    def _collect_headers(rows: Sequence[Dict[str, Any]]) -> List[str]:
        headers: List[str] = []
        for row in rows:
            for key in row:
                if key not in headers:
                    headers.append(key)
        return headers

    @staticmethod
    def _match_column(
        headers: Sequence[str],
        candidates: Sequence[str],
        exclude: Optional[str] = None,
    ) -> Optional[str]:
        """先精确匹配（忽略大小写），再按包含关系匹配"""
        available = [h for h in headers if h != exclude]
        lowered = {h: h.lower() for h in available}
        for candidate in candidates:
            for header, low in lowered.items():
                if low == candidate:
                    return header
        for candidate in candidates:
            for header, low in lowered.items():
                if candidate in low:
                    return header
        return None


class LayeredScheduleExtractor(ScheduleExtractor):
    """主抽取器失败时改用备用抽取器；备用也失败时抛出主抽取器的异常"""

    def __init__(self, primary: ScheduleExtractor, fallback: ScheduleExtractor):
        self.primary = primary
        self.fallback = fallback

    async def extract(self, text: str, source_format: SourceFormat) -> List[RawCourseRecord]:
        try:
            return await self.primary.extract(text, source_format)
        except (ExtractionServiceError, ExtractionParseError) as primary_error:
            logger.warning(f"主抽取器失败，改用备用抽取器: {primary_error}")
            try:
                return await self.fallback.extract(text, source_format)
            except ExtractionParseError as fallback_error:
                logger.error(f"备用抽取器同样失败: {fallback_error}")
                raise primary_error


def build_extractor(config: IngestConfig, llm_client: Optional[LLMClient] = None) -> ScheduleExtractor:
    """按配置构建抽取器"""
    if config.extractor == EXTRACTOR_COLUMNS:
        return ColumnScheduleExtractor()

    llm_extractor = LLMScheduleExtractor(llm_client=llm_client, deadline=config.extraction_deadline)
    if config.extractor == EXTRACTOR_LLM_WITH_FALLBACK:
        return LayeredScheduleExtractor(llm_extractor, ColumnScheduleExtractor())
    return llm_extractor
