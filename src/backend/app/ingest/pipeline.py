"""
课程表导入管道

协调一次导入的全部阶段：
1. 读取文件并统一为文本（FormatDispatcher）
2. 抽取课程记录（ScheduleExtractor）
3. 规范化（CourseNormalizer）
4. 批量入库（BatchPersister）

阶段严格顺序执行，任一阶段失败即终止，不保留部分结果。
无论成功与否，上传的临时文件都会在结束时删除。
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.llm import LLMClient

from .config import IngestConfig, get_ingest_config
from .errors import IngestError
from .extractor import ScheduleExtractor, build_extractor
from .models import IngestResult, PipelineStage, UploadedFile
from .normalizer import CourseNormalizer
from .persister import BatchPersister
from .readers import FormatDispatcher
from .receiver import UploadReceiver

logger = logging.getLogger(__name__)


class SchedulePipeline:
    """
    课程表导入管道

    使用示例:
        pipeline = SchedulePipeline.from_config()
        uploaded = await UploadReceiver().receive(file)
        result = await pipeline.run(uploaded, db)
    """

    def __init__(
        self,
        extractor: ScheduleExtractor,
        dispatcher: Optional[FormatDispatcher] = None,
        normalizer: Optional[CourseNormalizer] = None,
        persister: Optional[BatchPersister] = None,
    ):
        self.extractor = extractor
        self.dispatcher = dispatcher or FormatDispatcher()
        self.normalizer = normalizer or CourseNormalizer()
        self.persister = persister or BatchPersister()

    @classmethod
    def from_config(
        cls,
        config: Optional[IngestConfig] = None,
        llm_client: Optional[LLMClient] = None,
    ) -> "SchedulePipeline":
        """按配置组装管道"""
        config = config or get_ingest_config()
        return cls(
            extractor=build_extractor(config, llm_client=llm_client),
            normalizer=CourseNormalizer(deduplicate=config.deduplicate),
        )

    def _advance(self, result: IngestResult, stage: PipelineStage) -> None:
        logger.debug(f"[{result.uploaded.stored_name}] {result.stage.value} -> {stage.value}")
        result.stage = stage

    async def run(self, uploaded: UploadedFile, db: Session) -> IngestResult:
        """
        执行一次导入

        Raises:
            IngestError: 任一阶段失败
        """
        result = IngestResult(uploaded=uploaded)

        try:
            text, source_format = await run_in_threadpool(self.dispatcher.dispatch, uploaded)
            result.source_format = source_format
            self._advance(result, PipelineStage.DISPATCHED)

            records = await self.extractor.extract(text, source_format)
            self._advance(result, PipelineStage.EXTRACTED)

            normalized = self.normalizer.normalize(records)
            self._advance(result, PipelineStage.NORMALIZED)

            result.courses = await run_in_threadpool(self.persister.persist, db, normalized)
            self._advance(result, PipelineStage.PERSISTED)
        except IngestError as e:
            logger.error(f"课程表导入失败: {uploaded.original_name}，阶段 {result.stage.value}: {e}")
            self._advance(result, PipelineStage.FAILED)
            raise
        except Exception:
            logger.exception(f"课程表导入出现未预期错误: {uploaded.original_name}，阶段 {result.stage.value}")
            self._advance(result, PipelineStage.FAILED)
            raise
        finally:
            UploadReceiver.discard(uploaded)

        logger.info(f"课程表导入成功: {uploaded.original_name}，共 {len(result.courses)} 门课程")
        return result
