#!/usr/bin/env python3
"""
课程表导入脚本

在命令行中对本地 CSV/Excel 课程表执行与上传接口相同的导入流程：
读取 → 抽取 → 规范化 →（可选）入库。

用法:
    python scripts/parse_schedule.py courses.csv
    python scripts/parse_schedule.py courses.xlsx --extractor columns --dry-run
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
BACKEND_DIR = BASE_DIR / "src" / "backend"
sys.path.insert(0, str(BACKEND_DIR))

load_dotenv(BASE_DIR / ".env")

from app.core.database import SessionLocal
from app.core.logging_config import setup_logging
from app.ingest import (
    CourseNormalizer,
    FormatDispatcher,
    IngestError,
    SchedulePipeline,
    UploadReceiver,
    build_extractor,
    get_ingest_config,
)
from app.ingest.config import EXTRACTOR_KINDS


async def dry_run(receiver: UploadReceiver, pipeline: SchedulePipeline, path: Path) -> list:
    """只解析不入库，返回规范化后的课程"""
    uploaded = receiver.receive_local(path)
    try:
        text, source_format = pipeline.dispatcher.dispatch(uploaded)
        records = await pipeline.extractor.extract(text, source_format)
        return [c.to_dict() for c in pipeline.normalizer.normalize(records)]
    finally:
        receiver.discard(uploaded)


async def import_file(receiver: UploadReceiver, pipeline: SchedulePipeline, path: Path) -> list:
    uploaded = receiver.receive_local(path)
    db = SessionLocal()
    try:
        result = await pipeline.run(uploaded, db)
    finally:
        db.close()
    return [c.to_dict() for c in result.courses]


def main() -> int:
    parser = argparse.ArgumentParser(description="解析课程表文件并导入课程")
    parser.add_argument("file", type=Path, help="CSV/XLS/XLSX 课程表文件")
    parser.add_argument("--extractor", choices=EXTRACTOR_KINDS, help="抽取器类型（默认读取 SCHEDULE_EXTRACTOR）")
    parser.add_argument("--dedupe", action="store_true", help="按 (课程, 教师) 去重")
    parser.add_argument("--dry-run", action="store_true", help="只解析，不写入数据库")
    args = parser.parse_args()

    setup_logging()

    config = get_ingest_config()
    if args.extractor:
        config.extractor = args.extractor
    if args.dedupe:
        config.deduplicate = True

    receiver = UploadReceiver(config)
    pipeline = SchedulePipeline(
        extractor=build_extractor(config),
        dispatcher=FormatDispatcher(),
        normalizer=CourseNormalizer(deduplicate=config.deduplicate),
    )

    runner = dry_run if args.dry_run else import_file
    try:
        courses = asyncio.run(runner(receiver, pipeline, args.file))
    except IngestError as e:
        print(f"❌ {e.public_message}: {e}", file=sys.stderr)
        return 1

    print(json.dumps(courses, ensure_ascii=False, indent=2, default=str))
    print(f"✅ 共 {len(courses)} 门课程{'（未入库）' if args.dry_run else ''}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
