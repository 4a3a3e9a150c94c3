"""
上传接收

校验扩展名与大小，并把上传内容写入唯一命名的临时文件。
大小上限在写入过程中逐块检查，超限时删除已写入的部分。
"""

import logging
import secrets
import shutil
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.paths import ensure_dir
from .config import IngestConfig, get_ingest_config
from .errors import FileTooLarge, MissingUploadFile, UnsupportedFileType
from .models import UploadedFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
STORED_NAME_PREFIX = "schedule"


class UploadReceiver:
    """课程表上传接收器"""

    def __init__(self, config: Optional[IngestConfig] = None):
        self.config = config or get_ingest_config()

    @property
    def upload_dir(self) -> Path:
        return self.config.upload_dir

    def check_extension(self, filename: Optional[str]) -> str:
        """
        校验扩展名（不区分大小写），返回小写扩展名

        Raises:
            UnsupportedFileType: 扩展名不在允许列表中
        """
        ext = Path(filename or "").suffix.lower()
        if ext not in self.config.allowed_extensions:
            logger.warning(f"拒绝不支持的文件类型: {filename}")
            raise UnsupportedFileType()
        return ext

    def _too_large(self, size: int) -> FileTooLarge:
        limit_mb = self.config.max_file_size / (1024 * 1024)
        return FileTooLarge(f"文件大小 {size} 字节超过上限 {limit_mb:g}MB")

    def _new_storage_path(self, ext: str) -> Path:
        """时间戳 + 随机后缀 + 原扩展名"""
        suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}"
        return ensure_dir(self.upload_dir) / f"{STORED_NAME_PREFIX}-{suffix}{ext}"

    async def receive(self, upload: Optional[UploadFile]) -> UploadedFile:
        """
        接收 multipart 上传的文件

        Raises:
            MissingUploadFile: 没有文件
            UnsupportedFileType: 扩展名不支持
            FileTooLarge: 超过大小上限
        """
        if upload is None or not upload.filename:
            raise MissingUploadFile()

        ext = self.check_extension(upload.filename)

        declared = getattr(upload, "size", None)
        if declared is not None and declared > self.config.max_file_size:
            raise self._too_large(declared)

        target = self._new_storage_path(ext)
        written = 0
        try:
            with open(target, "wb") as out:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.config.max_file_size:
                        raise self._too_large(written)
                    out.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise

        logger.info(f"课程表已接收: {upload.filename} -> {target.name} ({written} 字节)")
        return UploadedFile(
            storage_path=str(target),
            original_name=upload.filename,
            declared_size=written,
            extension=ext,
            stored_name=target.name,
        )

    def receive_local(self, path: Path) -> UploadedFile:
        """
        接收本地文件（命令行导入使用），校验规则与 HTTP 上传一致
        """
        path = Path(path)
        if not path.is_file():
            raise MissingUploadFile(f"文件不存在: {path}")

        ext = self.check_extension(path.name)
        size = path.stat().st_size
        if size > self.config.max_file_size:
            raise self._too_large(size)

        target = self._new_storage_path(ext)
        shutil.copyfile(path, target)
        logger.info(f"课程表已接收: {path} -> {target.name} ({size} 字节)")
        return UploadedFile(
            storage_path=str(target),
            original_name=path.name,
            declared_size=size,
            extension=ext,
            stored_name=target.name,
        )

    @staticmethod
    def discard(uploaded: UploadedFile) -> None:
        """删除临时文件，文件已不存在时忽略"""
        try:
            Path(uploaded.storage_path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"删除临时文件失败: {uploaded.storage_path}, 错误: {e}")
