"""
课程表读取器

把不同格式的课程表统一转换为纯文本：
- CsvReader: CSV 原文（UTF-8）
- ExcelReader: 只读第一个工作表，首行作为表头，每行渲染为 `行N: {JSON}`
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .errors import UnsupportedFileType
from .models import SourceFormat, UploadedFile

logger = logging.getLogger(__name__)


class BaseReader(ABC):
    """读取器抽象基类"""

    source_format: SourceFormat

    @abstractmethod
    def supports(self, extension: str) -> bool:
        """检查是否支持该扩展名（小写，含点）"""
        pass

    @abstractmethod
    def read(self, path: Path) -> str:
        """
        读取文件并返回统一文本

        Raises:
            UnsupportedFileType: 文件内容无法按该格式读取
        """
        pass


class CsvReader(BaseReader):
    """CSV 读取器：原文透传，不做结构校验"""

    source_format = SourceFormat.CSV

    def supports(self, extension: str) -> bool:
        return extension == ".csv"

    def read(self, path: Path) -> str:
        try:
            # utf-8-sig 会去掉 Excel 导出的 CSV 开头的 BOM
            return path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as e:
            raise UnsupportedFileType("CSV 文件不是 UTF-8 编码", cause=e)


class ExcelReader(BaseReader):
    """Excel 读取器：只处理第一个工作表"""

    source_format = SourceFormat.EXCEL

    def supports(self, extension: str) -> bool:
        return extension in (".xls", ".xlsx")

    def read(self, path: Path) -> str:
        rows = self.read_rows(path)
        return "\n".join(
            f"行{index}: {json.dumps(row, ensure_ascii=False, default=str)}"
            for index, row in enumerate(rows, 1)
        )

    @staticmethod
    def read_rows(path: Path) -> List[Dict[str, Any]]:
        """
        读取第一个工作表的数据行

        空单元格不输出，整行为空的行跳过，行号按剩余行连续编号。
        """
        try:
            df = pd.read_excel(path, sheet_name=0, dtype=object)
        except Exception as e:
            raise UnsupportedFileType(f"无法读取 Excel 文件: {path.name}", cause=e)

        rows = []
        for record in df.to_dict(orient="records"):
            row = {
                str(column): value
                for column, value in record.items()
                if not pd.isna(value) and str(value).strip() != ""
            }
            if row:
                rows.append(row)

        logger.debug(f"Excel 第一个工作表共 {len(rows)} 行数据")
        return rows


class ReaderRegistry:
    """读取器注册表"""

    def __init__(self):
        self._readers: List[BaseReader] = []
        self._register_default_readers()

    def _register_default_readers(self):
        self.register(CsvReader())
        self.register(ExcelReader())

    def register(self, reader: BaseReader):
        self._readers.append(reader)

    def get_reader(self, extension: str) -> Optional[BaseReader]:
        for reader in self._readers:
            if reader.supports(extension.lower()):
                return reader
        return None


class FormatDispatcher:
    """按扩展名选择读取器，输出 (统一文本, 源格式)"""

    def __init__(self, registry: Optional[ReaderRegistry] = None):
        self.registry = registry or ReaderRegistry()

    def dispatch(self, uploaded: UploadedFile) -> Tuple[str, SourceFormat]:
        """
        Raises:
            UnsupportedFileType: 没有匹配的读取器，或文件内容无法读取
        """
        path = Path(uploaded.storage_path)
        extension = (uploaded.extension or path.suffix).lower()

        reader = self.registry.get_reader(extension)
        if reader is None:
            raise UnsupportedFileType(f"不支持的文件类型: {extension or uploaded.original_name}")

        text = reader.read(path)
        logger.info(f"课程表已读取: {uploaded.original_name}, 格式 {reader.source_format.value}, {len(text)} 字符")
        return text, reader.source_format
