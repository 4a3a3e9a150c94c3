"""
课程表导入异常

每个异常携带 HTTP 状态码和对外展示的简短消息；
详细原因（cause）只写入日志，不返回给调用方。
"""

from typing import Optional


class IngestError(Exception):
    """课程表导入异常基类"""

    status_code: int = 500
    public_message: str = "课程表上传失败"

    def __init__(self, message: Optional[str] = None, cause: Optional[Exception] = None):
        self.message = message or self.public_message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class MissingUploadFile(IngestError):
    """请求中没有文件"""
    status_code = 400
    public_message = "请选择要上传的课程表文件"


class UnsupportedFileType(IngestError):
    """扩展名不是 csv/xls/xlsx，或文件内容无法按该格式读取"""
    status_code = 400
    public_message = "不支持的文件类型。请上传CSV或Excel文件。"


class FileTooLarge(IngestError):
    """文件超过大小上限"""
    status_code = 400
    public_message = "文件过大"


class ExtractionServiceError(IngestError):
    """外部 LLM 服务调用失败（超时、网络错误、非 2xx）"""
    public_message = "课程表解析失败，请稍后重试"


class ExtractionParseError(IngestError):
    """LLM 返回内容无法转换为课程数组"""
    public_message = "无法解析课程数据，请检查文件格式"


class PersistenceError(IngestError):
    """课程批量写入数据库失败"""
    public_message = "课程保存失败，请稍后重试"
