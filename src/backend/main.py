"""
FastAPI应用入口
"""
from dotenv import load_dotenv
from pathlib import Path
import os
import logging

# 加载环境变量 - 优先从根目录加载，回退到当前目录
root_env = Path(__file__).parent.parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)
else:
    load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import courses
from app.core.logging_config import setup_logging
from app.ingest import IngestError

setup_logging()
logger = logging.getLogger(__name__)


def _get_cors_config() -> tuple[list[str], str | None]:
    """
    获取 CORS 配置

    Returns:
        (allow_origins, allow_origin_regex)
        - 生产环境：使用 ALLOWED_ORIGINS 中精确匹配的源（逗号分隔）
        - 开发环境：使用正则匹配本地端口
    """
    origins_str = os.getenv("ALLOWED_ORIGINS", "")
    if origins_str:
        origins = [origin.strip() for origin in origins_str.split(",") if origin.strip()]
        if origins:
            return origins, None

    if os.getenv("DEV_MODE", "false").lower() == "true":
        return [], r"http://(localhost|127\.0\.0\.1)(:\d+)?"

    logger.warning("未配置 ALLOWED_ORIGINS 且非开发模式，CORS 将拒绝所有跨域请求")
    return [], None


app = FastAPI(
    title="Courser API",
    description="Courser - 课程收藏与课程表解析",
    version="0.1.0"
)

allow_origins, allow_origin_regex = _get_cors_config()
logger.info(f"CORS 配置: origins={allow_origins}, regex={allow_origin_regex}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(IngestError)
async def ingest_error_handler(request: Request, exc: IngestError):
    """课程表导入异常：只返回简短消息，详细原因写日志"""
    logger.error(f"{request.method} {request.url.path} 失败: {exc}")
    message = exc.message if exc.status_code < 500 else exc.public_message
    return JSONResponse(status_code=exc.status_code, content={"message": message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """请求参数校验失败按参数错误处理：400 + 简短消息"""
    logger.warning(f"{request.method} {request.url.path} 参数校验失败: {exc.errors()}")
    return JSONResponse(status_code=400, content={"message": "请求参数错误"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} 出现未处理异常")
    return JSONResponse(status_code=500, content={"message": "服务器错误，请稍后重试"})


# 包含所有路由
app.include_router(courses.router, prefix="/api", tags=["课程管理"])


@app.get("/")
async def root():
    """根路径"""
    return {"message": "Courser API", "docs": "/docs"}


@app.get("/health")
async def health():
    """健康检查"""
    return {
        "status": "healthy",
        "llm_configured": bool(os.getenv("LLM_API_KEY") or os.getenv("DEEPSEEK_API_KEY")),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
