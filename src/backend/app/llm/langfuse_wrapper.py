"""
Langfuse 监控封装

以装饰器方式追踪课程表抽取等 LLM 调用。未配置密钥或未安装 langfuse 时，
装饰器直接透传，不影响业务流程。

兼容 Langfuse SDK v2.x
"""

import logging
from datetime import datetime
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from .config import get_langfuse_config

logger = logging.getLogger(__name__)

R = TypeVar("R")

# 全局 Langfuse 客户端（延迟初始化）
_langfuse_client = None
_langfuse_enabled = None


def _get_langfuse_client():
    """获取 Langfuse 客户端，未启用时返回 None"""
    global _langfuse_client, _langfuse_enabled

    if _langfuse_enabled is False:
        return None
    if _langfuse_client is not None:
        return _langfuse_client

    config = get_langfuse_config()
    if not config.enabled or not config.is_valid():
        logger.debug("Langfuse 监控未启用或配置无效")
        _langfuse_enabled = False
        return None

    try:
        from langfuse import Langfuse
    except ImportError:
        logger.warning("langfuse 未安装，监控功能不可用。请运行: pip install 'courser-backend[monitoring]'")
        _langfuse_enabled = False
        return None

    _langfuse_client = Langfuse(
        public_key=config.public_key,
        secret_key=config.secret_key,
        host=config.host,
    )
    _langfuse_enabled = True
    logger.info(f"Langfuse 客户端已初始化，地址: {config.host}")
    return _langfuse_client


def reset_langfuse_client():
    """重置 Langfuse 客户端（用于测试或重新配置）"""
    global _langfuse_client, _langfuse_enabled
    _langfuse_client = None
    _langfuse_enabled = None


def is_langfuse_enabled() -> bool:
    """检查 Langfuse 监控是否启用且可用"""
    return _get_langfuse_client() is not None


def _summarize(value: Any, limit: int) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "content"):
        value = value.content
    return str(value)[:limit]


def trace_llm_call(
    name: str,
    *,
    metadata: Optional[Dict[str, Any]] = None,
    tags: Optional[List[str]] = None,
):
    """
    追踪异步 LLM 调用的装饰器

    记录输入、输出与耗时并上报到 Langfuse；异常同样上报后原样抛出。

    使用示例:
        @trace_llm_call("schedule_extraction", tags=["ingest"])
        async def call(messages):
            return await llm.chat(messages)
    """
    def decorator(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> R:
            client = _get_langfuse_client()
            if client is None:
                return await func(*args, **kwargs)

            start_time = datetime.now()
            input_data = {
                "args": _summarize(args, 500) if args else None,
                "kwargs": {k: _summarize(v, 200) for k, v in kwargs.items()},
            }

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration_ms = (datetime.now() - start_time).total_seconds() * 1000
                client.trace(
                    name=name,
                    input=input_data,
                    output={"error": str(e)},
                    metadata={"duration_ms": duration_ms, "error": True, **(metadata or {})},
                    tags=(tags or []) + ["error"],
                )
                client.flush()
                raise

            duration_ms = (datetime.now() - start_time).total_seconds() * 1000
            output_data = {"content": _summarize(result, 500)}
            trace = client.trace(
                name=name,
                input=input_data,
                output=output_data,
                metadata=metadata or {},
                tags=tags or [],
            )
            trace.span(
                name=f"{name}_call",
                input=input_data,
                output=output_data,
                start_time=start_time,
                end_time=datetime.now(),
                metadata={"duration_ms": duration_ms, **(metadata or {})},
            )
            client.flush()
            return result

        return wrapper

    return decorator
