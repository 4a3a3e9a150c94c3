"""
OpenAI 兼容客户端实现

支持 OpenAI 及其兼容接口（DashScope 兼容模式、DeepSeek 等）。
超时与重试交给 SDK：timeout 约束单次请求，max_retries 控制带指数退避的重试次数。
"""

from typing import Dict, List, Optional
import logging

from .base import LLMClient, ChatResponse, LLMError
from .config import LLMConfig

logger = logging.getLogger(__name__)


class OpenAIClient(LLMClient):
    """
    OpenAI 兼容客户端

    使用示例:
        config = LLMConfig(api_key="sk-xxx", model="qwen-plus")
        client = OpenAIClient(config)
        response = await client.chat([{"role": "user", "content": "你好"}])
        print(response.content)
    """

    def __init__(self, config: LLMConfig):
        self._config = config
        self._async_client = None

    def _get_async_client(self):
        """获取异步客户端（延迟初始化）"""
        if self._async_client is None:
            from openai import AsyncOpenAI
            self._async_client = AsyncOpenAI(
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                max_retries=self._config.max_retries,
            )
        return self._async_client

    async def chat(
        self,
        messages: List[Dict[str, str]],
        *,
        model: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> ChatResponse:
        """
        非流式聊天

        只读取 choices[0].message.content，不校验响应的其他部分。

        Raises:
            LLMError: API 调用失败时抛出
        """
        client = self._get_async_client()

        params = {
            "model": model or self._config.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        params.update(kwargs)

        try:
            response = await client.chat.completions.create(**params)
        except Exception as e:
            logger.error(f"LLM 调用失败: {e}")
            raise LLMError(f"LLM 调用失败: {str(e)}", cause=e)

        if not response.choices:
            raise LLMError("LLM 响应中没有 choices")

        return ChatResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            } if response.usage else None,
            finish_reason=response.choices[0].finish_reason,
        )

    @property
    def default_model(self) -> str:
        return self._config.model

    @property
    def is_available(self) -> bool:
        return bool(self._config.api_key)
