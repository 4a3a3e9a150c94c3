"""
LLM 客户端抽象基类

定义课程表解析所需的最小聊天补全接口。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class ChatResponse:
    """
    非流式聊天响应

    Attributes:
        content: 响应内容（choices[0].message.content）
        model: 使用的模型名称
        usage: Token 使用情况
        finish_reason: 完成原因
    """
    content: str
    model: str
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None


class LLMClient(ABC):
    """
    LLM 客户端抽象基类

    所有 LLM 实现都需要继承此类。测试中可直接用 Mock 替换。
    """

    @abstractmethod
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

        Args:
            messages: 消息列表，格式为 [{"role": "user", "content": "..."}]
            model: 模型名称，为 None 时使用默认模型
            temperature: 温度参数
            max_tokens: 最大生成 Token 数

        Raises:
            LLMError: LLM 调用失败时抛出
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """获取默认模型名称"""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """检查客户端是否可用（配置是否正确）"""


class LLMError(Exception):
    """LLM 调用异常（网络错误、超时、非 2xx 响应等）"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message
