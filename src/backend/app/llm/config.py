"""
LLM 配置管理模块

统一管理课程表解析所用 LLM 服务的配置。
配置优先级：环境变量 > 默认值
"""

import os
from dataclasses import dataclass
from typing import Optional


# 默认使用阿里云百炼的 OpenAI 兼容接口
DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
DEFAULT_MODEL = "qwen-plus"


@dataclass
class LLMConfig:
    """
    LLM 服务配置

    Attributes:
        api_key: API 密钥
        base_url: API 基础地址（支持 OpenAI 兼容接口）
        model: 默认使用的模型名称
        timeout: 单次请求超时时间（秒）
        max_retries: SDK 内部最大重试次数（指数退避）
    """
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout: float = 60.0
    max_retries: int = 2


@dataclass
class LangfuseConfig:
    """
    Langfuse 监控配置

    Attributes:
        public_key: Langfuse 公钥
        secret_key: Langfuse 私钥
        host: Langfuse 服务地址（自托管或云端）
        enabled: 是否启用监控
    """
    public_key: Optional[str] = None
    secret_key: Optional[str] = None
    host: str = "https://cloud.langfuse.com"
    enabled: bool = False

    def is_valid(self) -> bool:
        """检查配置是否有效（启用时需要密钥）"""
        if not self.enabled:
            return True
        return bool(self.public_key and self.secret_key)


def get_llm_config() -> LLMConfig:
    """
    从环境变量获取 LLM 配置

    环境变量：
        LLM_API_KEY: API 密钥（必需，兼容旧的 DEEPSEEK_API_KEY）
        LLM_BASE_URL: API 基础地址
        LLM_MODEL: 默认模型名称
        LLM_TIMEOUT: 请求超时时间
        LLM_MAX_RETRIES: 最大重试次数

    Returns:
        LLMConfig 配置对象

    Raises:
        ValueError: 当 API Key 未配置时
    """
    api_key = os.getenv("LLM_API_KEY") or os.getenv("DEEPSEEK_API_KEY")
    if not api_key:
        raise ValueError("LLM API Key 未配置，请设置 LLM_API_KEY 环境变量")

    return LLMConfig(
        api_key=api_key,
        base_url=os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL),
        model=os.getenv("LLM_MODEL", DEFAULT_MODEL),
        timeout=float(os.getenv("LLM_TIMEOUT", "60.0")),
        max_retries=int(os.getenv("LLM_MAX_RETRIES", "2")),
    )


def get_langfuse_config() -> LangfuseConfig:
    """
    从环境变量获取 Langfuse 配置

    密钥齐全时默认启用，除非明确设置 LANGFUSE_ENABLED=false。
    """
    public_key = os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = os.getenv("LANGFUSE_SECRET_KEY")

    enabled_env = os.getenv("LANGFUSE_ENABLED", "").lower()
    if enabled_env == "false":
        enabled = False
    elif enabled_env == "true":
        enabled = True
    else:
        enabled = bool(public_key and secret_key)

    return LangfuseConfig(
        public_key=public_key,
        secret_key=secret_key,
        host=os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com"),
        enabled=enabled,
    )
