"""
提示词管理模块

提供统一的提示词加载、渲染和管理功能。
"""

from .loader import PromptLoader, PromptLoadError, PromptRenderError, prompt_loader

__all__ = ["PromptLoader", "PromptLoadError", "PromptRenderError", "prompt_loader"]
