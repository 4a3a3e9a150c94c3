"""
提示词加载器

从 YAML 文件加载提示词配置，使用 Jinja2 渲染模板变量，并做线程安全的缓存。
"""

import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jinja2 import Template, TemplateError


class PromptLoadError(Exception):
    """提示词加载异常"""
    pass


class PromptRenderError(Exception):
    """提示词渲染异常"""
    pass


class PromptLoader:
    """
    提示词加载器

    YAML 模板约定：
        system_prompt: 系统提示词（必需）
        user_prompt:   用户消息模板（可选，存在时追加为 user 消息）
        variables:     模板变量默认值（可选）

    使用示例：
        loader = PromptLoader()
        messages = loader.get_messages(
            "schedule_extraction", file_content="...", source_label="CSV"
        )
    """

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        enable_cache: bool = True,
        auto_reload: bool = False
    ):
        """
        Args:
            templates_dir: 提示词模板目录路径，默认为 prompts/templates/
            enable_cache: 是否启用缓存
            auto_reload: 是否在文件变更后自动重载
        """
        if templates_dir is None:
            self.templates_dir = Path(__file__).parent / "templates"
        else:
            self.templates_dir = Path(templates_dir)
        self.enable_cache = enable_cache
        self.auto_reload = auto_reload
        self._cache: Dict[str, Dict] = {}
        self._file_mtimes: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _check_file_modified(self, name: str) -> bool:
        file_path = self.templates_dir / f"{name}.yaml"
        if not file_path.exists():
            return False
        return file_path.stat().st_mtime > self._file_mtimes.get(name, 0)

    def load(self, name: str, /) -> Dict[str, Any]:
        """
        加载提示词配置

        Raises:
            PromptLoadError: 文件不存在或格式错误
        """
        with self._lock:
            if self.enable_cache and name in self._cache:
                if not self.auto_reload or not self._check_file_modified(name):
                    return self._cache[name]

            file_path = self.templates_dir / f"{name}.yaml"
            if not file_path.exists():
                raise PromptLoadError(f"Prompt template not found: {file_path}")

            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise PromptLoadError(f"Failed to parse YAML: {e}")

            if not isinstance(config, dict) or 'system_prompt' not in config:
                raise PromptLoadError(f"Missing required field 'system_prompt' in {name}.yaml")

            if self.enable_cache:
                self._cache[name] = config
                self._file_mtimes[name] = file_path.stat().st_mtime

            return config

    def render(self, name: str, template_key: str = "system_prompt", /, **variables) -> str:
        """
        渲染提示词模板

        Raises:
            PromptRenderError: 模板不存在或渲染失败
        """
        config = self.load(name)
        template_content = config.get(template_key, '')
        if not template_content:
            raise PromptRenderError(f"Template '{template_key}' not found in {name}.yaml")

        merged_vars = {**config.get('variables', {}), **variables}

        try:
            return Template(template_content).render(**merged_vars)
        except TemplateError as e:
            raise PromptRenderError(f"Failed to render template: {e}")

    def get_messages(self, name: str, /, **variables) -> List[Dict[str, str]]:
        """
        构建 OpenAI 格式的消息列表：system_prompt 在前，user_prompt（若有）在后
        """
        config = self.load(name)
        messages = [
            {"role": "system", "content": self.render(name, "system_prompt", **variables)}
        ]
        if config.get('user_prompt'):
            messages.append(
                {"role": "user", "content": self.render(name, "user_prompt", **variables)}
            )
        return messages

    def clear_cache(self, name: Optional[str] = None):
        """清除缓存，name 为 None 时清除全部"""
        with self._lock:
            if name:
                self._cache.pop(name, None)
                self._file_mtimes.pop(name, None)
            else:
                self._cache.clear()
                self._file_mtimes.clear()

    def list_prompts(self) -> List[str]:
        """列出所有可用的提示词模板"""
        if not self.templates_dir.exists():
            return []
        return [f.stem for f in self.templates_dir.glob("*.yaml")]


# 全局默认实例
prompt_loader = PromptLoader(enable_cache=True, auto_reload=False)
