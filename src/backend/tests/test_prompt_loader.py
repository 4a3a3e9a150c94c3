"""
提示词加载器测试
"""
import pytest

from prompts import PromptLoader, PromptLoadError, PromptRenderError


class TestPromptLoader:

    def test_schedule_prompt_is_shipped(self):
        assert "schedule_extraction" in PromptLoader().list_prompts()

    def test_default_variables(self):
        messages = PromptLoader().get_messages("schedule_extraction", file_content="a,b")
        assert "CSV格式" in messages[1]["content"]

    def test_system_only_template(self, tmp_path):
        (tmp_path / "simple.yaml").write_text("system_prompt: 你好 {{ name }}\n", encoding="utf-8")

        messages = PromptLoader(templates_dir=tmp_path).get_messages("simple", name="课表")
        assert messages == [{"role": "system", "content": "你好 课表"}]

    def test_render_accepts_name_variable(self, tmp_path):
        (tmp_path / "simple.yaml").write_text("system_prompt: 你好 {{ name }}\n", encoding="utf-8")

        rendered = PromptLoader(templates_dir=tmp_path).render("simple", "system_prompt", name="课表")
        assert rendered == "你好 课表"

    def test_missing_template(self, tmp_path):
        with pytest.raises(PromptLoadError):
            PromptLoader(templates_dir=tmp_path).load("nope")

    def test_missing_template_key(self, tmp_path):
        (tmp_path / "simple.yaml").write_text("system_prompt: hi\n", encoding="utf-8")
        with pytest.raises(PromptRenderError):
            PromptLoader(templates_dir=tmp_path).render("simple", "user_prompt")
