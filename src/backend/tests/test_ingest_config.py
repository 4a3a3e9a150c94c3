"""
导入配置测试
"""
import pytest

from app.ingest import get_ingest_config
from app.ingest.config import DEFAULT_MAX_FILE_SIZE


class TestGetIngestConfig:

    def test_defaults(self, monkeypatch):
        for name in ("UPLOAD_MAX_BYTES", "SCHEDULE_EXTRACTOR", "SCHEDULE_DEDUPLICATE"):
            monkeypatch.delenv(name, raising=False)

        config = get_ingest_config()
        assert config.max_file_size == DEFAULT_MAX_FILE_SIZE
        assert config.extractor == "llm"
        assert config.deduplicate is False
        assert config.allowed_extensions == {".csv", ".xls", ".xlsx"}

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("UPLOAD_DIR", str(tmp_path))
        monkeypatch.setenv("UPLOAD_MAX_BYTES", "1024")
        monkeypatch.setenv("SCHEDULE_EXTRACTOR", "LLM+Columns")
        monkeypatch.setenv("SCHEDULE_DEDUPLICATE", "true")

        config = get_ingest_config()
        assert config.upload_dir == tmp_path
        assert config.max_file_size == 1024
        assert config.extractor == "llm+columns"
        assert config.deduplicate is True

    def test_invalid_extractor(self, monkeypatch):
        monkeypatch.setenv("SCHEDULE_EXTRACTOR", "magic")
        with pytest.raises(ValueError):
            get_ingest_config()
