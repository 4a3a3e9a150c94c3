"""
Pytest 配置和通用 Fixtures

提供内存数据库、Mock LLM 客户端和已覆盖依赖的 TestClient
"""
import os
import sys

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("JWT_SECRET", "courser-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LANGFUSE_ENABLED", "false")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.ingest import IngestConfig, LLMScheduleExtractor, SchedulePipeline
from app.llm import ChatResponse, LLMClient, LLMError
from app.models import Base, Course


# ==================== Mock LLM ====================

class MockLLMClient(LLMClient):
    """
    Mock LLM 客户端，返回预设回复并记录调用
    """

    def __init__(self, reply: str = "[]", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[List[Dict[str, str]]] = []

    async def chat(self, messages, *, model=None, temperature=0.2, max_tokens=None, **kwargs):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return ChatResponse(content=self.reply, model=self.default_model)

    @property
    def default_model(self) -> str:
        return "mock-model"

    @property
    def is_available(self) -> bool:
        return True


@pytest.fixture
def mock_llm():
    return MockLLMClient(
        reply='```json\n[{"title": "JS基础", "teacher": "张老师"}, {"title": "HTML入门", "teacher": "李老师"}]\n```'
    )


@pytest.fixture
def failing_llm():
    return MockLLMClient(error=LLMError("upstream 503"))


# ==================== 数据库 ====================

@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = Session()
    yield session
    session.close()


def count_courses(session) -> int:
    session.expire_all()
    return session.query(Course).count()


# ==================== 导入配置 ====================

@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def ingest_config(upload_dir):
    return IngestConfig(upload_dir=upload_dir, extraction_deadline=5.0)


# ==================== API ====================

@pytest.fixture
def auth_headers():
    token = create_access_token({"id": 1, "username": "tester"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_client(db_session, ingest_config):
    """
    构造 TestClient，抽取器使用传入的 Mock LLM
    """
    from main import app
    from app.api import courses
    from app.core.database import get_db

    def _make(llm: LLMClient, config: Optional[IngestConfig] = None) -> TestClient:
        settings = config or ingest_config

        def override_get_db():
            yield db_session

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[courses.get_ingest_settings] = lambda: settings
        app.dependency_overrides[courses.get_schedule_pipeline] = lambda: SchedulePipeline(
            extractor=LLMScheduleExtractor(llm_client=llm, deadline=settings.extraction_deadline),
        )
        return TestClient(app, raise_server_exceptions=False)

    yield _make

    from main import app
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, mock_llm):
    return make_client(mock_llm)
