"""
课程表上传接口测试

POST /api/courses/upload 的端到端行为：
认证、参数校验、解析失败不入库、临时文件清理、重复上传
"""
import io

import pandas as pd
import pytest

from app.ingest import IngestConfig
from conftest import MockLLMClient, count_courses

COURSES_CSV = "课程名称,教师\nJS基础,张老师\nHTML入门,李老师".encode("utf-8")


def upload(client, headers, name="courses.csv", data=COURSES_CSV, content_type="text/csv"):
    return client.post(
        "/api/courses/upload",
        files={"file": (name, data, content_type)},
        headers=headers,
    )


class TestUploadSuccess:

    def test_csv_upload(self, client, auth_headers, mock_llm, db_session, upload_dir):
        response = upload(client, auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "课程表上传成功"
        assert body["file"]["originalname"] == "courses.csv"
        assert body["file"]["size"] == len(COURSES_CSV)
        assert [(c["title"], c["teacher"]) for c in body["courses"]] == [
            ("JS基础", "张老师"),
            ("HTML入门", "李老师"),
        ]
        assert len({c["id"] for c in body["courses"]}) == 2
        assert count_courses(db_session) == 2
        # LLM 收到的是 CSV 原文
        assert "JS基础,张老师" in mock_llm.calls[0][1]["content"]

    def test_temp_file_removed(self, client, auth_headers, upload_dir):
        assert upload(client, auth_headers).status_code == 200
        assert list(upload_dir.iterdir()) == []

    def test_reupload_creates_new_rows(self, client, auth_headers, db_session):
        first = upload(client, auth_headers).json()["courses"]
        second = upload(client, auth_headers).json()["courses"]

        assert count_courses(db_session) == 4
        assert len({c["id"] for c in first + second}) == 4

    def test_missing_fields_use_defaults(self, make_client, auth_headers):
        client = make_client(MockLLMClient(reply='[{"title": "Algebra"}]'))
        body = upload(client, auth_headers).json()
        assert body["courses"][0]["teacher"] == "未知教师"

    def test_empty_result(self, make_client, auth_headers, db_session):
        client = make_client(MockLLMClient(reply="```json\n[]\n```"))
        response = upload(client, auth_headers)

        assert response.status_code == 200
        assert response.json()["courses"] == []
        assert count_courses(db_session) == 0


class TestUploadRejected:

    def test_requires_token(self, client, mock_llm):
        response = upload(client, {})
        assert response.status_code == 401
        assert response.json()["message"] == "未授权，请登录"
        assert mock_llm.calls == []

    def test_invalid_token(self, client):
        response = upload(client, {"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_missing_file(self, client, auth_headers):
        response = client.post("/api/courses/upload", data={"note": "x"}, headers=auth_headers)
        assert response.status_code == 400

    def test_file_field_sent_as_text(self, client, auth_headers, mock_llm):
        response = client.post("/api/courses/upload", data={"file": "not-a-file"}, headers=auth_headers)

        assert response.status_code == 400
        assert set(response.json()) == {"message"}
        assert mock_llm.calls == []

    def test_unsupported_type(self, client, auth_headers, mock_llm, db_session, upload_dir):
        response = upload(client, auth_headers, name="notes.txt", data=b"hello", content_type="text/plain")

        assert response.status_code == 400
        assert response.json()["message"] == "不支持的文件类型。请上传CSV或Excel文件。"
        assert mock_llm.calls == []
        assert count_courses(db_session) == 0
        assert list(upload_dir.iterdir()) == []

    def test_too_large(self, make_client, auth_headers, mock_llm, upload_dir):
        client = make_client(mock_llm, IngestConfig(upload_dir=upload_dir, max_file_size=16))
        response = upload(client, auth_headers)

        assert response.status_code == 400
        assert mock_llm.calls == []
        assert list(upload_dir.iterdir()) == []


class TestUploadFailure:

    def test_prose_reply_persists_nothing(self, make_client, auth_headers, db_session, upload_dir):
        client = make_client(MockLLMClient(reply="I could not find any courses."))
        response = upload(client, auth_headers)

        assert response.status_code == 500
        assert response.json()["message"] == "无法解析课程数据，请检查文件格式"
        assert count_courses(db_session) == 0
        assert list(upload_dir.iterdir()) == []

    def test_service_error(self, make_client, failing_llm, auth_headers, db_session):
        response = upload(make_client(failing_llm), auth_headers)

        assert response.status_code == 500
        assert response.json()["message"] == "课程表解析失败，请稍后重试"
        assert count_courses(db_session) == 0


class TestCourseQueries:

    def test_list_and_detail(self, client, auth_headers):
        created = upload(client, auth_headers).json()["courses"]

        listing = client.get("/api/courses")
        assert listing.status_code == 200
        assert {c["id"] for c in listing.json()["courses"]} == {c["id"] for c in created}
        assert listing.json()["total"] == 2

        detail = client.get(f"/api/courses/{created[0]['id']}")
        assert detail.status_code == 200
        assert detail.json()["course"]["title"] == created[0]["title"]

    def test_detail_not_found(self, client):
        response = client.get("/api/courses/999999")
        assert response.status_code == 404
        assert response.json()["message"] == "课程不存在"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestExcelUpload:

    @staticmethod
    def workbook_bytes() -> bytes:
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            pd.DataFrame([
                {"课程名称": "JS基础", "教师": "张老师"},
                {"课程名称": "HTML入门", "教师": "李老师"},
            ]).to_excel(writer, sheet_name="课表", index=False)
            pd.DataFrame([{"课程名称": "第二张表的课程", "教师": "赵老师"}]).to_excel(
                writer, sheet_name="其他", index=False
            )
        return buffer.getvalue()

    def test_xlsx_upload(self, client, auth_headers, mock_llm, db_session, upload_dir):
        response = upload(
            client,
            auth_headers,
            name="schedule.xlsx",
            data=self.workbook_bytes(),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

        assert response.status_code == 200
        assert [c["title"] for c in response.json()["courses"]] == ["JS基础", "HTML入门"]
        assert count_courses(db_session) == 2

        prompt = mock_llm.calls[0][1]["content"]
        assert "Excel格式" in prompt
        assert '行1: {"课程名称": "JS基础", "教师": "张老师"}' in prompt
        assert "第二张表的课程" not in prompt
        assert list(upload_dir.iterdir()) == []
