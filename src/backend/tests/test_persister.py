"""
批量入库测试
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.ingest import BatchPersister, CourseNormalizer, PersistenceError
from app.models import Course
from conftest import count_courses


def normalized(*pairs):
    return CourseNormalizer().normalize([{"title": t, "teacher": r} for t, r in pairs], base_id=1)


class TestBatchPersister:

    def test_persist_returns_database_ids_in_order(self, db_session):
        persisted = BatchPersister().persist(db_session, normalized(("JS基础", "张老师"), ("HTML入门", "李老师")))

        assert [c.title for c in persisted] == ["JS基础", "HTML入门"]
        assert len({c.id for c in persisted}) == 2
        for course in persisted:
            row = db_session.get(Course, course.id)
            assert row.title == course.title
            assert row.teacher == course.teacher
            assert row.description is None
            assert row.user_id is None
            assert row.created_at is not None

    def test_timestamps_are_utc(self, db_session):
        persisted = BatchPersister().persist(db_session, normalized(("A", "B")))
        assert persisted[0].created_at.utcoffset() == timedelta(0)

    def test_duplicates_are_stored_as_separate_rows(self, db_session):
        persisted = BatchPersister().persist(db_session, normalized(("A", "B"), ("A", "B")))

        assert len(persisted) == 2
        assert persisted[0].id != persisted[1].id
        assert count_courses(db_session) == 2

    def test_empty_input_writes_nothing(self, db_session):
        assert BatchPersister().persist(db_session, []) == []
        assert count_courses(db_session) == 0

    def test_failure_rolls_back(self, db_session, monkeypatch):
        def broken_flush(*args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(db_session, "flush", broken_flush)

        with pytest.raises(PersistenceError):
            BatchPersister().persist(db_session, normalized(("A", "B")))

        monkeypatch.undo()
        assert count_courses(db_session) == 0
