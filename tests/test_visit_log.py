# tests/test_visit_log.py
"""Unit tests for the database and text visit logs."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import create_tables
from app.services.allocation_engine import VisitRecord
from app.services.exceptions import ConfigurationError, PersistenceFailure
from app.services.visit_log import DatabaseVisitLog, TextVisitLog, build_visit_log

T0 = datetime(2026, 3, 1, 9, 0, 0)


def visit(vid, hours=1, fee=20.0):
    return VisitRecord(vid, T0, T0 + timedelta(hours=hours), fee)


@pytest.fixture
def db_log():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False},
                           poolclass=StaticPool)
    create_tables(bind=engine)
    return DatabaseVisitLog(sessionmaker(bind=engine))


class TestDatabaseVisitLog:
    def test_record_and_recent_oldest_first(self, db_log):
        for i in range(1, 6):
            db_log.record(visit(f"V{i}"))
        recent = db_log.recent(3)
        assert [r.vehicle_id for r in recent] == ["V3", "V4", "V5"]
        assert recent[0] == visit("V3")

    def test_totals(self, db_log):
        db_log.record(visit("V1", fee=20.0))
        db_log.record(visit("V2", hours=2, fee=40.0))
        assert db_log.totals() == {"visits": 2, "revenue": 60.0}

    def test_empty_totals(self, db_log):
        assert db_log.totals() == {"visits": 0, "revenue": 0.0}

    def test_database_error_becomes_persistence_failure(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("locked"))
        log = DatabaseVisitLog(lambda: db)
        with pytest.raises(PersistenceFailure):
            log.record(visit("V1"))
        db.rollback.assert_called_once()
        db.close.assert_called_once()


class TestTextVisitLog:
    def test_line_format_is_stable(self, tmp_path):
        path = tmp_path / "records.txt"
        TextVisitLog(str(path)).record(visit("KA01", hours=2, fee=40.0))
        assert path.read_text() == "KA01, 2026-03-01 09:00:00, 2026-03-01 11:00:00, 40.00\n"

    def test_recent_and_totals(self, tmp_path):
        log = TextVisitLog(str(tmp_path / "records.txt"))
        for i in range(1, 13):
            log.record(visit(f"V{i}"))
        recent = log.recent(10)
        assert len(recent) == 10
        assert recent[0].vehicle_id == "V3"
        assert recent[-1] == visit("V12")
        assert log.totals() == {"visits": 12, "revenue": 240.0}

    def test_missing_file_has_no_records(self, tmp_path):
        log = TextVisitLog(str(tmp_path / "records.txt"))
        assert log.recent(10) == []
        assert log.totals() == {"visits": 0, "revenue": 0.0}

    def test_malformed_lines_skipped(self, tmp_path):
        path = tmp_path / "records.txt"
        path.write_text("garbage line\nKA01, 2026-03-01 09:00:00, 2026-03-01 10:00:00, 20.00\n")
        assert [r.vehicle_id for r in TextVisitLog(str(path)).recent(10)] == ["KA01"]

    def test_unwritable_path_raises(self, tmp_path):
        log = TextVisitLog(str(tmp_path / "missing" / "records.txt"))
        with pytest.raises(PersistenceFailure):
            log.record(visit("V1"))


class TestBuildVisitLog:
    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError):
            build_visit_log("redis")

    def test_text_backend(self):
        assert isinstance(build_visit_log("text"), TextVisitLog)
