# app/services/visit_log.py
"""
Append-only sinks for completed visits.

DatabaseVisitLog  — visit_log table via SQLAlchemy (default)
TextVisitLog      — records.txt, one "id, entry, exit, fee" line per visit

Both expose record(visit) for the engine, plus recent(n) and totals() for
the operator surfaces.
"""

import os
from datetime import datetime
from typing import List
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from app.config import settings
from app.models.visit_log import VisitLog
from app.services.allocation_engine import VisitRecord
from app.services.exceptions import ConfigurationError, PersistenceFailure
from app.utils.logger import get_logger

logger = get_logger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class DatabaseVisitLog:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    def record(self, visit: VisitRecord) -> None:
        db = self.session_factory()
        try:
            db.add(VisitLog(vehicle_id=visit.vehicle_id, entry_time=visit.entry_time,
                            exit_time=visit.exit_time, fee=visit.fee))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Could not record visit for {visit.vehicle_id}: {e}")
            raise PersistenceFailure(f"Could not record visit for {visit.vehicle_id}") from e
        finally:
            db.close()

    def recent(self, n: int = 10) -> List[VisitRecord]:
        """Last n visits, oldest first."""
        db = self.session_factory()
        try:
            rows = (
                db.query(VisitLog)
                .order_by(VisitLog.id.desc())
                .limit(n)
                .all()
            )
            return [VisitRecord(r.vehicle_id, r.entry_time, r.exit_time, r.fee) for r in reversed(rows)]
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Could not read visit log: {e}") from e
        finally:
            db.close()

    def totals(self) -> dict:
        db = self.session_factory()
        try:
            visits, revenue = db.query(func.count(VisitLog.id), func.sum(VisitLog.fee)).one()
            return {"visits": visits, "revenue": round(revenue or 0.0, 2)}
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Could not read visit log: {e}") from e
        finally:
            db.close()


class TextVisitLog:
    def __init__(self, path: str):
        self.path = path

    @staticmethod
    def format_line(visit: VisitRecord) -> str:
        return (f"{visit.vehicle_id}, {visit.entry_time.strftime(TIME_FORMAT)}, "
                f"{visit.exit_time.strftime(TIME_FORMAT)}, {visit.fee:.2f}\n")

    @staticmethod
    def parse_line(line: str) -> VisitRecord:
        vehicle_id, entry_s, exit_s, fee_s = [p.strip() for p in line.split(",")]
        return VisitRecord(
            vehicle_id=vehicle_id,
            entry_time=datetime.strptime(entry_s, TIME_FORMAT),
            exit_time=datetime.strptime(exit_s, TIME_FORMAT),
            fee=float(fee_s),
        )

    def record(self, visit: VisitRecord) -> None:
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(self.format_line(visit))
        except OSError as e:
            logger.error(f"Could not append to {self.path}: {e}")
            raise PersistenceFailure(f"Could not append to {self.path}") from e

    def _read_all(self) -> List[VisitRecord]:
        if not os.path.exists(self.path):
            return []
        records = []
        try:
            with open(self.path, encoding="utf-8") as f:
                for lineno, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        records.append(self.parse_line(line))
                    except ValueError:
                        logger.warning(f"{self.path}:{lineno} malformed record skipped")
        except OSError as e:
            raise PersistenceFailure(f"Could not read {self.path}") from e
        return records

    def recent(self, n: int = 10) -> List[VisitRecord]:
        """Last n visits, oldest first."""
        if n <= 0:
            return []
        return self._read_all()[-n:]

    def totals(self) -> dict:
        records = self._read_all()
        return {"visits": len(records), "revenue": round(sum(r.fee for r in records), 2)}


def build_visit_log(backend: str = None):
    backend = (backend or settings.VISIT_LOG_BACKEND).lower()
    if backend == "database":
        from app.database import SessionLocal, create_tables
        create_tables()
        return DatabaseVisitLog(SessionLocal)
    if backend == "text":
        return TextVisitLog(settings.RECORDS_FILE)
    raise ConfigurationError(f"Unknown VISIT_LOG_BACKEND '{backend}' (expected database | text)")
