# app/models/visit_log.py
"""
Visit log table — one row per completed parking visit.
Written by DatabaseVisitLog when a vehicle exits. Rows are never updated.
"""

from sqlalchemy import Column, Integer, String, DateTime, Float
from app.database import Base


class VisitLog(Base):
    __tablename__ = "visit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(String(31), nullable=False, index=True)
    entry_time = Column(DateTime, nullable=False)
    exit_time = Column(DateTime, nullable=False, index=True)
    fee = Column(Float, nullable=False)

    def __repr__(self):
        return f"<VisitLog {self.id} vehicle={self.vehicle_id} fee={self.fee:.2f}>"
