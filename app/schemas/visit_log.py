# app/schemas/visit_log.py
from pydantic import BaseModel
from datetime import datetime


class VisitLogOut(BaseModel):
    vehicle_id: str
    entry_time: datetime
    exit_time: datetime
    fee: float

    class Config:
        from_attributes = True


class VisitTotalsOut(BaseModel):
    visits: int
    revenue: float
