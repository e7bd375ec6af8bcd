# app/schemas/parking.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal, Optional


class VehicleRequest(BaseModel):
    vehicle_id: str = Field(min_length=1, max_length=31, pattern=r"^[^\s,]+$")


class ParkedOut(BaseModel):
    status: Literal["parked"] = "parked"
    vehicle_id: str
    row: int
    col: int
    entry_time: datetime


class QueuedOut(BaseModel):
    status: Literal["queued"] = "queued"
    vehicle_id: str
    position: int


class ExitOut(BaseModel):
    vehicle_id: str
    row: int
    col: int
    entry_time: datetime
    exit_time: datetime
    duration_seconds: int
    billed_hours: int
    fee: float
    promoted: Optional[ParkedOut] = None


class SlotOut(BaseModel):
    row: int
    col: int
    occupied: bool
    vehicle_id: Optional[str] = None
    entry_time: Optional[datetime] = None


class LotOut(BaseModel):
    rows: int
    cols: int
    capacity: int
    occupied: int
    free: int
    rate_per_hour: float
    slots: List[SlotOut]


class QueueOut(BaseModel):
    capacity: int
    size: int
    vehicles: List[str]


class StateOut(BaseModel):
    status: str
    path: str
    occupied: int
    queued: int
