# app/schemas/snapshot.py
"""
On-disk snapshot format for lot + queue state.
Bump SNAPSHOT_FORMAT_VERSION whenever a field changes meaning.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import List, Optional

SNAPSHOT_FORMAT_VERSION = 1


class SlotSnapshot(BaseModel):
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    occupied: bool = False
    vehicle_id: str = Field(default="", max_length=31)
    entry_time: Optional[datetime] = None

    @model_validator(mode="after")
    def check_free_slot_is_blank(self):
        if self.occupied and (not self.vehicle_id or self.entry_time is None):
            raise ValueError(f"occupied slot [{self.row},{self.col}] needs vehicle_id and entry_time")
        if not self.occupied and (self.vehicle_id or self.entry_time is not None):
            raise ValueError(f"free slot [{self.row},{self.col}] must not carry a vehicle")
        return self


class LotSnapshot(BaseModel):
    rows: int
    cols: int
    slots: List[SlotSnapshot]


class QueueSnapshot(BaseModel):
    capacity: int
    front: int
    rear: int
    size: int
    items: List[str]

    @model_validator(mode="after")
    def check_size(self):
        if self.size != len(self.items):
            raise ValueError(f"queue size {self.size} does not match {len(self.items)} items")
        return self


class Snapshot(BaseModel):
    format_version: int = SNAPSHOT_FORMAT_VERSION
    saved_at: Optional[datetime] = None
    lot: LotSnapshot
    queue: QueueSnapshot
