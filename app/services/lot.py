# app/services/lot.py
"""
Fixed-size parking lot: a row-major grid of slots.
The lot only tracks occupancy; allocation rules live in allocation_engine.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional, Tuple
from app.services.exceptions import ConfigurationError, SlotStateError

MAX_ROWS = 4
MAX_COLS = 5


@dataclass
class Slot:
    occupied: bool = False
    vehicle_id: str = ""
    entry_time: Optional[datetime] = None

    def clear(self):
        self.occupied = False
        self.vehicle_id = ""
        self.entry_time = None


class Lot:
    def __init__(self, rows: int = MAX_ROWS, cols: int = MAX_COLS):
        self.rows = 0
        self.cols = 0
        self._slots: List[Slot] = []
        self.initialize(rows, cols)

    def initialize(self, rows: int, cols: int):
        """Reset every slot to free. Dimensions are capped at MAX_ROWS x MAX_COLS."""
        if not (1 <= rows <= MAX_ROWS and 1 <= cols <= MAX_COLS):
            raise ConfigurationError(
                f"Lot dimensions {rows}x{cols} outside 1..{MAX_ROWS} x 1..{MAX_COLS}"
            )
        self.rows = rows
        self.cols = cols
        self._slots = [Slot() for _ in range(rows * cols)]

    @property
    def capacity(self) -> int:
        return self.rows * self.cols

    @property
    def occupied_count(self) -> int:
        return sum(1 for s in self._slots if s.occupied)

    @property
    def is_full(self) -> bool:
        return self.occupied_count == self.capacity

    def slot(self, row: int, col: int) -> Slot:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Slot [{row},{col}] outside {self.rows}x{self.cols} lot")
        return self._slots[row * self.cols + col]

    def iter_slots(self) -> Iterator[Tuple[int, int, Slot]]:
        for index, s in enumerate(self._slots):
            yield index // self.cols, index % self.cols, s

    def find_free_slot(self) -> Optional[Tuple[int, int]]:
        """First free slot in row-major order, or None when the lot is full."""
        for row, col, s in self.iter_slots():
            if not s.occupied:
                return row, col
        return None

    def find_vehicle(self, vehicle_id: str) -> Optional[Tuple[int, int]]:
        for row, col, s in self.iter_slots():
            if s.occupied and s.vehicle_id == vehicle_id:
                return row, col
        return None

    def occupy(self, row: int, col: int, vehicle_id: str, entry_time: datetime):
        s = self.slot(row, col)
        if s.occupied:
            raise SlotStateError(f"Slot [{row},{col}] is already taken by {s.vehicle_id}")
        s.occupied = True
        s.vehicle_id = vehicle_id
        s.entry_time = entry_time

    def vacate(self, row: int, col: int):
        s = self.slot(row, col)
        if not s.occupied:
            raise SlotStateError(f"Slot [{row},{col}] is already free")
        s.clear()

    def restore(self, rows: int, cols: int, slots: List[Slot]):
        """Replace the whole grid, e.g. from a snapshot. slots are row-major."""
        if len(slots) != rows * cols:
            raise ConfigurationError(f"Expected {rows * cols} slots, got {len(slots)}")
        self.initialize(rows, cols)
        self._slots = list(slots)

    def __repr__(self):
        return f"<Lot {self.rows}x{self.cols} occupied={self.occupied_count}/{self.capacity}>"
