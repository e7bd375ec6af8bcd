# app/services/allocation_engine.py
"""
Allocation engine: entry, exit, queue promotion and billing.

Vehicle lifecycle:
  NotPresent -> Parked -> gone
  NotPresent -> Queued -> Parked -> gone

Each public call either applies fully or raises a ParkingError with the lot
and queue untouched. Completed visits go to a sink exposing record(visit).
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol, Union
from app.services.exceptions import (
    AlreadyParked, AlreadyQueued, ClockError, ConfigurationError,
    InvalidVehicleId, VehicleNotFound,
)
from app.services.lot import Lot
from app.services.wait_queue import WaitQueue
from app.utils.logger import get_logger

logger = get_logger(__name__)

SECONDS_PER_HOUR = 3600
MAX_VEHICLE_ID_LEN = 31
_VEHICLE_ID_RE = re.compile(r"^[^\s,]{1,%d}$" % MAX_VEHICLE_ID_LEN)


@dataclass(frozen=True)
class VisitRecord:
    vehicle_id: str
    entry_time: datetime
    exit_time: datetime
    fee: float


class VisitSink(Protocol):
    def record(self, visit: VisitRecord) -> None: ...


@dataclass(frozen=True)
class Parked:
    vehicle_id: str
    row: int
    col: int
    entry_time: datetime


@dataclass(frozen=True)
class Queued:
    vehicle_id: str
    position: int


@dataclass(frozen=True)
class ExitResult:
    visit: VisitRecord
    row: int
    col: int
    duration_seconds: int
    billed_hours: int
    promoted: Optional[Parked] = None


def validate_vehicle_id(vehicle_id) -> str:
    if not isinstance(vehicle_id, str) or not _VEHICLE_ID_RE.match(vehicle_id):
        raise InvalidVehicleId(vehicle_id)
    return vehicle_id


def billed_hours_for(seconds: int) -> int:
    """Hours rounded up, never less than one."""
    return max(1, -(-seconds // SECONDS_PER_HOUR))


def compute_fee(seconds: int, rate_per_hour: float) -> float:
    return round(billed_hours_for(seconds) * rate_per_hour, 2)


class AllocationEngine:
    def __init__(self, lot: Lot, queue: WaitQueue, visit_sink: VisitSink,
                 rate_per_hour: float = 20.0,
                 clock: Callable[[], datetime] = datetime.utcnow):
        if rate_per_hour < 0:
            raise ConfigurationError(f"Rate per hour must not be negative, got {rate_per_hour}")
        self.lot = lot
        self.queue = queue
        self.visit_sink = visit_sink
        self.rate_per_hour = rate_per_hour
        self.clock = clock

    def _now(self, now: Optional[datetime]) -> datetime:
        return (now or self.clock()).replace(microsecond=0)

    def enter(self, vehicle_id: str, now: Optional[datetime] = None) -> Union[Parked, Queued]:
        validate_vehicle_id(vehicle_id)
        now = self._now(now)

        location = self.lot.find_vehicle(vehicle_id)
        if location:
            raise AlreadyParked(vehicle_id, *location)
        position = self.queue.contains(vehicle_id)
        if position:
            raise AlreadyQueued(vehicle_id, position)

        free = self.lot.find_free_slot()
        if free:
            row, col = free
            self.lot.occupy(row, col, vehicle_id, now)
            logger.info(f"Allocated slot [{row},{col}] to {vehicle_id}")
            return Parked(vehicle_id, row, col, now)

        self.queue.enqueue(vehicle_id)
        logger.info(f"Lot full — {vehicle_id} queued at position {len(self.queue)}")
        return Queued(vehicle_id, len(self.queue))

    def exit(self, vehicle_id: str, now: Optional[datetime] = None) -> ExitResult:
        validate_vehicle_id(vehicle_id)
        now = self._now(now)

        location = self.lot.find_vehicle(vehicle_id)
        if not location:
            raise VehicleNotFound(vehicle_id)
        row, col = location
        entry_time = self.lot.slot(row, col).entry_time

        seconds = int((now - entry_time).total_seconds())
        if seconds < 0:
            raise ClockError(vehicle_id, entry_time, now)
        hours = billed_hours_for(seconds)
        visit = VisitRecord(vehicle_id, entry_time, now, compute_fee(seconds, self.rate_per_hour))

        # A failing sink aborts the exit before any state changes
        self.visit_sink.record(visit)
        self.lot.vacate(row, col)
        logger.info(f"{vehicle_id} left slot [{row},{col}] after {seconds}s — "
                    f"billed {hours}h, fee {visit.fee:.2f}")

        return ExitResult(visit, row, col, seconds, hours, self._promote(now))

    def _promote(self, now: datetime) -> Optional[Parked]:
        """Move at most one queued vehicle into a free slot."""
        if self.queue.is_empty:
            return None
        free = self.lot.find_free_slot()
        if not free:
            return None
        vehicle_id = self.queue.dequeue()
        row, col = free
        self.lot.occupy(row, col, vehicle_id, now)
        logger.info(f"Assigned queued vehicle {vehicle_id} to slot [{row},{col}]")
        return Parked(vehicle_id, row, col, now)

    def search(self, vehicle_id: str) -> Union[Parked, Queued]:
        validate_vehicle_id(vehicle_id)
        location = self.lot.find_vehicle(vehicle_id)
        if location:
            row, col = location
            return Parked(vehicle_id, row, col, self.lot.slot(row, col).entry_time)
        position = self.queue.contains(vehicle_id)
        if position:
            return Queued(vehicle_id, position)
        raise VehicleNotFound(vehicle_id, "parking or queue")
