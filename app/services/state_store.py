# app/services/state_store.py
"""
Saves and loads the lot + queue as one JSON snapshot.

Saves go to a temp file in the same directory and are moved into place with
os.replace, so a crash never leaves a half-written state file.
Loads replace the in-memory lot and queue wholesale.
"""

import os
import tempfile
from datetime import datetime
from pydantic import ValidationError
from app.schemas.snapshot import (
    SNAPSHOT_FORMAT_VERSION, LotSnapshot, QueueSnapshot, Snapshot, SlotSnapshot,
)
from app.services.allocation_engine import validate_vehicle_id
from app.services.exceptions import ConfigurationError, InvalidVehicleId, PersistenceFailure
from app.services.lot import Lot, Slot
from app.services.wait_queue import WaitQueue
from app.utils.logger import get_logger

logger = get_logger(__name__)


def build_snapshot(lot: Lot, queue: WaitQueue) -> Snapshot:
    return Snapshot(
        saved_at=datetime.utcnow().replace(microsecond=0),
        lot=LotSnapshot(
            rows=lot.rows,
            cols=lot.cols,
            slots=[
                SlotSnapshot(row=r, col=c, occupied=s.occupied,
                             vehicle_id=s.vehicle_id, entry_time=s.entry_time)
                for r, c, s in lot.iter_slots()
            ],
        ),
        queue=QueueSnapshot(
            capacity=queue.capacity,
            front=queue.front,
            rear=queue.rear,
            size=queue.size,
            items=queue.peek_all(),
        ),
    )


def apply_snapshot(snapshot: Snapshot, lot: Lot, queue: WaitQueue):
    """Validate everything first, then overwrite lot and queue."""
    if snapshot.format_version != SNAPSHOT_FORMAT_VERSION:
        raise PersistenceFailure(
            f"Unsupported snapshot format_version {snapshot.format_version} "
            f"(expected {SNAPSHOT_FORMAT_VERSION})"
        )
    if snapshot.queue.capacity != queue.capacity:
        raise PersistenceFailure(
            f"Snapshot queue capacity {snapshot.queue.capacity} != configured {queue.capacity}"
        )

    rows, cols = snapshot.lot.rows, snapshot.lot.cols
    grid = {}
    for s in snapshot.lot.slots:
        if s.row >= rows or s.col >= cols or (s.row, s.col) in grid:
            raise PersistenceFailure(f"Snapshot slot [{s.row},{s.col}] is out of range or repeated")
        grid[(s.row, s.col)] = Slot(s.occupied, s.vehicle_id, s.entry_time)
    if len(grid) != rows * cols:
        raise PersistenceFailure(f"Snapshot has {len(grid)} slots for a {rows}x{cols} lot")

    parked = [s.vehicle_id for s in grid.values() if s.occupied]
    queued = snapshot.queue.items
    try:
        for vid in parked + queued:
            validate_vehicle_id(vid)
    except InvalidVehicleId as e:
        raise PersistenceFailure(f"Snapshot rejected: {e}") from e
    if len(set(parked)) != len(parked) or len(set(queued)) != len(queued) or set(parked) & set(queued):
        raise PersistenceFailure("Snapshot lists the same vehicle more than once")

    staged_lot = Lot(lot.rows, lot.cols)
    staged_queue = WaitQueue(queue.capacity)
    try:
        staged_lot.restore(rows, cols, [grid[(r, c)] for r in range(rows) for c in range(cols)])
        staged_queue.restore(snapshot.queue.front, snapshot.queue.rear, queued)
    except ConfigurationError as e:
        raise PersistenceFailure(f"Snapshot rejected: {e}") from e

    lot.restore(rows, cols, [s for _, _, s in staged_lot.iter_slots()])
    queue.restore(staged_queue.front, staged_queue.rear, staged_queue.peek_all())


class StateStore:
    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def save(self, lot: Lot, queue: WaitQueue) -> None:
        payload = build_snapshot(lot, queue).model_dump_json(indent=2)
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".state-", suffix=".tmp", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, self.path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Could not save state to {self.path}: {e}")
            raise PersistenceFailure(f"Could not save state to {self.path}") from e
        logger.info(f"State saved to {self.path} ({lot.occupied_count} parked, {len(queue)} queued)")

    def load(self, lot: Lot, queue: WaitQueue) -> bool:
        """Returns False when no state file exists; raises PersistenceFailure if it is unreadable."""
        if not self.exists():
            logger.info(f"No saved state at {self.path}")
            return False
        try:
            with open(self.path, encoding="utf-8") as f:
                snapshot = Snapshot.model_validate_json(f.read())
        except (OSError, ValidationError) as e:
            logger.error(f"Could not load state from {self.path}: {e}")
            raise PersistenceFailure(f"Could not load state from {self.path}") from e
        apply_snapshot(snapshot, lot, queue)
        logger.info(f"State loaded from {self.path} ({lot.occupied_count} parked, {len(queue)} queued)")
        return True
