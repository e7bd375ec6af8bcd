# app/services/parking_context.py
"""
Process-wide owner of the lot, queue, engine, state store and visit log.

Created once at startup (API lifespan or console launch), optionally loads
the previous snapshot, and saves a final snapshot at shutdown.
The lock serializes operator commands; the engine itself is single-threaded.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
from app.config import settings
from app.services.allocation_engine import AllocationEngine
from app.services.exceptions import PersistenceFailure
from app.services.lot import Lot
from app.services.state_store import StateStore
from app.services.visit_log import build_visit_log
from app.services.wait_queue import WaitQueue
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ParkingContext:
    lot: Lot
    queue: WaitQueue
    engine: AllocationEngine
    store: StateStore
    visit_log: object
    lock: threading.Lock = field(default_factory=threading.Lock)

    def save(self):
        self.store.save(self.lot, self.queue)

    def load(self) -> bool:
        return self.store.load(self.lot, self.queue)

    def startup(self, load_state: bool = True):
        """Load the previous snapshot. A broken snapshot falls back to an empty lot."""
        if not load_state:
            return
        try:
            if self.load():
                logger.info(f"Previous state loaded from {self.store.path}")
        except PersistenceFailure as e:
            logger.warning(f"Starting with an empty lot: {e}")
            self.lot.initialize(self.lot.rows, self.lot.cols)
            self.queue.clear()

    def shutdown(self, save_state: bool = True) -> bool:
        if not save_state:
            return False
        try:
            self.save()
            return True
        except PersistenceFailure as e:
            logger.error(f"Final save failed: {e}")
            return False


def build_context(visit_log=None, state_file: str = None,
                  clock: Callable[[], datetime] = datetime.utcnow) -> ParkingContext:
    lot = Lot(settings.LOT_ROWS, settings.LOT_COLS)
    queue = WaitQueue(settings.QUEUE_CAPACITY)
    if visit_log is None:
        visit_log = build_visit_log()
    engine = AllocationEngine(lot, queue, visit_log,
                              rate_per_hour=settings.RATE_PER_HOUR, clock=clock)
    store = StateStore(state_file or settings.STATE_FILE)
    logger.info(f"Parking context ready: {lot.rows}x{lot.cols} lot, queue {queue.capacity}, "
                f"rate {settings.RATE_PER_HOUR:.2f}/h")
    return ParkingContext(lot, queue, engine, store, visit_log)
