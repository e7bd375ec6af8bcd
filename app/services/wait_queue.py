# app/services/wait_queue.py
"""
Bounded FIFO of vehicle ids waiting for a free slot.
Implemented as a ring buffer so front/rear/size can be snapshotted as-is.
"""

from typing import List, Optional
from app.services.exceptions import ConfigurationError, QueueFull

QUEUE_CAPACITY = 50


class WaitQueue:
    def __init__(self, capacity: int = QUEUE_CAPACITY):
        if capacity < 1:
            raise ConfigurationError(f"Queue capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.clear()

    def clear(self):
        self._items: List[Optional[str]] = [None] * self.capacity
        self.front = 0
        self.rear = -1
        self.size = 0

    def __len__(self):
        return self.size

    @property
    def is_empty(self) -> bool:
        return self.size == 0

    @property
    def is_full(self) -> bool:
        return self.size == self.capacity

    def enqueue(self, vehicle_id: str):
        if self.is_full:
            raise QueueFull(vehicle_id, self.capacity)
        self.rear = (self.rear + 1) % self.capacity
        self._items[self.rear] = vehicle_id
        self.size += 1

    def dequeue(self) -> Optional[str]:
        if self.is_empty:
            return None
        vehicle_id = self._items[self.front]
        self._items[self.front] = None
        self.front = (self.front + 1) % self.capacity
        self.size -= 1
        return vehicle_id

    def peek_all(self) -> List[str]:
        """Queued ids, front to rear."""
        return [self._items[(self.front + i) % self.capacity] for i in range(self.size)]

    def contains(self, vehicle_id: str) -> Optional[int]:
        """1-indexed position from the front, or None."""
        for position, queued in enumerate(self.peek_all(), start=1):
            if queued == vehicle_id:
                return position
        return None

    def restore(self, front: int, rear: int, items: List[str]):
        """Rebuild the ring from a snapshot. items are front-to-rear."""
        size = len(items)
        if size > self.capacity:
            raise ConfigurationError(f"{size} queued ids exceed capacity {self.capacity}")
        if not 0 <= front < self.capacity:
            raise ConfigurationError(f"Queue front {front} outside 0..{self.capacity - 1}")
        if not -1 <= rear < self.capacity:
            raise ConfigurationError(f"Queue rear {rear} outside -1..{self.capacity - 1}")
        if size and rear != (front + size - 1) % self.capacity:
            raise ConfigurationError(f"Queue rear {rear} inconsistent with front {front} and size {size}")
        self.clear()
        for i, vehicle_id in enumerate(items):
            self._items[(front + i) % self.capacity] = vehicle_id
        self.front = front
        self.rear = rear
        self.size = size

    def __repr__(self):
        return f"<WaitQueue {self.size}/{self.capacity}>"
