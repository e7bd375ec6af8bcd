# app/services/exceptions.py
"""
Error taxonomy for the allocation engine and its collaborators.
Every error leaves the lot and queue exactly as they were before the call.
Lot-full-but-queued is not an error: enter() returns a Queued result.
"""


class ParkingError(Exception):
    """Base class for all recoverable parking errors."""


class InvalidVehicleId(ParkingError):
    def __init__(self, vehicle_id):
        self.vehicle_id = vehicle_id
        super().__init__(f"Invalid vehicle id {vehicle_id!r}")


class AlreadyParked(ParkingError):
    def __init__(self, vehicle_id: str, row: int, col: int):
        self.vehicle_id = vehicle_id
        self.row = row
        self.col = col
        super().__init__(f"Vehicle {vehicle_id} is already parked in slot [{row},{col}]")


class AlreadyQueued(ParkingError):
    def __init__(self, vehicle_id: str, position: int):
        self.vehicle_id = vehicle_id
        self.position = position
        super().__init__(f"Vehicle {vehicle_id} is already waiting at queue position {position}")


class QueueFull(ParkingError):
    def __init__(self, vehicle_id: str, capacity: int):
        self.vehicle_id = vehicle_id
        self.capacity = capacity
        super().__init__(f"Waiting queue is full ({capacity}). Cannot enqueue {vehicle_id}")


class VehicleNotFound(ParkingError):
    def __init__(self, vehicle_id: str, where: str = "parking slots"):
        self.vehicle_id = vehicle_id
        super().__init__(f"Vehicle {vehicle_id} not found in {where}")


class SlotStateError(ParkingError):
    """A slot was occupied/vacated against its current state."""


class PersistenceFailure(ParkingError):
    """Snapshot or visit log I/O failed."""


class ConfigurationError(ParkingError):
    """Invalid lot dimensions or environment."""


class ClockError(ConfigurationError):
    def __init__(self, vehicle_id: str, entry_time, exit_time):
        self.vehicle_id = vehicle_id
        super().__init__(
            f"Clock moved backwards for {vehicle_id}: exit {exit_time} is before entry {entry_time}"
        )
