# app/routers/vehicles.py
"""Vehicle entry, exit and search."""

from typing import Union
from fastapi import APIRouter, Depends
from app.dependencies import get_parking
from app.schemas.parking import ExitOut, ParkedOut, QueuedOut, VehicleRequest
from app.services.allocation_engine import Parked, Queued
from app.services.parking_context import ParkingContext

router = APIRouter()


def to_out(result: Union[Parked, Queued]) -> Union[ParkedOut, QueuedOut]:
    if isinstance(result, Parked):
        return ParkedOut(vehicle_id=result.vehicle_id, row=result.row, col=result.col,
                         entry_time=result.entry_time)
    return QueuedOut(vehicle_id=result.vehicle_id, position=result.position)


@router.post("/vehicles/enter", response_model=Union[ParkedOut, QueuedOut],
             summary="Park a vehicle, or queue it when the lot is full")
def enter_vehicle(body: VehicleRequest, ctx: ParkingContext = Depends(get_parking)):
    with ctx.lock:
        result = ctx.engine.enter(body.vehicle_id)
    return to_out(result)


@router.post("/vehicles/exit", response_model=ExitOut, summary="Bill a vehicle and free its slot")
def exit_vehicle(body: VehicleRequest, ctx: ParkingContext = Depends(get_parking)):
    """Frees the slot and promotes the next queued vehicle into it, if any."""
    with ctx.lock:
        result = ctx.engine.exit(body.vehicle_id)
    return ExitOut(
        vehicle_id=result.visit.vehicle_id,
        row=result.row,
        col=result.col,
        entry_time=result.visit.entry_time,
        exit_time=result.visit.exit_time,
        duration_seconds=result.duration_seconds,
        billed_hours=result.billed_hours,
        fee=result.visit.fee,
        promoted=to_out(result.promoted) if result.promoted else None,
    )


@router.get("/vehicles/{vehicle_id}", response_model=Union[ParkedOut, QueuedOut],
            summary="Find a vehicle in the lot or the waiting queue")
def search_vehicle(vehicle_id: str, ctx: ParkingContext = Depends(get_parking)):
    with ctx.lock:
        result = ctx.engine.search(vehicle_id)
    return to_out(result)
