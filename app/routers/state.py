# app/routers/state.py
"""Explicit snapshot save / load."""

from fastapi import APIRouter, Depends
from app.dependencies import get_parking
from app.schemas.parking import StateOut
from app.services.parking_context import ParkingContext

router = APIRouter()


def _state_out(ctx: ParkingContext, status: str) -> StateOut:
    return StateOut(status=status, path=ctx.store.path,
                    occupied=ctx.lot.occupied_count, queued=len(ctx.queue))


@router.post("/state/save", response_model=StateOut, summary="Write the lot and queue snapshot")
def save_state(ctx: ParkingContext = Depends(get_parking)):
    with ctx.lock:
        ctx.save()
        return _state_out(ctx, "saved")


@router.post("/state/load", response_model=StateOut, summary="Replace lot and queue from the snapshot")
def load_state(ctx: ParkingContext = Depends(get_parking)):
    """Leaves the current state alone when no snapshot exists."""
    with ctx.lock:
        loaded = ctx.load()
        return _state_out(ctx, "loaded" if loaded else "not_found")
