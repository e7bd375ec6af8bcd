# app/routers/lot.py
"""Lot and waiting-queue views."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from app.dependencies import get_parking
from app.schemas.parking import LotOut, QueueOut, SlotOut
from app.services.parking_context import ParkingContext
from app.utils.lot_renderer import render_lot, render_lot_detailed, render_queue

router = APIRouter()


@router.get("/lot", response_model=LotOut, summary="Slot grid with occupancy")
def get_lot(ctx: ParkingContext = Depends(get_parking)):
    with ctx.lock:
        lot = ctx.lot
        occupied = lot.occupied_count
        return LotOut(
            rows=lot.rows,
            cols=lot.cols,
            capacity=lot.capacity,
            occupied=occupied,
            free=lot.capacity - occupied,
            rate_per_hour=ctx.engine.rate_per_hour,
            slots=[
                SlotOut(row=r, col=c, occupied=s.occupied,
                        vehicle_id=s.vehicle_id or None, entry_time=s.entry_time)
                for r, c, s in lot.iter_slots()
            ],
        )


@router.get("/lot/layout", response_class=PlainTextResponse, summary="Text layout of the lot")
def get_lot_layout(detailed: bool = False, ctx: ParkingContext = Depends(get_parking)):
    with ctx.lock:
        return render_lot_detailed(ctx.lot) if detailed else render_lot(ctx.lot)


@router.get("/queue", response_model=QueueOut, summary="Waiting queue, front to rear")
def get_queue(ctx: ParkingContext = Depends(get_parking)):
    with ctx.lock:
        return QueueOut(capacity=ctx.queue.capacity, size=len(ctx.queue),
                        vehicles=ctx.queue.peek_all())


@router.get("/queue/layout", response_class=PlainTextResponse, summary="Text listing of the queue")
def get_queue_layout(ctx: ParkingContext = Depends(get_parking)):
    with ctx.lock:
        return render_queue(ctx.queue)
