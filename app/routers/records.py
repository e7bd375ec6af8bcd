# app/routers/records.py
"""Completed-visit log: recent entries and totals."""

from fastapi import APIRouter, Depends, Query
from app.dependencies import get_parking
from app.schemas.visit_log import VisitLogOut, VisitTotalsOut
from app.services.parking_context import ParkingContext

router = APIRouter()


@router.get("/records", response_model=list[VisitLogOut], summary="Most recent completed visits")
def get_recent_records(limit: int = Query(10, ge=1, le=1000),
                       ctx: ParkingContext = Depends(get_parking)):
    """Oldest first, like tailing the records file."""
    with ctx.lock:
        return ctx.visit_log.recent(limit)


@router.get("/records/summary", response_model=VisitTotalsOut, summary="Visit count and revenue")
def get_records_summary(ctx: ParkingContext = Depends(get_parking)):
    with ctx.lock:
        return ctx.visit_log.totals()
