# app/dependencies.py
"""FastAPI dependencies shared by the routers."""

from fastapi import HTTPException, Request
from app.services.parking_context import ParkingContext


def get_parking(request: Request) -> ParkingContext:
    """
    Returns the process-wide ParkingContext.
    Endpoints take ctx.lock inside their own body, on the worker thread that
    runs them; a waiting request never holds a worker the lock holder needs.
    """
    ctx: ParkingContext = getattr(request.app.state, "parking", None)
    if ctx is None:
        raise HTTPException(status_code=503, detail="Parking context not initialised")
    return ctx
