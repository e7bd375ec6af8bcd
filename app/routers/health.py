# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + lot occupancy.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.dependencies import get_parking
from app.services.parking_context import ParkingContext
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), ctx: ParkingContext = Depends(get_parking)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Occupied slots and queue length
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "lot": {"occupied": ctx.lot.occupied_count, "capacity": ctx.lot.capacity},
        "queue": {"size": len(ctx.queue), "capacity": ctx.queue.capacity},
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
