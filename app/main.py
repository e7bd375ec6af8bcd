# app/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers for the parking error taxonomy,
and all routers. The lot/queue context is built on startup and saved on shutdown.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import health, lot, records, state, vehicles
from app.config import settings
from app.services.exceptions import (
    AlreadyParked, AlreadyQueued, ConfigurationError, InvalidVehicleId,
    ParkingError, PersistenceFailure, QueueFull, VehicleNotFound,
)
from app.services.parking_context import build_context
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Parking Lot Allocation API",
    description="Slot allocation, waiting queue and hourly billing for a 4x5 lot.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow an operator dashboard on the same LAN to call the API) ──────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Parking Error Handlers ───────────────────────────────────────────────────
ERROR_STATUS = {
    VehicleNotFound: status.HTTP_404_NOT_FOUND,
    AlreadyParked: status.HTTP_409_CONFLICT,
    AlreadyQueued: status.HTTP_409_CONFLICT,
    QueueFull: status.HTTP_409_CONFLICT,
    InvalidVehicleId: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PersistenceFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: ParkingError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[error_type]
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(ParkingError)
async def parking_error_handler(request: Request, exc: ParkingError):
    code = status_for(exc)
    log = logger.error if code >= 500 else logger.info
    log(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=code, content={"detail": str(exc), "error": type(exc).__name__})


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(vehicles.router, prefix="/api/v1", tags=["🚗 Vehicles"])
app.include_router(lot.router,      prefix="/api/v1", tags=["🅿️  Lot & Queue"])
app.include_router(records.router,  prefix="/api/v1", tags=["🧾 Records"])
app.include_router(state.router,    prefix="/api/v1", tags=["💾 State"])
app.include_router(health.router,   prefix="/api/v1", tags=["💚 Health"])


# ── Startup / Shutdown ────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Parking backend starting up...")
    ctx = build_context()
    ctx.startup(load_state=settings.LOAD_STATE_ON_STARTUP)
    app.state.parking = ctx
    logger.info(f"🅿️  Lot {ctx.lot.occupied_count}/{ctx.lot.capacity} occupied, {len(ctx.queue)} queued")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Parking backend shutting down...")
    ctx = getattr(app.state, "parking", None)
    if ctx is not None:
        with ctx.lock:
            if ctx.shutdown(save_state=settings.SAVE_STATE_ON_SHUTDOWN):
                logger.info(f"💾 State saved to {ctx.store.path}")
