# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, all routers,
and the geofence monitor's startup/shutdown.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import geofence, map_settings, fleet, volunteers, notifications, health
from app.database import create_tables, SessionLocal
from app.config import settings
from app.services.boundary_store import ensure_default_settings
from app.services.geofence_monitor import geofence_monitor
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Relief Ops Geofence API",
    description="Tracks response vehicles and volunteers against the operational boundary.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (dashboard runs on a different origin) ──────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
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


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(geofence.router,      prefix="/api/v1", tags=["🛰️ Geofence"])
app.include_router(map_settings.router,  prefix="/api/v1", tags=["🗺️ Map Settings"])
app.include_router(fleet.router,         prefix="/api/v1", tags=["🚑 Fleet"])
app.include_router(volunteers.router,    prefix="/api/v1", tags=["🙋 Volunteers"])
app.include_router(notifications.router, prefix="/api/v1", tags=["🔔 Notifications"])
app.include_router(health.router,        prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Relief Ops Geofence Backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")

    db = SessionLocal()
    try:
        ensure_default_settings(db)
    finally:
        db.close()

    if settings.GEOFENCE_ENABLED:
        await geofence_monitor.start()
    else:
        logger.info("⏸️  Geofence monitoring disabled (GEOFENCE_ENABLED=false)")

    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Relief Ops Geofence Backend shutting down...")
    await geofence_monitor.stop()
