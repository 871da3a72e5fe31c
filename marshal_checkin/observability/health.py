"""
HTTP endpoints for marshal check-in observability.

This module implements health, readiness, metrics, and info endpoints
for monitoring and operational visibility.
"""

from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response, JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import time
import aiosqlite
from marshal_checkin.settings import Settings
from marshal_checkin.adapters.storage.sqlite_store import SQLiteEventStore
from marshal_checkin.observability import metrics as checkin_metrics
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.http")

def create_app(settings: Settings, store: Optional[SQLiteEventStore] = None) -> FastAPI:
    """
    Create the observability application.

    Args:
        settings: application settings
        store: event store probed by the readiness check

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Marshal Check-in Service"
    )

    start_time = time.time()

    @app.get("/health")
    async def health():
        """Liveness check"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """Readiness check; the event store must answer a query"""
        if store is not None:
            try:
                await store.count("areas", "")
            except aiosqlite.Error as e:
                log.error(f"Readiness check failed: {e}")
                return JSONResponse(status_code=503, content={
                    "status": "unavailable",
                    "service": settings.observability.service_name,
                    "timestamp": time.time()
                })

        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        checkin_metrics.uptime_seconds.set(time.time() - start_time)
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "check_in_radius_m": settings.check_in.radius_m
        })

    @app.get("/")
    async def root():
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info"
            }
        })

    return app
