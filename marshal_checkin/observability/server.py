"""
HTTP server runner for marshal check-in observability.

This module provides a simple way to run the FastAPI server
for health checks and metrics exposure.
"""

from typing import Optional
import uvicorn
from marshal_checkin.observability.health import create_app
from marshal_checkin.settings import Settings
from marshal_checkin.adapters.storage.sqlite_store import SQLiteEventStore
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.observability")

def build_server(settings: Settings, store: Optional[SQLiteEventStore] = None,
                 host: str = "0.0.0.0", port: Optional[int] = None) -> uvicorn.Server:
    """
    Build the uvicorn server for the observability app.

    Args:
        settings: application settings
        store: event store used by the readiness check
        host: bind address
        port: bind port (defaults to the configured one)

    Returns:
        Configured server, not yet started
    """
    if port is None:
        port = settings.observability.http_port

    app = create_app(settings, store)
    log.info(f"HTTP server configured host:{host} port:{port}")

    return uvicorn.Server(uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=settings.observability.log_level.lower(),
        access_log=True
    ))
