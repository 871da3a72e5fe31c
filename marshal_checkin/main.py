# marshal_checkin/main.py
import os, asyncio, signal, contextlib
from typing import Optional
from marshal_checkin.settings import Settings
from marshal_checkin.adapters.storage.sqlite_store import SQLiteEventStore
from marshal_checkin.observability.server import build_server
from marshal_checkin.observability.logging_setup import setup_logging, get_logger

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings()

    # check-in
    s.check_in.radius_m = float(os.getenv("CHECKIN_RADIUS_M", s.check_in.radius_m))
    s.check_in.allow_manual = _b("CHECKIN_ALLOW_MANUAL", s.check_in.allow_manual)

    # storage / import
    s.storage.db_path = os.getenv("DB_PATH", s.storage.db_path)
    s.importer.max_rows = int(os.getenv("IMPORT_MAX_ROWS", s.importer.max_rows))
    s.importer.default_encoding = os.getenv("IMPORT_ENCODING", s.importer.default_encoding)

    # areas / layers
    s.areas.default_area_name = os.getenv("DEFAULT_AREA_NAME", s.areas.default_area_name)
    s.layers.proximity_m = float(os.getenv("LAYER_PROXIMITY_M", s.layers.proximity_m))

    # observability
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level).upper()
    s.observability.log_json = _b("LOG_JSON", s.observability.log_json)
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("METRICS_PORT", s.observability.http_port))

    return s

async def start_http(settings: Settings, store: SQLiteEventStore) -> Optional[asyncio.Task]:
    if not settings.observability.metrics_enabled: return None
    return asyncio.create_task(build_server(settings, store).serve())

async def stop_http(task: Optional[asyncio.Task]) -> None:
    """Cancel the HTTP task and collect its result; a failure inside serve() propagates."""
    if task is None: return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task

async def main():
    s = build_settings()
    setup_logging(s.observability.log_level, json_output=s.observability.log_json)
    log = get_logger("checkin.main")
    log.info("Settings loaded")

    store = SQLiteEventStore(s.storage.db_path); await store.init()
    log.info(f"Event store ready at {s.storage.db_path}")

    http_task = await start_http(s, store)
    if http_task:
        log.info("HTTP server started")

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    await stop
    log.info("Shutting down")
    await stop_http(http_task)

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
