from __future__ import annotations
import logging
import sys
from loguru import logger

# ---- stdlib logging -> loguru ----
class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())

def _hook_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # noisy libraries keep their own level, only the handler is swapped
    for noisy in ("uvicorn", "uvicorn.access", "asyncio", "aiosqlite"):
        l = logging.getLogger(noisy)
        l.handlers = [InterceptHandler()]
        l.propagate = False

# ---- dev console format (human friendly, extra hidden) ----
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<cyan>{file}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure loguru as the single logging backend.

    Args:
        log_level: minimum level for the sink
        json_output: emit one JSON document per record instead of the
            coloured console format
    """
    logger.remove()
    logger.configure(extra={"name": "checkin"})
    if json_output:
        logger.add(
            sink=sys.stdout,
            serialize=True,
            backtrace=False,
            diagnose=False,
            level=log_level.upper(),
            enqueue=False,
        )
    else:
        logger.add(
            sink=lambda m: print(m, end=""),
            format=DEV_FORMAT,
            colorize=True,
            backtrace=True,
            diagnose=False,
            level=log_level.upper(),
            enqueue=False,
        )
    _hook_stdlib_logging()

def get_logger(name: str = "checkin", **ctx):
    """Return a logger bound to ``name`` and any extra context."""
    return logger.bind(name=name, **ctx)

def with_context(**ctx):
    """Context manager adding temporary context to every record."""
    return logger.contextualize(**ctx)
