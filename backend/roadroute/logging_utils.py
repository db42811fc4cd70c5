from __future__ import annotations

import logging
from pathlib import Path
from tempfile import gettempdir
from typing import Any

from pythonjsonlogger import jsonlogger

from .settings import settings

LOGGER_NAME = "roadroute"
LOG_FILE_NAME = "routes.log.jsonl"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _is_writable_dir(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
        marker = path / ".writetest"
        marker.touch(exist_ok=True)
        marker.unlink(missing_ok=True)
    except OSError:
        return False
    return True


def _resolve_log_dir(configured_out_dir: str) -> Path | None:
    """First writable log directory: the configured output dir, ./out, then the temp dir."""
    for root in (Path(configured_out_dir), Path.cwd() / "out", Path(gettempdir()) / LOGGER_NAME):
        log_dir = root / "logs"
        if _is_writable_dir(log_dir):
            return log_dir
    return None


def _route_log_handlers(formatter: logging.Formatter) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_dir = _resolve_log_dir(settings.out_dir)
    if log_dir is not None:
        try:
            handlers.append(logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8"))
        except OSError:
            pass
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if getattr(logger, "_configured", False):
        return logger

    logger.setLevel(_parse_level(settings.log_level))
    logger.propagate = False
    for handler in _route_log_handlers(jsonlogger.JsonFormatter(LOG_FORMAT)):
        logger.addHandler(handler)

    logger._configured = True  # type: ignore[attr-defined]
    return logger


LOGGER: logging.Logger | None = None


def log_event(event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Emit one JSON record whose message and ``event`` key are both ``event``."""
    global LOGGER
    if LOGGER is None:
        LOGGER = get_logger()
    LOGGER.log(level, event, extra={"event": event, **fields})
