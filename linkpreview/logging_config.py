"""JSON structured logging configuration."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

# Third-party loggers that are too chatty at INFO for a per-request service
_NOISY_LOGGERS = ("httpx", "httpcore", "charset_normalizer")


def _json_handler() -> logging.Handler:
    formatter = JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level: str = "INFO", access_log: bool = True) -> None:
    """Send root and uvicorn logs to stdout as one JSON object per line.

    With *access_log* off, uvicorn's per-request access lines are dropped;
    preview requests already log their target URL.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    handler = _json_handler()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # uvicorn configures its loggers before the app starts; route them into root
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = True
    logging.getLogger("uvicorn.access").disabled = not access_log

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
