"""JSON structured logging configuration."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "grabnwatch-service"

# Loggers that get our handler instead of their own defaults
_REROUTED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def setup_logging(log_level: str = "INFO") -> None:
    """Send root, uvicorn and playwright logs to stdout as JSON lines."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
        static_fields={"service": SERVICE_NAME},
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _REROUTED_LOGGERS:
        rerouted = logging.getLogger(name)
        rerouted.handlers.clear()
        rerouted.addHandler(handler)
        rerouted.propagate = False

    # Playwright's driver chatter is only useful when debugging the browser
    logging.getLogger("playwright").setLevel(
        logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    )
