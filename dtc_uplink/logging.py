"""Logging configuration helpers."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 3

# Per-datagram and per-verb chatter; only shown at DEBUG with log_network set.
CHATTY_LOGGERS = (
    "aiohttp.access",
    "dtc_uplink.adapters.udp",
    "dtc_uplink.adapters.telemetry",
    "dtc_uplink.mirror.protocol",
)


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Install console (and optionally file) handlers on the root logger.

    Parameters
    ----------
    level:
        Log level name, e.g. "DEBUG".
    log_path:
        File receiving a rotating copy of the console output.
    log_network:
        Keep simulator datagram and verb traffic at the requested level
        instead of capping it at INFO.
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT
    )

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    floor = logging.NOTSET if log_network else logging.INFO
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(floor)
    if not log_network:
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
