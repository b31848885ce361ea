"""Constants used across the dtc-uplink package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "dtc-uplink"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / f".{APP_NAME}" / DEFAULT_CONFIG_FILENAME

DEFAULT_LOG_PATH = Path.home() / f".{APP_NAME}" / "logs" / f"{APP_NAME}.log"

DEFAULT_SIMULATOR_HOST = "127.0.0.1"
DEFAULT_COMMAND_PORT = 42001
DEFAULT_CAPTURE_PORT = 42002
DEFAULT_TELEMETRY_PORT = 42003

DEFAULT_BASE_DELAY_MS = 200
