"""Configuration loader for dtc-uplink."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants
from .core.builder import MAX_DELAY_SCALE, MIN_DELAY_SCALE, UploadFeedback


@dataclass(slots=True)
class SimulatorConfig:
    host: str = constants.DEFAULT_SIMULATOR_HOST
    command_port: int = constants.DEFAULT_COMMAND_PORT
    capture_port: int = constants.DEFAULT_CAPTURE_PORT
    telemetry_port: int = constants.DEFAULT_TELEMETRY_PORT
    connect_timeout_seconds: float = 2.0
    availability_timeout_seconds: float = 10.0


@dataclass(slots=True)
class UploadConfig:
    delay_scale: float = 1.0
    feedback: UploadFeedback = UploadFeedback.NONE
    delay_f16c: int = constants.DEFAULT_BASE_DELAY_MS
    delay_a10c: int = constants.DEFAULT_BASE_DELAY_MS

    def base_delay(self, airframe: str) -> int:
        return int(getattr(self, f"delay_{airframe}", constants.DEFAULT_BASE_DELAY_MS))


@dataclass(slots=True)
class NavpointConfig:
    starting_number: int = 1
    max_capture_points: int = 0  # 0 keeps captures unbounded


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = constants.DEFAULT_LOG_PATH
    log_network: bool = False


@dataclass(slots=True)
class HealthConfig:
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 0


@dataclass(slots=True)
class UplinkConfig:
    simulator: SimulatorConfig
    upload: UploadConfig
    navpoints: NavpointConfig
    logging: LoggingConfig
    health: HealthConfig
    raw: ConfigParser
    path: Path


def _parse_feedback(value: str) -> UploadFeedback:
    try:
        return UploadFeedback(value.strip().lower())
    except ValueError:
        return UploadFeedback.NONE


def load_config(path: Optional[Path] = None) -> UplinkConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "simulator": {
                "host": constants.DEFAULT_SIMULATOR_HOST,
                "command_port": str(constants.DEFAULT_COMMAND_PORT),
                "capture_port": str(constants.DEFAULT_CAPTURE_PORT),
                "telemetry_port": str(constants.DEFAULT_TELEMETRY_PORT),
                "connect_timeout_seconds": "2.0",
                "availability_timeout_seconds": "10.0",
            },
            "upload": {
                "delay_scale": "1.0",
                "feedback": UploadFeedback.NONE.value,
                "delay_f16c": str(constants.DEFAULT_BASE_DELAY_MS),
                "delay_a10c": str(constants.DEFAULT_BASE_DELAY_MS),
            },
            "navpoints": {
                "starting_number": "1",
                "max_capture_points": "0",
            },
            "logging": {
                "level": "INFO",
                "path": str(constants.DEFAULT_LOG_PATH),
                "log_network": "false",
            },
            "health": {
                "enabled": "false",
                "host": "127.0.0.1",
                "port": "0",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    simulator = SimulatorConfig(
        host=parser.get("simulator", "host"),
        command_port=parser.getint(
            "simulator", "command_port", fallback=constants.DEFAULT_COMMAND_PORT
        ),
        capture_port=parser.getint(
            "simulator", "capture_port", fallback=constants.DEFAULT_CAPTURE_PORT
        ),
        telemetry_port=parser.getint(
            "simulator", "telemetry_port", fallback=constants.DEFAULT_TELEMETRY_PORT
        ),
        connect_timeout_seconds=max(
            0.1,
            parser.getfloat("simulator", "connect_timeout_seconds", fallback=2.0),
        ),
        availability_timeout_seconds=max(
            1.0,
            parser.getfloat("simulator", "availability_timeout_seconds", fallback=10.0),
        ),
    )

    default_scale = UploadConfig().delay_scale
    try:
        delay_scale = parser.getfloat("upload", "delay_scale", fallback=default_scale)
    except ValueError:
        delay_scale = default_scale

    upload = UploadConfig(
        delay_scale=max(MIN_DELAY_SCALE, min(MAX_DELAY_SCALE, delay_scale)),
        feedback=_parse_feedback(parser.get("upload", "feedback", fallback="none")),
        delay_f16c=max(
            0,
            parser.getint(
                "upload", "delay_f16c", fallback=constants.DEFAULT_BASE_DELAY_MS
            ),
        ),
        delay_a10c=max(
            0,
            parser.getint(
                "upload", "delay_a10c", fallback=constants.DEFAULT_BASE_DELAY_MS
            ),
        ),
    )

    navpoints = NavpointConfig(
        starting_number=max(
            1, parser.getint("navpoints", "starting_number", fallback=1)
        ),
        max_capture_points=max(
            0, parser.getint("navpoints", "max_capture_points", fallback=0)
        ),
    )

    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(
            parser.get("logging", "path", fallback=str(constants.DEFAULT_LOG_PATH))
        ).expanduser(),
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    health = HealthConfig(
        enabled=parser.getboolean("health", "enabled", fallback=False),
        host=parser.get("health", "host", fallback="127.0.0.1"),
        port=parser.getint("health", "port", fallback=0),
    )

    return UplinkConfig(
        simulator=simulator,
        upload=upload,
        navpoints=navpoints,
        logging=logging_config,
        health=health,
        raw=parser,
        path=config_path,
    )


def save_config(config: UplinkConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
