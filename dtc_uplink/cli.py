"""Command-line interface for dtc-uplink."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Tuple

from . import constants
from .airframes import AIRFRAMES, build_agent, get_airframe
from .app import UplinkApp
from .config import UplinkConfig, load_config
from .core import ConfigurationIntegrityError, DelayProfile, ScriptValidationError
from .logging import configure_logging

LOGGER = logging.getLogger(__name__)

DEFAULT_AIRFRAME = "f16c"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_SENT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dtc-uplink", description="Load avionics configuration into DCS"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("start", help="Start the dtc-uplink service")

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    compile_parser = subparsers.add_parser(
        "compile", help="Compile an avionics file and print the wire string"
    )
    _add_file_arguments(compile_parser)

    upload_parser = subparsers.add_parser(
        "upload", help="Compile an avionics file and send it to the simulator"
    )
    _add_file_arguments(upload_parser)
    upload_parser.add_argument(
        "--force",
        action="store_true",
        help="Send without waiting for simulator telemetry",
    )

    return parser


def _add_file_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", type=Path, help="JSON avionics configuration")
    parser.add_argument(
        "--airframe",
        choices=sorted(AIRFRAMES),
        default=None,
        help="Airframe to compile for (default: the file's 'airframe' key, else f16c)",
    )


def load_avionics(path: Path, airframe: Optional[str] = None) -> Tuple[str, Any]:
    """Read a JSON avionics file and decode it for its airframe."""

    with path.open("r", encoding="utf-8") as stream:
        data = json.load(stream)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not hold a JSON object")
    support = get_airframe(airframe or str(data.get("airframe", DEFAULT_AIRFRAME)))
    return support.key, support.configuration_from_dict(data)


def _compile(config: UplinkConfig, path: Path, airframe: Optional[str]) -> str:
    key, configuration = load_avionics(path, airframe)
    delays = DelayProfile(
        base_ms=config.upload.base_delay(key), scale=config.upload.delay_scale
    )
    agent = build_agent(key, delays, feedback=config.upload.feedback)
    return agent.compile(configuration).serialize()


async def _upload(config: UplinkConfig, path: Path, airframe: Optional[str], force: bool) -> bool:
    key, configuration = load_avionics(path, airframe)
    app = UplinkApp(config)
    if force:
        return await app.upload(configuration, airframe=key, force=True)

    try:
        app.telemetry.start()
    except OSError as exc:
        LOGGER.error("Unable to listen for simulator telemetry: %s", exc)
        return False
    try:
        timeout = config.simulator.availability_timeout_seconds
        if not await app.wait_for_simulator(key, timeout):
            LOGGER.warning("Simulator is not flying the %s within %.0fs", key, timeout)
            return False
        return await app.upload(configuration, airframe=key)
    finally:
        await app.telemetry.stop()


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    if args.command == "start":
        UplinkApp.start(config)
        return EXIT_OK

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return EXIT_OK

    if args.command in ("compile", "upload"):
        configure_logging(config.logging.level, log_network=config.logging.log_network)
        try:
            if args.command == "compile":
                print(_compile(config, args.file, args.airframe))
                return EXIT_OK
            sent = asyncio.run(_upload(config, args.file, args.airframe, args.force))
        except (ConfigurationIntegrityError, ScriptValidationError) as exc:
            LOGGER.error("Compilation failed: %s", exc)
            return EXIT_ERROR
        except (OSError, ValueError, KeyError, TypeError) as exc:
            LOGGER.error("Unable to read %s: %s", args.file, exc)
            return EXIT_ERROR
        return EXIT_OK if sent else EXIT_NOT_SENT

    LOGGER.error("Unknown command: %s", args.command)
    return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
