"""A-10C waypoint builder driving the CDU."""

from __future__ import annotations

import logging
import re

from ...core.builder import BuilderBase, format_ddm, remove_separators
from ...core.script import ScriptValidationError
from .commands import CDU
from .models import A10CConfiguration, WaypointInfo

LOGGER = logging.getLogger(__name__)

MAX_NAME_LENGTH = 12


def waypoint_name(number: int, name: str) -> str:
    """CDU-safe waypoint name: letters first, ``A-Z0-9 `` only, 12 characters."""

    cleaned = re.sub(r"^[^A-Z]+", "", name.upper())
    cleaned = re.sub(r"[^A-Z0-9 ]", "", cleaned)
    if not cleaned:
        return f"WP{number}"
    return cleaned[:MAX_NAME_LENGTH]


def coordinate_text(value: float, *, is_latitude: bool) -> str:
    return remove_separators(format_ddm(value, is_latitude=is_latitude).replace(" ", ""))


class WYPTBuilder(BuilderBase):
    def build(self, configuration: A10CConfiguration) -> None:
        points = configuration.wypt.points
        if not points:
            return

        self.actions(CDU, ("WP", "LSK_3L"))
        self.wait()
        self.clear()
        self.wait()

        for point in points:
            if not point.is_valid:
                LOGGER.debug("Skipping waypoint %d without a position", point.number)
                continue
            self.build_waypoint(point)

    def clear(self) -> None:
        self.actions(CDU, ("CLR", "CLR"))

    def build_waypoint(self, point: WaypointInfo) -> None:
        if point.lat is None or point.lon is None:
            raise ScriptValidationError(f"Waypoint {point.number} has no position")

        self.action(CDU, "LSK_7R")
        self.wait()
        self.clear()

        self.alphanumerics(CDU, waypoint_name(point.number, point.name))
        self.action(CDU, "LSK_3R")
        self.wait()
        self.clear()

        self.alphanumerics(CDU, coordinate_text(point.lat, is_latitude=True))
        self.action(CDU, "LSK_7L")
        self.clear()

        self.alphanumerics(CDU, coordinate_text(point.lon, is_latitude=False))
        self.action(CDU, "LSK_9L")
        self.clear()

        self.digits(CDU, str(max(point.alt or 0, 0)))
        self.action(CDU, "LSK_5L")
        self.wait()
        self.clear()
