"""A-10C configuration objects consumed by the builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from ...core.navpoints import NavpointInfo, NavpointSystem

MAX_WAYPOINTS = 50


@dataclass(slots=True)
class WaypointInfo(NavpointInfo):
    pass


def waypoint_system(points: Optional[List[WaypointInfo]] = None) -> NavpointSystem[WaypointInfo]:
    return NavpointSystem(
        factory=WaypointInfo, points=list(points or []), max_count=MAX_WAYPOINTS
    )


@dataclass
class A10CConfiguration:
    name: str = ""
    wypt: NavpointSystem[WaypointInfo] = field(default_factory=waypoint_system)


def configuration_from_dict(data: Mapping[str, Any]) -> A10CConfiguration:
    """Decode the plain-JSON form used by the command line."""

    points = [
        WaypointInfo(
            number=int(item.get("number", index + 1)),
            name=str(item.get("name", "")),
            lat=None if item.get("lat") is None else float(item["lat"]),
            lon=None if item.get("lon") is None else float(item["lon"]),
            alt=None if item.get("alt") is None else int(item["alt"]),
        )
        for index, item in enumerate(data.get("wypt", []))
    ]
    return A10CConfiguration(name=str(data.get("name", "")), wypt=waypoint_system(points))
