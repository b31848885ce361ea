"""Markers and verbs exchanged between the point list and the map."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Optional


class MarkerKind(IntEnum):
    UNKNOWN = 0
    POI_CORE = 1
    POI_USER = 2
    POI_CAMPAIGN = 3
    NAVPT = 16

    @property
    def is_route(self) -> bool:
        return self is MarkerKind.NAVPT


class Verb(str, Enum):
    SELECTED = "selected"
    OPENED = "opened"
    MOVED = "moved"
    ADDED = "added"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class Marker:
    """Correlation key for one point; ``index`` is 1-based, 0 means none."""

    kind: MarkerKind = MarkerKind.UNKNOWN
    tag: Optional[str] = None
    index: int = 0
    lat: Optional[float] = None
    lon: Optional[float] = None

    @classmethod
    def none(cls) -> "Marker":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.kind is MarkerKind.UNKNOWN or self.tag is None or self.index < 1

    @property
    def position(self) -> int:
        """0-based position within the marker's route."""
        return self.index - 1

    def with_coordinate(self, lat: Optional[float], lon: Optional[float]) -> "Marker":
        return replace(self, lat=lat, lon=lon)

    def __str__(self) -> str:
        return f"{self.kind.name}:{self.tag}#{self.index}"
