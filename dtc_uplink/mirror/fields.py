"""Named point properties editable from the list."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from ..core.navpoints import NavpointInfo


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(round(float(value)))


@dataclass(frozen=True, slots=True)
class FieldAccessor:
    """Reads and writes one property of a navigation point.

    ``moves_marker`` marks coordinate fields whose edits change where the
    point is drawn.
    """

    name: str
    convert: Callable[[Any], Any]
    moves_marker: bool = False

    def get(self, point: NavpointInfo) -> Any:
        return getattr(point, self.name)

    def set(self, point: NavpointInfo, value: Any) -> bool:
        """Store ``value`` and return ``True`` if the stored value changed."""

        converted = self.convert(value)
        if getattr(point, self.name) == converted:
            return False
        setattr(point, self.name, converted)
        return True


NAVPOINT_FIELDS: Mapping[str, FieldAccessor] = MappingProxyType(
    {
        "name": FieldAccessor("name", str),
        "lat": FieldAccessor("lat", _optional_float, moves_marker=True),
        "lon": FieldAccessor("lon", _optional_float, moves_marker=True),
        "alt": FieldAccessor("alt", _optional_int),
    }
)

STEERPOINT_FIELDS: Mapping[str, FieldAccessor] = MappingProxyType(
    {**NAVPOINT_FIELDS, "tos": FieldAccessor("tos", str)}
)
