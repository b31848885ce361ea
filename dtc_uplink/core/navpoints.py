"""Navigation point lists shared by the airframes and the list editor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Generic, List, Optional, Sequence, TypeVar

if TYPE_CHECKING:
    from ..adapters.capture import CaptureSample

LOGGER = logging.getLogger(__name__)

CAPTURE_NAME_FORMAT = "WP{position} DCS Capture"


@dataclass(slots=True)
class NavpointInfo:
    number: int = 1
    name: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    alt: Optional[int] = None

    @property
    def is_valid(self) -> bool:
        if self.lat is None or self.lon is None:
            return False
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lon <= 180.0

    @property
    def has_coordinate(self) -> bool:
        return self.lat is not None and self.lon is not None

    def apply_sample(self, sample: "CaptureSample") -> None:
        self.lat = sample.latitude
        self.lon = sample.longitude
        self.alt = int(round(sample.elevation))


N = TypeVar("N", bound=NavpointInfo)


@dataclass
class NavpointSystem(Generic[N]):
    """Ordered navigation points for one route.

    ``factory`` creates blank points of the airframe's concrete type.
    ``max_count`` bounds the list where the avionics bound it; ``0`` means
    unbounded.
    """

    factory: Callable[[], N]
    points: List[N] = field(default_factory=list)
    max_count: int = 0

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_default(self) -> bool:
        return not self.points

    @property
    def is_full(self) -> bool:
        return self.max_count > 0 and len(self.points) >= self.max_count

    def next_number(self) -> int:
        return max((point.number for point in self.points), default=0) + 1

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def add(self, point: Optional[N] = None) -> Optional[N]:
        return self.insert(len(self.points), point)

    def insert(self, index: int, point: Optional[N] = None) -> Optional[N]:
        if self.is_full:
            LOGGER.info("Navpoint list full (%d); not adding", self.max_count)
            return None
        if point is None:
            point = self.factory()
            point.number = self.next_number()
        index = max(0, min(index, len(self.points)))
        self.points.insert(index, point)
        return point

    def remove(self, index: int) -> N:
        return self.points.pop(index)

    def move(self, source: int, destination: int) -> None:
        point = self.points.pop(source)
        destination = max(0, min(destination, len(self.points)))
        self.points.insert(destination, point)

    def renumber(self, start: int) -> None:
        for offset, point in enumerate(self.points):
            point.number = start + offset

    def clear(self) -> None:
        self.points.clear()

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------
    def apply_capture(
        self,
        samples: Sequence["CaptureSample"],
        start_index: int,
        *,
        max_points: int = 0,
    ) -> int:
        """Write non-target samples into the list starting at ``start_index``.

        Existing points at the insertion cursor are overwritten, anything
        past the end is appended. Names come from the sample's position in
        the delivered array. Returns the cursor after the last applied
        sample so repeated deliveries in one window continue in order.
        """

        index = min(max(0, start_index), len(self.points))
        applied = 0
        for position, sample in enumerate(samples):
            if sample.is_target:
                continue
            if max_points > 0 and applied >= max_points:
                LOGGER.info(
                    "Capture cap of %d reached; dropping %d sample(s)",
                    max_points,
                    len(samples) - position,
                )
                break
            if index < len(self.points):
                point = self.points[index]
            else:
                point = self.add()
                if point is None:
                    break
            point.name = CAPTURE_NAME_FORMAT.format(position=position + 1)
            point.apply_sample(sample)
            index += 1
            applied += 1
        return index
