"""Geographic overlay taking part in verb mirroring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from ..core.navpoints import NavpointInfo, NavpointSystem
from .markers import Marker, MarkerKind, Verb
from .protocol import MirrorSide, VerbHandler

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class MapElement:
    """Visual element for one point; the position is display-only."""

    kind: MarkerKind
    tag: str
    index: int
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def marker(self) -> Marker:
        return Marker(kind=self.kind, tag=self.tag, index=self.index, lat=self.lat, lon=self.lon)

    def refresh(self, point: NavpointInfo) -> None:
        self.lat = point.lat
        self.lon = point.lon


class MapSide(MirrorSide):
    """Map window showing routes and points of interest.

    ``routes`` holds the same point lists the list editors own. The map
    only reads positions from them when refreshing its elements; edits
    made on the map write to the point objects and then emit a verb.
    """

    def __init__(
        self,
        routes: Mapping[str, NavpointSystem],
        *,
        handler_tag: str = "map",
        kind: MarkerKind = MarkerKind.NAVPT,
        pois: Iterable[Marker] = (),
    ) -> None:
        super().__init__(handler_tag)
        self._routes = routes
        self._kind = kind
        self._elements: Dict[str, List[MapElement]] = {}
        self._pois: List[Marker] = list(pois)
        self.selected: Optional[Marker] = None
        self.detail: Optional[Marker] = None
        self.reload()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def reload(self) -> None:
        """Rebuild every route's elements from the point lists."""

        self._elements = {
            tag: [
                MapElement(self._kind, tag, index + 1, point.lat, point.lon)
                for index, point in enumerate(system.points)
            ]
            for tag, system in self._routes.items()
        }

    def elements(self, tag: str) -> List[MapElement]:
        return list(self._elements.get(tag, ()))

    @property
    def pois(self) -> List[Marker]:
        return list(self._pois)

    # ------------------------------------------------------------------
    # Local edits
    # ------------------------------------------------------------------
    def click(self, marker: Optional[Marker]) -> None:
        """Select ``marker`` or, with ``None``, clear the selection."""

        if marker is not None and self._resolves(marker):
            marker = self._element(marker).marker
        elif marker is not None and marker not in self._pois:
            raise LookupError(f"Map has no marker {marker}")
        self._set_selection(marker)

    def open(self, marker: Marker) -> None:
        if not self._resolves(marker):
            raise LookupError(f"Map has no marker {marker}")
        self.detail = self._element(marker).marker
        self._set_selection(self.detail)
        self.emit(Verb.OPENED, self.detail)

    def close_detail(self) -> None:
        self.detail = None

    def drag(self, marker: Marker, lat: float, lon: float) -> None:
        if not self._resolves(marker):
            raise LookupError(f"Map has no marker {marker}")
        point = self._point(marker)
        point.lat = lat
        point.lon = lon
        element = self._element(marker)
        element.refresh(point)
        self.emit(Verb.MOVED, element.marker)

    def add_point(self, tag: str, index: int, lat: float, lon: float) -> Optional[Marker]:
        """Insert a point into route ``tag`` at 1-based ``index``."""

        system = self._routes[tag]
        position = max(0, min(index - 1, len(system.points)))
        point = system.insert(position)
        if point is None:
            return None
        point.lat = lat
        point.lon = lon
        self._insert_element(tag, position, point)
        marker = self._elements[tag][position].marker
        self.emit(Verb.ADDED, marker)
        return marker

    def delete(self, marker: Marker) -> None:
        if not self._resolves(marker):
            raise LookupError(f"Map has no marker {marker}")
        self._set_selection(None)
        self._routes[marker.tag].remove(marker.position)
        self._remove_element(marker)
        self.emit(Verb.DELETED, marker)

    # ------------------------------------------------------------------
    # VerbHandler
    # ------------------------------------------------------------------
    def verb_selected(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        with self.guard.applying(Verb.SELECTED):
            if not self._owns(marker):
                self._set_selection(None)
            elif not self._in_bounds(marker):
                self._drop(Verb.SELECTED, marker)
            else:
                self._set_selection(self._element(marker).marker)

    def verb_opened(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        if self.detail is None:
            self.verb_selected(sender, marker)
            return
        with self.guard.applying(Verb.OPENED):
            if not self._resolves(marker):
                self._drop(Verb.OPENED, marker)
                return
            self.detail = self._element(marker).marker
            self._set_selection(self.detail)

    def verb_moved(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        with self.guard.applying(Verb.MOVED):
            if not self._resolves(marker) or marker.position >= len(self._routes[marker.tag]):
                self._drop(Verb.MOVED, marker)
                return
            self._element(marker).refresh(self._point(marker))

    def verb_added(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        with self.guard.applying(Verb.ADDED):
            if not self._owns(marker):
                self._drop(Verb.ADDED, marker)
                return
            points = self._routes[marker.tag].points
            elements = self._elements[marker.tag]
            if not 0 <= marker.position < len(points) or marker.position > len(elements):
                self._drop(Verb.ADDED, marker)
                return
            self._insert_element(marker.tag, marker.position, points[marker.position])
        self._set_selection(self._element(marker).marker, force=True)

    def verb_deleted(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        with self.guard.applying(Verb.DELETED):
            if not self._resolves(marker):
                self._drop(Verb.DELETED, marker)
                return
            self._remove_element(marker)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _set_selection(self, marker: Optional[Marker], *, force: bool = False) -> None:
        if marker == self.selected and not force:
            return
        self.selected = marker
        self._on_selection_changed()

    def _on_selection_changed(self) -> None:
        self.emit(Verb.SELECTED, self.selected or Marker.none())

    def _owns(self, marker: Marker) -> bool:
        return marker.kind is self._kind and marker.tag in self._elements

    def _in_bounds(self, marker: Marker) -> bool:
        return 0 <= marker.position < len(self._elements[marker.tag])

    def _resolves(self, marker: Marker) -> bool:
        return self._owns(marker) and self._in_bounds(marker)

    def _element(self, marker: Marker) -> MapElement:
        return self._elements[marker.tag][marker.position]

    def _point(self, marker: Marker) -> NavpointInfo:
        return self._routes[marker.tag].points[marker.position]

    def _retag(self, tag: str) -> None:
        for index, element in enumerate(self._elements[tag]):
            element.index = index + 1

    def _insert_element(self, tag: str, position: int, point: NavpointInfo) -> None:
        elements = self._elements[tag]
        elements.insert(position, MapElement(self._kind, tag, position + 1, point.lat, point.lon))
        self._retag(tag)
        self.selected = self._shifted(self.selected, tag, position, 1)
        self.detail = self._shifted(self.detail, tag, position, 1)

    def _remove_element(self, marker: Marker) -> None:
        del self._elements[marker.tag][marker.position]
        self._retag(marker.tag)
        if self._same_point(self.selected, marker):
            self.selected = None
        if self._same_point(self.detail, marker):
            LOGGER.debug("Closing detail view of deleted point %s", marker)
            self.detail = None
        self.selected = self._shifted(self.selected, marker.tag, marker.position + 1, -1)
        self.detail = self._shifted(self.detail, marker.tag, marker.position + 1, -1)

    def _shifted(
        self, current: Optional[Marker], tag: str, position: int, delta: int
    ) -> Optional[Marker]:
        if current is None or current.tag != tag or current.kind is not self._kind:
            return current
        if current.position < position:
            return current
        return self._elements[tag][current.position + delta].marker

    @staticmethod
    def _same_point(current: Optional[Marker], marker: Marker) -> bool:
        return (
            current is not None
            and current.kind is marker.kind
            and current.tag == marker.tag
            and current.index == marker.index
        )

    def _drop(self, verb: Verb, marker: Marker) -> None:
        LOGGER.debug("%s dropping stale %s %s", self.handler_tag, verb.value, marker)
