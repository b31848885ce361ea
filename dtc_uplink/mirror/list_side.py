"""Authoritative point list taking part in verb mirroring."""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, List, Mapping, Optional, Sequence

from ..adapters.capture import CaptureChannel, CaptureSample, MultipleCapture, SingleCapture
from ..core.context import SimulatorContext
from ..core.navpoints import N, NavpointSystem
from ..core.protocols import ConfigurationStore
from .fields import NAVPOINT_FIELDS, FieldAccessor
from .markers import Marker, MarkerKind, Verb
from .protocol import MirrorSide, VerbHandler

LOGGER = logging.getLogger(__name__)

ChangeListener = Callable[[str, Optional[int]], None]


class ListSide(MirrorSide, Generic[N]):
    """Ordered editor over one route's :class:`NavpointSystem`.

    Every structural change renumbers the points from ``starting_number``
    and saves through ``store`` before any verb about it is emitted.
    Views bind to the side through :meth:`add_listener`.
    """

    def __init__(
        self,
        system: NavpointSystem[N],
        store: ConfigurationStore,
        *,
        route_tag: str = "Primary",
        store_tag: Optional[str] = None,
        handler_tag: Optional[str] = None,
        starting_number: int = 1,
        kind: MarkerKind = MarkerKind.NAVPT,
        fields: Mapping[str, FieldAccessor] = NAVPOINT_FIELDS,
        context: Optional[SimulatorContext] = None,
        airframe: Optional[str] = None,
        max_capture_points: int = 0,
    ) -> None:
        super().__init__(handler_tag or f"list:{route_tag}")
        self._system = system
        self._store = store
        self.route_tag = route_tag
        self._store_tag = store_tag or route_tag
        self._starting_number = starting_number
        self._kind = kind
        self._fields = fields
        self._context = context
        self._airframe = airframe
        self._max_capture_points = max(0, max_capture_points)
        self._listeners: List[ChangeListener] = []
        self.selected_index: Optional[int] = None
        self.detail_index: Optional[int] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def system(self) -> NavpointSystem[N]:
        return self._system

    @property
    def points(self) -> List[N]:
        return self._system.points

    @property
    def starting_number(self) -> int:
        return self._starting_number

    def marker_for(self, index: int) -> Marker:
        point = self.points[index]
        return Marker(
            kind=self._kind,
            tag=self.route_tag,
            index=index + 1,
            lat=point.lat,
            lon=point.lon,
        )

    def add_listener(self, callback: ChangeListener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: ChangeListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ------------------------------------------------------------------
    # Local edits
    # ------------------------------------------------------------------
    def select(self, index: Optional[int]) -> None:
        if index is not None and not self._in_bounds(index):
            raise IndexError(f"No point at position {index}")
        self._set_selection(index)

    def open_detail(self, index: int) -> None:
        if not self._in_bounds(index):
            raise IndexError(f"No point at position {index}")
        self.detail_index = index
        self._set_selection(index)
        self._notify("opened", index)
        self.emit(Verb.OPENED, self.marker_for(index))

    def close_detail(self) -> None:
        if self.detail_index is not None:
            self.detail_index = None
            self._notify("detail_closed", None)

    def add(self, point: Optional[N] = None, index: Optional[int] = None) -> Optional[N]:
        """Insert ``point`` (a blank one by default) at ``index`` or the end."""

        position = len(self.points) if index is None else max(0, min(index, len(self.points)))
        added = self._system.insert(position, point)
        if added is None:
            return None
        self._shift_from(position, 1)
        self._commit()
        self._notify("added", position)
        self.emit(Verb.ADDED, self.marker_for(position))
        return added

    def delete(self, index: int) -> N:
        if not self._in_bounds(index):
            raise IndexError(f"No point at position {index}")
        marker = self.marker_for(index)
        removed = self._system.remove(index)
        self._forget(index)
        self._commit()
        self._notify("deleted", index)
        self.emit(Verb.DELETED, marker)
        return removed

    def move(self, source: int, destination: int) -> None:
        if not self._in_bounds(source):
            raise IndexError(f"No point at position {source}")
        selected = self.points[self.selected_index] if self.selected_index is not None else None
        moved = self.points[source]
        removed_marker = self.marker_for(source)
        self._system.move(source, destination)
        destination = self._position_of(moved)
        if selected is not None:
            self.selected_index = self._position_of(selected)
        if self.detail_index is not None:
            self.detail_index = None
            self._notify("detail_closed", None)
        self._commit()
        self._notify("moved", destination)
        self.emit(Verb.DELETED, removed_marker)
        self.emit(Verb.ADDED, self.marker_for(destination))
        # The mirrored Added selects the moved point on both sides.
        self._set_selection(self._position_of(selected) if selected is not None else None)

    def update_point(self, index: int, key: str, value: Any) -> bool:
        """Set field ``key`` of the point at ``index`` through the field table.

        Returns ``True`` if the stored value changed.

        Raises:
            KeyError: If ``key`` is not an editable field.
        """

        accessor = self._fields[key]
        if not self._in_bounds(index):
            raise IndexError(f"No point at position {index}")
        if not accessor.set(self.points[index], value):
            return False
        self._save()
        self._notify("changed", index)
        if accessor.moves_marker:
            self.emit(Verb.MOVED, self.marker_for(index))
        return True

    def renumber(self, starting_number: Optional[int] = None) -> None:
        if starting_number is not None:
            self._starting_number = starting_number
        self._commit()
        self._notify("renumbered", None)

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------
    def begin_capture(
        self, channel: CaptureChannel, *, replace_index: Optional[int] = None
    ) -> MultipleCapture:
        """Open a multi-point capture window writing from ``replace_index``.

        Without ``replace_index`` captured points are appended. The caller
        closes the returned session when the user is done; check
        ``is_open`` to learn whether the simulator was available.
        """

        cursor = len(self.points) if replace_index is None else replace_index
        applied = 0

        def apply(samples: Sequence[CaptureSample]) -> None:
            nonlocal cursor, applied
            remaining = 0
            if self._max_capture_points:
                remaining = self._max_capture_points - applied
                if remaining <= 0:
                    LOGGER.info("Capture cap of %d reached", self._max_capture_points)
                    return
            existing = len(self.points)
            start = min(cursor, existing)
            cursor = self._system.apply_capture(samples, start, max_points=remaining)
            if cursor == start:
                return
            applied += cursor - start
            self._commit()
            for position in range(start, cursor):
                self._notify("captured", position)
                verb = Verb.MOVED if position < existing else Verb.ADDED
                self.emit(verb, self.marker_for(position))

        session = MultipleCapture(channel, apply, context=self._context, airframe=self._airframe)
        session.open()
        return session

    def capture_single(self, channel: CaptureChannel, index: int) -> SingleCapture:
        """Open a one-shot capture that updates the point at ``index``."""

        if not self._in_bounds(index):
            raise IndexError(f"No point at position {index}")
        target = self.points[index]

        def apply(sample: CaptureSample) -> None:
            if not any(point is target for point in self.points):
                LOGGER.debug("Captured point was deleted; dropping sample")
                return
            target.apply_sample(sample)
            position = self._position_of(target)
            self._save()
            self._notify("captured", position)
            self.emit(Verb.MOVED, self.marker_for(position))

        session = SingleCapture(channel, apply, context=self._context, airframe=self._airframe)
        session.open()
        return session

    # ------------------------------------------------------------------
    # VerbHandler
    # ------------------------------------------------------------------
    def verb_selected(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        with self.guard.applying(Verb.SELECTED):
            if not self._owns(marker):
                self._set_selection(None)
            elif not self._in_bounds(marker.position):
                self._drop(Verb.SELECTED, marker)
            else:
                self._set_selection(marker.position)

    def verb_opened(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        if self.detail_index is None:
            self.verb_selected(sender, marker)
            return
        with self.guard.applying(Verb.OPENED):
            if not self._owns(marker) or not self._in_bounds(marker.position):
                self._drop(Verb.OPENED, marker)
                return
            self.detail_index = marker.position
            self._set_selection(marker.position)
            self._notify("opened", marker.position)

    def verb_moved(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        with self.guard.applying(Verb.MOVED):
            if not self._owns(marker) or not self._in_bounds(marker.position):
                self._drop(Verb.MOVED, marker)
                return
            point = self.points[marker.position]
            LOGGER.debug("Point %d moved to %s, %s", point.number, point.lat, point.lon)
            self._save()
            self._notify("changed", marker.position)

    def verb_added(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        with self.guard.applying(Verb.ADDED):
            if not self._owns(marker) or not self._in_bounds(marker.position):
                self._drop(Verb.ADDED, marker)
                return
            self._shift_from(marker.position, 1)
            self._commit()
            self._notify("added", marker.position)
        self._set_selection(marker.position, force=True)

    def verb_deleted(self, sender: Optional[VerbHandler], marker: Marker) -> None:
        with self.guard.applying(Verb.DELETED):
            # The point is already gone, so the old last index is still valid here.
            if not self._owns(marker) or not 0 <= marker.position <= len(self.points):
                self._drop(Verb.DELETED, marker)
                return
            self._forget(marker.position)
            self._commit()
            self._notify("deleted", marker.position)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _set_selection(self, index: Optional[int], *, force: bool = False) -> None:
        if index == self.selected_index and not force:
            return
        self.selected_index = index
        self._notify("selected", index)
        self._on_selection_changed()

    def _on_selection_changed(self) -> None:
        index = self.selected_index
        marker = self.marker_for(index) if index is not None else Marker.none()
        self.emit(Verb.SELECTED, marker)

    def _owns(self, marker: Marker) -> bool:
        return marker.kind is self._kind and marker.tag == self.route_tag

    def _in_bounds(self, index: int) -> bool:
        return 0 <= index < len(self.points)

    def _position_of(self, point: N) -> int:
        return next(i for i, candidate in enumerate(self.points) if candidate is point)

    def _shift_from(self, position: int, delta: int) -> None:
        if self.selected_index is not None and self.selected_index >= position:
            self.selected_index += delta
        if self.detail_index is not None and self.detail_index >= position:
            self.detail_index += delta

    def _forget(self, position: int) -> None:
        if self.selected_index == position:
            self.selected_index = None
            self._notify("selected", None)
        if self.detail_index == position:
            self.detail_index = None
            self._notify("detail_closed", None)
        self._shift_from(position + 1, -1)

    def _commit(self) -> None:
        self._system.renumber(self._starting_number)
        self._save()

    def _save(self) -> None:
        self._store.save(self._store_tag)

    def _drop(self, verb: Verb, marker: Marker) -> None:
        LOGGER.debug(
            "%s dropping stale %s %s (%d points)",
            self.handler_tag,
            verb.value,
            marker,
            len(self.points),
        )

    def _notify(self, event: str, index: Optional[int]) -> None:
        for callback in list(self._listeners):
            try:
                callback(event, index)
            except Exception:  # pragma: no cover
                LOGGER.exception("List listener failed")
