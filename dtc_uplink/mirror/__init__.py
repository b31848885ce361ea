"""Keeps the point list editor and the map overlay in step."""

from .fields import NAVPOINT_FIELDS, STEERPOINT_FIELDS, FieldAccessor
from .list_side import ListSide
from .map_side import MapElement, MapSide
from .markers import Marker, MarkerKind, Verb
from .protocol import (
    MirrorGuard,
    MirrorSide,
    SideState,
    VerbHandler,
    VerbHub,
    VerbMirror,
    connect,
    disconnect,
)

__all__ = [
    "NAVPOINT_FIELDS",
    "STEERPOINT_FIELDS",
    "FieldAccessor",
    "ListSide",
    "MapElement",
    "MapSide",
    "Marker",
    "MarkerKind",
    "Verb",
    "MirrorGuard",
    "MirrorSide",
    "SideState",
    "VerbHandler",
    "VerbHub",
    "VerbMirror",
    "connect",
    "disconnect",
]
