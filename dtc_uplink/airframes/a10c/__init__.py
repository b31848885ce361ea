"""A-10C Warthog support."""

from .agent import A10CUploadAgent
from .builders import WYPTBuilder, waypoint_name
from .commands import AIRFRAME, DEFAULT_BASE_DELAY_MS, build_registry
from .models import A10CConfiguration, WaypointInfo, configuration_from_dict, waypoint_system

__all__ = [
    "AIRFRAME",
    "A10CConfiguration",
    "A10CUploadAgent",
    "DEFAULT_BASE_DELAY_MS",
    "WYPTBuilder",
    "WaypointInfo",
    "build_registry",
    "configuration_from_dict",
    "waypoint_name",
    "waypoint_system",
]
