"""F-16C Viper support."""

from .agent import F16CUploadAgent
from .builders import CMDSBuilder, F16CTeardownBuilder, RadioBuilder, STPTBuilder
from .commands import AIRFRAME, DEFAULT_BASE_DELAY_MS, build_registry
from .models import (
    CMDSProgram,
    CMDSSystem,
    F16CConfiguration,
    RadioPreset,
    RadioSettings,
    RadioSystem,
    SteerpointInfo,
    configuration_from_dict,
    steerpoint_system,
)

__all__ = [
    "AIRFRAME",
    "CMDSBuilder",
    "CMDSProgram",
    "CMDSSystem",
    "DEFAULT_BASE_DELAY_MS",
    "F16CConfiguration",
    "F16CTeardownBuilder",
    "F16CUploadAgent",
    "RadioBuilder",
    "RadioPreset",
    "RadioSettings",
    "RadioSystem",
    "STPTBuilder",
    "SteerpointInfo",
    "build_registry",
    "configuration_from_dict",
    "steerpoint_system",
]
