"""Core primitives for dtc-uplink."""

from .agent import UploadAgent
from .builder import (
    BuilderBase,
    DelayCategory,
    DelayProfile,
    SetupBuilder,
    TeardownBuilder,
    UploadFeedback,
    WaitLength,
)
from .context import SimulatorContext
from .navpoints import NavpointInfo, NavpointSystem
from .protocols import CallbackType, ConfigurationStore, ScriptSender
from .registry import (
    Command,
    CommandRegistry,
    ConfigurationIntegrityError,
    Device,
    ResolvedCommand,
)
from .script import CommandInvocation, CommandScript, InvocationKind, ScriptValidationError

__all__ = [
    "BuilderBase",
    "CallbackType",
    "Command",
    "CommandInvocation",
    "CommandRegistry",
    "CommandScript",
    "ConfigurationIntegrityError",
    "ConfigurationStore",
    "DelayCategory",
    "DelayProfile",
    "Device",
    "InvocationKind",
    "NavpointInfo",
    "NavpointSystem",
    "ResolvedCommand",
    "ScriptSender",
    "ScriptValidationError",
    "SetupBuilder",
    "SimulatorContext",
    "TeardownBuilder",
    "UploadAgent",
    "UploadFeedback",
    "WaitLength",
]
