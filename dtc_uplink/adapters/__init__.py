"""Adapter modules for the simulator's sockets."""

from .capture import (
    CaptureChannel,
    CaptureListener,
    CaptureSample,
    MultipleCapture,
    SingleCapture,
    decode_samples,
)
from .telemetry import AIRFRAME_MODELS, TelemetryFrame, TelemetryMonitor
from .transport import ScriptTransport
from .udp import UdpListener

__all__ = [
    "AIRFRAME_MODELS",
    "CaptureChannel",
    "CaptureListener",
    "CaptureSample",
    "MultipleCapture",
    "ScriptTransport",
    "SingleCapture",
    "TelemetryFrame",
    "TelemetryMonitor",
    "UdpListener",
    "decode_samples",
]
