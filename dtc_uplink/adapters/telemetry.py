"""Simulator heartbeat monitor keeping :class:`SimulatorContext` current."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..core.context import SimulatorContext
from ..core.protocols import CallbackType, UploadRequestCallback
from .udp import UdpListener

LOGGER = logging.getLogger(__name__)

# Simulator model names mapped to the airframe keys used by this package.
AIRFRAME_MODELS: Dict[str, str] = {
    "F16CM": "f16c",
    "A10C": "a10c",
    "A10C_2": "a10c",
}


@dataclass(frozen=True, slots=True)
class TelemetryFrame:
    model: Optional[str] = None
    marker: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    elevation: Optional[str] = None
    upload: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: str | bytes) -> Optional["TelemetryFrame"]:
        try:
            data = json.loads(payload)
        except (TypeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None

        def text(key: str) -> Optional[str]:
            value = data.get(key)
            return None if value is None else str(value)

        return cls(
            model=text("Model"),
            marker=text("Marker"),
            latitude=text("Latitude"),
            longitude=text("Longitude"),
            elevation=text("Elevation"),
            upload=text("Upload"),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TelemetryMonitor:
    """Track simulator reachability, the active airframe and upload progress."""

    def __init__(
        self,
        context: SimulatorContext,
        host: str,
        port: int,
        *,
        availability_timeout: float = 10.0,
    ) -> None:
        self._context = context
        self._availability_timeout = availability_timeout
        self._udp = UdpListener(host, port, self._on_datagram, name="telemetry-monitor")
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._watchdog_task: Optional[asyncio.Task[None]] = None
        self._listeners: list[CallbackType] = []
        self._upload_callbacks: list[UploadRequestCallback] = []
        self._upload_pressed = False
        self.frames = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def context(self) -> SimulatorContext:
        return self._context

    @property
    def bound_port(self) -> Optional[int]:
        return self._udp.bound_port

    @property
    def is_running(self) -> bool:
        return self._udp.is_running

    def add_listener(self, callback: CallbackType) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: CallbackType) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(callback)

    def add_upload_callback(self, callback: UploadRequestCallback) -> None:
        self._upload_callbacks.append(callback)

    def remove_upload_callback(self, callback: UploadRequestCallback) -> None:
        with contextlib.suppress(ValueError):
            self._upload_callbacks.remove(callback)

    def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._udp.start()
        if self._watchdog_task is None:
            self._watchdog_task = self._loop.create_task(self._watchdog())

    async def stop(self) -> None:
        self._udp.stop()
        if self._watchdog_task is not None:
            self._watchdog_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._watchdog_task
            self._watchdog_task = None

    async def process(self, payload: str | bytes, *, now: Optional[float] = None) -> None:
        frame = TelemetryFrame.from_payload(payload)
        if frame is None:
            LOGGER.debug("Dropping malformed telemetry payload")
            return

        upload_requested = self.apply(frame, now=now)

        snapshot = frame.as_dict()
        for callback in list(self._listeners):
            try:
                result = callback(snapshot)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:  # pragma: no cover
                LOGGER.exception("Telemetry listener failed")

        if upload_requested:
            LOGGER.info("Upload requested from the cockpit")
            for callback in list(self._upload_callbacks):
                try:
                    result = callback()
                    if asyncio.iscoroutine(result):
                        await result
                except Exception:  # pragma: no cover
                    LOGGER.exception("Upload request callback failed")

    def apply(self, frame: TelemetryFrame, *, now: Optional[float] = None) -> bool:
        """Fold one frame into the context; returns ``True`` on an upload press."""

        context = self._context
        was_reachable = context.is_reachable
        context.mark_seen(time.monotonic() if now is None else now)
        self.frames += 1

        airframe = AIRFRAME_MODELS.get(frame.model or "")
        if airframe != context.active_airframe:
            LOGGER.info("Active airframe %s -> %s", context.active_airframe, airframe)
            context.active_airframe = airframe
        if not was_reachable:
            LOGGER.info("Simulator is reachable (model %s)", frame.model)

        marker = frame.marker or ""
        context.last_marker = marker
        if marker and not context.upload_in_flight:
            context.upload_in_flight = True
            LOGGER.info("Upload started, marker %r", marker)
        elif not marker and context.upload_in_flight:
            context.upload_in_flight = False
            LOGGER.info("Upload finished")

        pressed = frame.upload == "1"
        requested = pressed and not self._upload_pressed and not context.upload_in_flight
        self._upload_pressed = pressed
        return requested

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _on_datagram(self, text: str) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        asyncio.run_coroutine_threadsafe(self.process(text), loop)

    async def _watchdog(self) -> None:
        interval = max(0.5, self._availability_timeout / 2)
        while True:
            await asyncio.sleep(interval)
            if self._context.expire(self._availability_timeout):
                LOGGER.info(
                    "No simulator telemetry for %.0fs; marking unreachable",
                    self._availability_timeout,
                )
