"""Capture channel: waypoint samples pushed by the simulator on demand."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from ..core.context import SimulatorContext
from .udp import UdpListener

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CaptureSample:
    latitude: float
    longitude: float
    elevation: float
    is_target: bool = False


CaptureCallback = Callable[[Sequence[CaptureSample]], Awaitable[None] | None]


def _parse_number(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not a coordinate")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value {value!r}")
    return number


def _parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def decode_samples(payload: str | bytes) -> List[CaptureSample]:
    """Decode a capture payload, returning an empty list for anything malformed.

    The simulator sends a JSON array of objects with ``Latitude``,
    ``Longitude``, ``Elevation`` (decimal strings) and ``IsTarget``. A
    single malformed record invalidates the whole array, since consumers
    rely on positions within it.
    """

    try:
        data = json.loads(payload)
    except (TypeError, ValueError):
        LOGGER.debug("Dropping undecodable capture payload")
        return []

    if not isinstance(data, list):
        LOGGER.debug("Dropping capture payload of type %s", type(data).__name__)
        return []

    samples: List[CaptureSample] = []
    for record in data:
        if not isinstance(record, dict):
            LOGGER.debug("Dropping capture payload with non-object record")
            return []
        try:
            latitude = _parse_number(record["Latitude"])
            longitude = _parse_number(record["Longitude"])
            elevation = _parse_number(record.get("Elevation", 0.0))
        except (KeyError, TypeError, ValueError):
            LOGGER.debug("Dropping capture payload with malformed record: %s", record)
            return []
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            LOGGER.debug("Dropping capture payload with out-of-range coordinate")
            return []
        samples.append(
            CaptureSample(
                latitude=latitude,
                longitude=longitude,
                elevation=elevation,
                is_target=_parse_flag(record.get("IsTarget", False)),
            )
        )
    return samples


class CaptureChannel:
    """Process-wide broadcast point for capture events.

    Deliveries always run on the bound event loop, regardless of which
    thread received the datagram, so subscribers can mutate editor state
    directly.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._subscribers: list[CaptureCallback] = []

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    def subscribe(self, callback: CaptureCallback) -> None:
        if callback in self._subscribers:
            raise ValueError("Callback already subscribed")
        self._subscribers.append(callback)

    def unsubscribe(self, callback: CaptureCallback) -> None:
        with contextlib.suppress(ValueError):
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------
    def publish_threadsafe(self, payload: str | bytes) -> None:
        """Hand a raw payload from a background thread to the event loop."""

        loop = self._loop
        if loop is None or loop.is_closed():
            LOGGER.debug("Capture channel has no loop; dropping payload")
            return
        asyncio.run_coroutine_threadsafe(self.publish(payload), loop)

    async def publish(self, payload: str | bytes) -> None:
        samples = decode_samples(payload)
        if not samples:
            return
        await self.deliver(samples)

    async def deliver(self, samples: Sequence[CaptureSample]) -> None:
        for callback in list(self._subscribers):
            try:
                result = callback(samples)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:  # pragma: no cover
                LOGGER.exception("Capture subscriber failed")


class CaptureListener:
    """UDP receiver feeding the capture channel."""

    def __init__(self, channel: CaptureChannel, host: str, port: int) -> None:
        self._channel = channel
        self._udp = UdpListener(
            host, port, channel.publish_threadsafe, name="capture-listener"
        )

    @property
    def is_running(self) -> bool:
        return self._udp.is_running

    @property
    def bound_port(self) -> Optional[int]:
        return self._udp.bound_port

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._channel.bind(loop or asyncio.get_running_loop())
        self._udp.start()

    def stop(self) -> None:
        self._udp.stop()


class _CaptureSession:
    """Subscription window around one user-initiated capture.

    Use as a context manager so the subscription is released on every exit
    path. Samples still in flight after :meth:`close` are ignored.
    """

    def __init__(
        self,
        channel: CaptureChannel,
        *,
        context: Optional[SimulatorContext] = None,
        airframe: Optional[str] = None,
    ) -> None:
        self._channel = channel
        self._context = context
        self._airframe = airframe
        self._active = False
        self.events = 0

    @property
    def is_open(self) -> bool:
        return self._active

    @property
    def is_available(self) -> bool:
        context = self._context
        if context is None:
            return True
        if self._airframe is None:
            return context.is_reachable
        return context.is_listening_for(self._airframe)

    def open(self) -> bool:
        if self._active:
            return True
        if not self.is_available:
            LOGGER.info("Simulator not listening; capture not opened")
            return False
        self._active = True
        self._channel.subscribe(self._on_samples)
        return True

    def close(self) -> None:
        self._active = False
        self._channel.unsubscribe(self._on_samples)

    def __enter__(self) -> "_CaptureSession":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _on_samples(self, samples: Sequence[CaptureSample]) -> None:
        if not self._active:
            return
        self.events += 1
        self._handle(samples)

    def _handle(self, samples: Sequence[CaptureSample]) -> None:
        raise NotImplementedError


class SingleCapture(_CaptureSession):
    """Consume ``samples[0]`` of the first event, then unsubscribe."""

    def __init__(
        self,
        channel: CaptureChannel,
        apply: Callable[[CaptureSample], None],
        *,
        context: Optional[SimulatorContext] = None,
        airframe: Optional[str] = None,
    ) -> None:
        super().__init__(channel, context=context, airframe=airframe)
        self._apply = apply
        self._result: Optional[asyncio.Future[Optional[CaptureSample]]] = None
        self.sample: Optional[CaptureSample] = None

    def open(self) -> bool:
        opened = super().open()
        if opened and self._result is None:
            with contextlib.suppress(RuntimeError):
                self._result = asyncio.get_running_loop().create_future()
        return opened

    def close(self) -> None:
        super().close()
        if self._result is not None and not self._result.done():
            self._result.set_result(self.sample)

    async def wait(self) -> Optional[CaptureSample]:
        """Wait for the first event; callers own any timeout."""

        if self._result is None:
            return self.sample
        return await self._result

    def _handle(self, samples: Sequence[CaptureSample]) -> None:
        first = samples[0]
        if first.is_target:
            LOGGER.debug("Single capture ignored a target sample")
        else:
            self.sample = first
            self._apply(first)
        self.close()


class MultipleCapture(_CaptureSession):
    """Consume every event until :meth:`close` is called."""

    def __init__(
        self,
        channel: CaptureChannel,
        apply: Callable[[Sequence[CaptureSample]], None],
        *,
        context: Optional[SimulatorContext] = None,
        airframe: Optional[str] = None,
    ) -> None:
        super().__init__(channel, context=context, airframe=airframe)
        self._apply = apply

    def _handle(self, samples: Sequence[CaptureSample]) -> None:
        self._apply(samples)
