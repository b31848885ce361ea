"""Explicit simulator context handed to upload agents and capture sessions."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class SimulatorContext:
    """What the process currently knows about the running simulator.

    The telemetry monitor is the only writer; everything else reads it on
    the event loop.
    """

    is_reachable: bool = False
    active_airframe: Optional[str] = None
    upload_in_flight: bool = False
    last_marker: Optional[str] = None
    last_seen: Optional[float] = None

    def is_listening_for(self, airframe: str) -> bool:
        return self.is_reachable and self.active_airframe == airframe

    def mark_seen(self, now: Optional[float] = None) -> None:
        self.last_seen = time.monotonic() if now is None else now
        self.is_reachable = True

    def expire(self, timeout: float, now: Optional[float] = None) -> bool:
        """Drop reachability when nothing was heard for ``timeout`` seconds.

        Returns ``True`` when the call changed the reachability flag.
        """

        if not self.is_reachable or self.last_seen is None:
            return False
        current = time.monotonic() if now is None else now
        if current - self.last_seen <= timeout:
            return False
        self.is_reachable = False
        self.active_airframe = None
        self.upload_in_flight = False
        return True
