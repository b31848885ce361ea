"""Health reporting for the uplink service.

Components (listeners, the health endpoint itself) report in through
:class:`HealthReporter`; the simulator link is tracked separately since it
is expected to come and go and never makes the service unhealthy.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from aiohttp import web

from .core.context import SimulatorContext

LOGGER = logging.getLogger(__name__)

HEALTH_ROUTE = "/healthz"
SIMULATOR_ROUTE = "/simulator"


def _timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="seconds")


@dataclass(slots=True)
class ComponentStatus:
    name: str
    healthy: bool
    detail: Optional[str] = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "healthy": self.healthy,
            "detail": self.detail,
            "updatedAt": _timestamp(self.updated_at),
        }


class HealthReporter:
    """Component and service-state registry behind the health endpoint."""

    def __init__(self) -> None:
        self._components: Dict[str, ComponentStatus] = {}
        self._service: Optional[ComponentStatus] = None
        self._simulator: Dict[str, object] = {"reachable": False, "airframe": None}
        self._lock = asyncio.Lock()

    async def update(
        self, name: str, healthy: bool, detail: Optional[str] = None
    ) -> None:
        async with self._lock:
            previous = self._components.get(name)
            self._components[name] = ComponentStatus(name, healthy, detail)
        if previous is not None and previous.healthy != healthy:
            LOGGER.info(
                "Component %s -> %s%s",
                name,
                "healthy" if healthy else "unhealthy",
                f" ({detail})" if detail else "",
            )

    async def set_service_state(
        self, state: str, *, healthy: bool, detail: Optional[str] = None
    ) -> None:
        async with self._lock:
            self._service = ComponentStatus(state, healthy, detail)

    async def record_simulator(self, context: SimulatorContext) -> None:
        """Copy the simulator link state for :data:`SIMULATOR_ROUTE`."""

        async with self._lock:
            self._simulator = {
                "reachable": context.is_reachable,
                "airframe": context.active_airframe,
                "uploadInFlight": context.upload_in_flight,
            }

    async def snapshot(self) -> Dict[str, object]:
        async with self._lock:
            components = [status.as_dict() for status in self._components.values()]
            service = self._service
            simulator = dict(self._simulator)

        healthy = all(item["healthy"] for item in components)
        if service is not None:
            healthy = healthy and service.healthy

        payload: Dict[str, object] = {
            "status": "ok" if healthy else "degraded",
            "components": components,
            "simulator": simulator,
        }
        if service is not None:
            payload["serviceState"] = {
                "state": service.name,
                "healthy": service.healthy,
                "detail": service.detail,
                "updatedAt": _timestamp(service.updated_at),
            }
        return payload


class HealthServer:
    """aiohttp site serving the reporter's snapshot."""

    def __init__(self, reporter: HealthReporter, host: str, port: int) -> None:
        self._reporter = reporter
        self._host = host
        self._port = port
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}{HEALTH_ROUTE}"

    async def start(self) -> None:
        app = web.Application()
        app.router.add_get(HEALTH_ROUTE, self._handle_health)
        app.router.add_get(SIMULATOR_ROUTE, self._handle_simulator)

        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner, self._site = runner, site
        LOGGER.info("Health endpoint listening on %s", self.url)

    async def stop(self) -> None:
        if self._site is not None:
            with contextlib.suppress(RuntimeError):
                await self._site.stop()
        if self._runner is not None:
            await self._runner.cleanup()
        self._runner = self._site = None

    async def _handle_health(self, request: web.Request) -> web.Response:
        snapshot = await self._reporter.snapshot()
        return web.json_response(
            snapshot, status=200 if snapshot["status"] == "ok" else 503
        )

    async def _handle_simulator(self, request: web.Request) -> web.Response:
        snapshot = await self._reporter.snapshot()
        return web.json_response(snapshot["simulator"])
