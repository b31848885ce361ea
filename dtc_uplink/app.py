"""Main application entry-point for dtc-uplink."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .adapters import CaptureChannel, CaptureListener, ScriptTransport, TelemetryMonitor
from .airframes import AIRFRAMES, build_agent, get_airframe
from .config import UplinkConfig, load_config
from .core import ConfigurationStore, DelayProfile, NavpointSystem, SimulatorContext, UploadAgent
from .health import HealthReporter, HealthServer
from .logging import configure_logging
from .mirror import NAVPOINT_FIELDS, STEERPOINT_FIELDS, FieldAccessor, ListSide

LOGGER = logging.getLogger(__name__)

_POINT_FIELDS: Dict[str, Mapping[str, FieldAccessor]] = {"f16c": STEERPOINT_FIELDS}


class ServiceState(str, Enum):
    STARTING = "starting"
    ACTIVE = "active"
    DEGRADED = "degraded"
    STOPPING = "stopping"


class UplinkApp:
    """Coordinates the simulator listeners, uploads and health reporting.

    Editors reach the simulator through this object: ``capture_channel``
    for captures, :meth:`upload` for sending, and :meth:`arm` for uploads
    triggered from the cockpit's upload switch.
    """

    def __init__(
        self,
        config: Optional[UplinkConfig] = None,
        *,
        context: Optional[SimulatorContext] = None,
        transport: Optional[ScriptTransport] = None,
    ) -> None:
        self._config = config or load_config()
        simulator = self._config.simulator
        self._context = context or SimulatorContext()
        self._transport = transport or ScriptTransport(
            simulator.host,
            simulator.command_port,
            timeout=simulator.connect_timeout_seconds,
        )
        self._channel = CaptureChannel()
        self._capture_listener = CaptureListener(
            self._channel, simulator.host, simulator.capture_port
        )
        self._telemetry = TelemetryMonitor(
            self._context,
            simulator.host,
            simulator.telemetry_port,
            availability_timeout=simulator.availability_timeout_seconds,
        )
        # One registry per airframe for the life of the process.
        self._agents: Dict[str, UploadAgent] = {
            key: build_agent(
                key,
                self.delay_profile(key),
                transport=self._transport,
                context=self._context,
                feedback=self._config.upload.feedback,
            )
            for key in AIRFRAMES
        }
        self._armed: Optional[Tuple[str, Any]] = None
        self._health = HealthReporter()
        self._health_server: Optional[HealthServer] = None
        self._shutdown_event: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._simulator_task: Optional[asyncio.Task[None]] = None
        self._state = ServiceState.STARTING

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def config(self) -> UplinkConfig:
        return self._config

    @property
    def context(self) -> SimulatorContext:
        return self._context

    @property
    def capture_channel(self) -> CaptureChannel:
        return self._channel

    @property
    def telemetry(self) -> TelemetryMonitor:
        return self._telemetry

    @property
    def health(self) -> HealthReporter:
        return self._health

    @property
    def state(self) -> ServiceState:
        return self._state

    def delay_profile(self, airframe: str) -> DelayProfile:
        upload = self._config.upload
        return DelayProfile(base_ms=upload.base_delay(airframe), scale=upload.delay_scale)

    def agent(self, airframe: str) -> UploadAgent:
        return self._agents[get_airframe(airframe).key]

    async def upload(self, configuration: Any, *, airframe: str, force: bool = False) -> bool:
        """Compile ``configuration`` and send it to the simulator.

        Returns ``False`` without compiling when the simulator is not
        listening for ``airframe`` (unless ``force``) or the send failed.
        Compilation errors propagate.
        """

        agent = self.agent(airframe)
        if force:
            script = agent.compile(configuration)
            sent = await self._transport.send_async(script)
        else:
            sent = await agent.load_async(configuration)
        if sent:
            LOGGER.info("Uploaded %s configuration", agent.airframe)
        return sent

    def arm(self, configuration: Any, *, airframe: str) -> None:
        """Upload ``configuration`` the next time the cockpit requests one."""

        self._armed = (get_airframe(airframe).key, configuration)
        LOGGER.info("Armed %s configuration for cockpit upload", airframe)

    def disarm(self) -> None:
        self._armed = None

    def list_editor(
        self,
        system: NavpointSystem,
        store: ConfigurationStore,
        *,
        airframe: str,
        route_tag: str = "Primary",
    ) -> ListSide:
        """Create a list editor for one route using the navpoint settings.

        Captures opened from the editor only run while the simulator is
        flying ``airframe``.
        """

        key = get_airframe(airframe).key
        navpoints = self._config.navpoints
        return ListSide(
            system,
            store,
            route_tag=route_tag,
            store_tag=f"{key}.{route_tag}",
            starting_number=navpoints.starting_number,
            fields=_POINT_FIELDS.get(key, NAVPOINT_FIELDS),
            context=self._context,
            airframe=key,
            max_capture_points=navpoints.max_capture_points,
        )

    async def wait_for_simulator(self, airframe: str, timeout: float) -> bool:
        """Wait until telemetry shows the simulator flying ``airframe``."""

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not self._context.is_listening_for(airframe):
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(0.1)
        return True

    async def run(self) -> None:
        """Start the listeners and wait for :meth:`stop`."""

        self._loop = asyncio.get_running_loop()
        self._shutdown_event = asyncio.Event()

        LOGGER.info("dtc-uplink starting with config: %s", self._config.path)
        started = await self._start_services()
        if not started:
            LOGGER.warning("Service startup incomplete; running in degraded mode")

        try:
            await self._idle_loop()
        except asyncio.CancelledError:
            LOGGER.info("dtc-uplink received shutdown signal")
            raise
        finally:
            await self._stop_services()

    async def stop(self) -> None:
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    @classmethod
    def start(cls, config: Optional[UplinkConfig] = None) -> None:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            log_path=instance._config.logging.path,
            log_network=instance._config.logging.log_network,
        )
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("dtc-uplink received shutdown signal")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def _idle_loop(self) -> None:
        LOGGER.info("dtc-uplink active; awaiting shutdown signal")
        if self._shutdown_event is None:
            self._shutdown_event = asyncio.Event()
        await self._shutdown_event.wait()

    async def _transition_state(
        self, state: ServiceState, *, detail: Optional[str] = None
    ) -> None:
        if state == self._state and detail is None:
            return
        previous = self._state
        self._state = state
        LOGGER.info("Service state %s -> %s", previous.value, state.value)
        await self._health.set_service_state(
            state.value, healthy=state == ServiceState.ACTIVE, detail=detail
        )

    async def _start_services(self) -> bool:
        await self._transition_state(ServiceState.STARTING, detail="initialising")
        await self._start_health_server()

        capture_ready = await self._start_component(
            "capture-listener", lambda: self._capture_listener.start(self._loop)
        )
        telemetry_ready = await self._start_component(
            "telemetry-monitor", self._telemetry.start
        )
        if telemetry_ready:
            self._telemetry.add_upload_callback(self._on_upload_requested)

        await self._health.record_simulator(self._context)
        self._simulator_task = asyncio.create_task(self._watch_simulator())

        ready = capture_ready and telemetry_ready
        await self._transition_state(
            ServiceState.ACTIVE if ready else ServiceState.DEGRADED
        )
        return ready

    async def _start_component(self, name: str, start: Callable[[], None]) -> bool:
        try:
            start()
        except OSError as exc:
            LOGGER.error("Failed to start %s: %s", name, exc)
            await self._health.update(name, False, str(exc))
            return False
        await self._health.update(name, True, None)
        return True

    async def _start_health_server(self) -> None:
        health = self._config.health
        if not health.enabled or health.port <= 0:
            return

        server = HealthServer(self._health, health.host, health.port)
        try:
            await server.start()
        except OSError as exc:
            LOGGER.error("Failed to start health endpoint: %s", exc)
            await self._health.update("health-endpoint", False, str(exc))
        else:
            self._health_server = server
            await self._health.update("health-endpoint", True, None)

    async def _stop_health_server(self) -> None:
        if self._health_server is None:
            return
        await self._health_server.stop()
        self._health_server = None
        await self._health.update("health-endpoint", False, "shutdown")

    async def _stop_services(self) -> None:
        await self._transition_state(ServiceState.STOPPING, detail="shutdown requested")

        if self._simulator_task is not None:
            self._simulator_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._simulator_task
            self._simulator_task = None

        self._telemetry.remove_upload_callback(self._on_upload_requested)
        await self._telemetry.stop()
        await self._health.update("telemetry-monitor", False, "shutdown")
        self._capture_listener.stop()
        await self._health.update("capture-listener", False, "shutdown")
        await self._stop_health_server()

        if self._shutdown_event is not None:
            self._shutdown_event.set()

    # ------------------------------------------------------------------
    # Simulator events
    # ------------------------------------------------------------------
    async def _watch_simulator(self) -> None:
        seen: Optional[Tuple[bool, Optional[str], bool]] = None
        while True:
            context = self._context
            current = (context.is_reachable, context.active_airframe, context.upload_in_flight)
            if current != seen:
                seen = current
                await self._health.record_simulator(context)
            await asyncio.sleep(1.0)

    async def _on_upload_requested(self) -> None:
        armed = self._armed
        if armed is None:
            LOGGER.info("Cockpit requested an upload but nothing is armed")
            return
        airframe, configuration = armed
        try:
            sent = await self.upload(configuration, airframe=airframe)
        except (LookupError, ValueError) as exc:
            LOGGER.error("Armed %s configuration failed to compile: %s", airframe, exc)
            return
        if not sent:
            LOGGER.warning("Cockpit upload of %s configuration was not sent", airframe)
