import asyncio
import json
from pathlib import Path

import pytest

from dtc_uplink.adapters import CaptureSample
from dtc_uplink.app import ServiceState, UplinkApp
from dtc_uplink.airframes.f16c import F16CConfiguration, SteerpointInfo
from dtc_uplink.config import UplinkConfig, load_config
from dtc_uplink.core import InvocationKind


@pytest.fixture
def config(tmp_path: Path) -> UplinkConfig:
    config = load_config(tmp_path / "dtc-uplink.cfg")
    config.simulator.capture_port = 0
    config.simulator.telemetry_port = 0
    config.logging.path = None
    return config


@pytest.fixture
def configuration() -> F16CConfiguration:
    configuration = F16CConfiguration()
    configuration.stpt.add(SteerpointInfo(number=1, lat=41.5, lon=42.0, alt=120))
    return configuration


async def _wait_for(predicate, timeout: float = 5.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() >= deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.01)


def _telemetry(**fields) -> str:
    return json.dumps(fields)


@pytest.mark.asyncio
async def test_upload_requires_simulator_flying_airframe(config, configuration, sender):
    app = UplinkApp(config, transport=sender)

    assert await app.upload(configuration, airframe="f16c") is False

    await app.telemetry.process(_telemetry(Model="A10C"))
    assert await app.upload(configuration, airframe="f16c") is False
    assert sender.scripts == []

    await app.telemetry.process(_telemetry(Model="F16CM"))
    assert await app.upload(configuration, airframe="f16c") is True
    assert len(sender.scripts) == 1
    script = sender.scripts[0]
    assert script[0].kind is InvocationKind.BEGIN
    assert script[-1].kind is InvocationKind.END


@pytest.mark.asyncio
async def test_forced_upload_skips_simulator_check(config, configuration, sender):
    app = UplinkApp(config, transport=sender)

    assert await app.upload(configuration, airframe="f16c", force=True) is True
    assert len(sender.scripts) == 1


def test_unknown_airframe_is_rejected(config, sender):
    app = UplinkApp(config, transport=sender)

    with pytest.raises(ValueError):
        app.agent("f14b")


def test_delay_profile_follows_config(config):
    config.upload.delay_a10c = 300
    config.upload.delay_scale = 2.0
    app = UplinkApp(config)

    profile = app.delay_profile("a10c")

    assert profile.base_ms == 300
    assert profile.scale == 2.0


@pytest.mark.asyncio
async def test_wait_for_simulator_times_out(config):
    app = UplinkApp(config)

    assert await app.wait_for_simulator("f16c", 0.05) is False

    app.context.mark_seen()
    app.context.active_airframe = "f16c"
    assert await app.wait_for_simulator("f16c", 0.05) is True


@pytest.mark.asyncio
async def test_run_starts_listeners_and_stops(config, sender):
    app = UplinkApp(config, transport=sender)
    task = asyncio.create_task(app.run())

    try:
        await _wait_for(lambda: app.state is ServiceState.ACTIVE)
        assert app.telemetry.is_running
        snapshot = await app.health.snapshot()
        components = {item["name"]: item for item in snapshot["components"]}
        assert components["capture-listener"]["healthy"] is True
        assert components["telemetry-monitor"]["healthy"] is True
        assert snapshot["simulator"]["reachable"] is False
        assert snapshot["status"] == "ok"
    finally:
        await app.stop()
        await asyncio.wait_for(task, timeout=5)

    assert app.state is ServiceState.STOPPING
    assert not app.telemetry.is_running


@pytest.mark.asyncio
async def test_cockpit_upload_sends_armed_configuration(config, configuration, sender):
    app = UplinkApp(config, transport=sender)
    task = asyncio.create_task(app.run())

    try:
        await _wait_for(lambda: app.state is ServiceState.ACTIVE)
        await app.telemetry.process(_telemetry(Model="F16CM", Upload="1"))
        assert sender.scripts == []

        app.arm(configuration, airframe="f16c")
        await app.telemetry.process(_telemetry(Model="F16CM", Upload="0"))
        await app.telemetry.process(_telemetry(Model="F16CM", Upload="1"))
        assert len(sender.scripts) == 1

        app.disarm()
        await app.telemetry.process(_telemetry(Model="F16CM", Upload="0"))
        await app.telemetry.process(_telemetry(Model="F16CM", Upload="1"))
        assert len(sender.scripts) == 1
    finally:
        await app.stop()
        await asyncio.wait_for(task, timeout=5)


@pytest.mark.asyncio
async def test_list_editor_uses_navpoint_settings(config, store):
    config.navpoints.starting_number = 3
    config.navpoints.max_capture_points = 1
    app = UplinkApp(config)
    configuration = F16CConfiguration()
    editor = app.list_editor(configuration.stpt, store, airframe="F16C")

    editor.add()
    editor.update_point(0, "tos", "08:00:00")

    assert configuration.stpt.points[0].number == 3
    assert store.saved == ["f16c.Primary", "f16c.Primary"]

    session = editor.begin_capture(app.capture_channel)
    assert not session.is_open

    await app.telemetry.process(_telemetry(Model="F16CM"))
    with editor.begin_capture(app.capture_channel):
        await app.capture_channel.deliver(
            [CaptureSample(1.0, 2.0, 3.0), CaptureSample(4.0, 5.0, 6.0)]
        )
    assert len(configuration.stpt.points) == 2
