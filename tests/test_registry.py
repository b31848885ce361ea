import pytest

from dtc_uplink.airframes import a10c, f16c
from dtc_uplink.core import CommandRegistry, ConfigurationIntegrityError, DelayProfile
from dtc_uplink.core.registry import ROCKER_RANGE


def _registry() -> CommandRegistry:
    registry = CommandRegistry("test")
    panel = registry.register_device(5, "PANEL")
    panel.add_command(3001, "PRESS")
    panel.add_command(3002, "KNOB", (0, 10), activate=4, delay_ms=150)
    return registry.freeze()


def test_resolve_returns_identifiers_and_domain():
    resolved = _registry().resolve("PANEL", "KNOB")

    assert resolved.device_id == 5
    assert resolved.command_id == 3002
    assert resolved.value_range == (0, 10)
    assert resolved.activate == 4
    assert resolved.delay_ms == 150
    assert resolved.name == "PANEL.KNOB"


def test_resolve_is_repeatable():
    registry = _registry()

    assert registry.resolve("PANEL", "PRESS") == registry.resolve("PANEL", "PRESS")


def test_unknown_device_is_integrity_error():
    with pytest.raises(ConfigurationIntegrityError):
        _registry().resolve("NOPE", "PRESS")


def test_unknown_command_is_integrity_error():
    with pytest.raises(ConfigurationIntegrityError):
        _registry().resolve("PANEL", "NOPE")


def test_frozen_registry_rejects_changes():
    registry = _registry()

    with pytest.raises(RuntimeError):
        registry.register_device(6, "OTHER")
    with pytest.raises(RuntimeError):
        registry.device("PANEL").add_command(3003, "LATE")


def test_duplicates_are_rejected():
    registry = CommandRegistry("test")
    device = registry.register_device(1, "A")
    device.add_command(1, "X")

    with pytest.raises(ValueError):
        device.add_command(2, "X")
    with pytest.raises(ValueError):
        registry.register_device(1, "B")
    with pytest.raises(ValueError):
        registry.register_device(2, "A")


def test_activate_value_must_be_in_range():
    device = CommandRegistry("test").register_device(1, "A")

    with pytest.raises(ValueError):
        device.add_command(1, "X", (0, 1), activate=2)
    with pytest.raises(ValueError):
        device.add_command(1, "Y", (3, 1))


def test_f16c_registry_layout(delays: DelayProfile):
    registry = f16c.build_registry(delays)

    assert registry.frozen
    assert registry.resolve("UFC", "0").command_id == 3002
    assert registry.resolve("UFC", "9").command_id == 3011
    assert registry.resolve("UFC", "ENTR").delay_ms == 100
    assert registry.resolve("UFC", "LIST").delay_ms == 50
    assert registry.resolve("UFC", "0").delay_ms == 0

    down = registry.resolve("UFC", "DOWN")
    assert down.value_range == ROCKER_RANGE
    assert down.activate == -1

    positions = {
        name: registry.resolve("HOTAS", name) for name in ("DGFT", "MSL", "CENTER")
    }
    assert {item.command_id for item in positions.values()} == {3030}
    assert [positions[name].activate for name in ("DGFT", "MSL", "CENTER")] == [1, -1, 0]

    assert registry.resolve("RMFD", "OSB-20").command_id == 3020
    assert registry.device_by_id(12).name == "INTL"


def test_a10c_keypad_runs_one_to_zero(delays: DelayProfile):
    registry = a10c.build_registry(delays)

    assert registry.resolve("CDU", "1").command_id == 3015
    assert registry.resolve("CDU", "0").command_id == 3024
    assert registry.resolve("CDU", "A").command_id == 3027
    assert registry.resolve("CDU", "Z").command_id == 3052
    assert registry.resolve("CDU", "LSK_9R").command_id == 3008
    assert len(registry) == 1
