from dtc_uplink.airframes import a10c
from dtc_uplink.airframes.a10c import A10CConfiguration, A10CUploadAgent, WaypointInfo
from dtc_uplink.airframes.a10c.builders import WYPTBuilder, coordinate_text, waypoint_name
from dtc_uplink.core import CommandScript, DelayProfile, InvocationKind


def _cdu(*names: str) -> list[str]:
    return [f"CDU.{name}" for name in names]


def test_waypoint_name_rules():
    assert waypoint_name(1, "12 alpha-bravo!") == "ALPHABRAVO"
    assert waypoint_name(3, "123") == "WP3"
    assert waypoint_name(4, "") == "WP4"
    assert waypoint_name(5, "a very long waypoint name") == "A VERY LONG "


def test_coordinate_text():
    assert coordinate_text(10.5, is_latitude=True) == "N1030000"
    assert coordinate_text(-20.25, is_latitude=False) == "W02015000"


def test_waypoint_sequence(delays: DelayProfile):
    configuration = A10CConfiguration()
    configuration.wypt.add(WaypointInfo(number=1, name="Ab", lat=1.0, lon=2.0, alt=-30))

    script = CommandScript()
    WYPTBuilder(a10c.build_registry(delays), script, delays).build(configuration)
    labels = [item.label for item in script]

    assert labels == (
        _cdu("WP", "LSK_3L")
        + ["wait"]
        + _cdu("CLR", "CLR")
        + ["wait"]
        + _cdu("LSK_7R")
        + ["wait"]
        + _cdu("CLR", "CLR")
        + _cdu("A", "B", "LSK_3R")
        + ["wait"]
        + _cdu("CLR", "CLR")
        + _cdu(*"N0100000", "LSK_7L", "CLR", "CLR")
        + _cdu(*"E00200000", "LSK_9L", "CLR", "CLR")
        + _cdu("0", "LSK_5L")
        + ["wait"]
        + _cdu("CLR", "CLR")
    )
    waits = [item for item in script if item.kind is InvocationKind.WAIT]
    assert {item.delay_ms for item in waits} == {200}


def test_agent_compiles_bracketed_script(delays: DelayProfile):
    configuration = a10c.configuration_from_dict(
        {"wypt": [{"name": "home", "lat": 42.0, "lon": 41.5, "alt": 150}]}
    )
    agent = A10CUploadAgent(a10c.build_registry(delays), delays)

    script = agent.compile(configuration)

    assert script[0].kind is InvocationKind.BEGIN
    assert script[-1].kind is InvocationKind.END
    assert configuration.wypt.max_count == 50
    assert "CDU.H" in [item.label for item in script]
