import pytest

from dtc_uplink.adapters import CaptureChannel, CaptureSample
from dtc_uplink.airframes.f16c import SteerpointInfo, steerpoint_system
from dtc_uplink.core import SimulatorContext
from dtc_uplink.mirror import STEERPOINT_FIELDS, ListSide, MapSide, Verb, connect

ROUTE = "Primary"
LIST_TAG = f"list:{ROUTE}"


def _samples(*coordinates, targets=()):
    return [
        CaptureSample(lat, lon, 100.0 + i, is_target=i in targets)
        for i, (lat, lon) in enumerate(coordinates)
    ]


@pytest.fixture
def system():
    return steerpoint_system()


@pytest.fixture
def list_side(system, store):
    return ListSide(system, store, route_tag=ROUTE, fields=STEERPOINT_FIELDS)


def test_numbers_stay_contiguous_from_starting_number(system, store):
    side = ListSide(system, store, starting_number=5)
    for _ in range(3):
        side.add()
    side.delete(1)
    side.add(SteerpointInfo(number=42), index=0)

    assert [point.number for point in side.points] == [5, 6, 7]

    side.renumber(10)

    assert [point.number for point in side.points] == [10, 11, 12]
    assert side.starting_number == 10

    first = side.points[0]
    side.move(0, 2)

    assert [point.number for point in side.points] == [10, 11, 12]
    assert side.points[2] is first


def test_structural_edits_save_each_time(list_side, store):
    list_side.add()
    list_side.add()
    list_side.move(1, 0)
    list_side.delete(0)

    assert store.saved == [ROUTE] * 4


def test_custom_store_tag(system, store):
    side = ListSide(system, store, route_tag=ROUTE, store_tag="f16c.stpt")
    side.add()

    assert store.saved == ["f16c.stpt"]


def test_update_point_fields(list_side):
    list_side.add()

    assert list_side.update_point(0, "alt", "1500.4") is True
    assert list_side.update_point(0, "tos", "12:00:00") is True
    assert list_side.update_point(0, "lon", "") is False

    point = list_side.points[0]
    assert point.alt == 1500
    assert point.tos == "12:00:00"
    with pytest.raises(KeyError):
        list_side.update_point(0, "speed", 300)
    with pytest.raises(IndexError):
        list_side.update_point(3, "alt", 1)


def test_out_of_bounds_local_edits_raise(list_side):
    with pytest.raises(IndexError):
        list_side.select(0)
    with pytest.raises(IndexError):
        list_side.delete(0)
    with pytest.raises(IndexError):
        list_side.open_detail(0)


def test_listeners_see_changes(list_side):
    seen: list = []
    list_side.add_listener(lambda event, index: seen.append((event, index)))

    list_side.add()
    list_side.select(0)
    list_side.open_detail(0)
    list_side.close_detail()

    assert seen == [
        ("added", 0),
        ("selected", 0),
        ("opened", 0),
        ("detail_closed", None),
    ]


def test_move_closes_detail_view(list_side):
    seen: list = []
    list_side.add()
    list_side.add()
    list_side.open_detail(0)
    list_side.add_listener(lambda event, index: seen.append((event, index)))

    list_side.move(0, 1)

    assert list_side.detail_index is None
    assert ("detail_closed", None) in seen
    assert list_side.selected_index == 1


@pytest.mark.asyncio
async def test_capture_appends_named_points(list_side, store, hub):
    map_side = MapSide({ROUTE: list_side.system})
    connect(list_side, map_side, hub=hub)
    channel = CaptureChannel()

    session = list_side.begin_capture(channel)
    assert session.is_open
    await channel.deliver(_samples((1.0, 2.0), (3.0, 4.0), (5.0, 6.0)))
    session.close()

    assert [point.name for point in list_side.points] == [
        "WP1 DCS Capture",
        "WP2 DCS Capture",
        "WP3 DCS Capture",
    ]
    assert [point.number for point in list_side.points] == [1, 2, 3]
    assert [(point.lat, point.lon, point.alt) for point in list_side.points][0] == (1.0, 2.0, 100)
    assert hub.verbs_from(LIST_TAG) == [Verb.ADDED] * 3
    assert [element.lat for element in map_side.elements(ROUTE)] == [1.0, 3.0, 5.0]
    assert store.saved == [ROUTE]
    assert channel.subscriber_count == 0


@pytest.mark.asyncio
async def test_capture_skips_targets_but_names_by_array_position(list_side):
    channel = CaptureChannel()

    with list_side.begin_capture(channel):
        await channel.deliver(_samples((1.0, 2.0), (3.0, 4.0), (5.0, 6.0), targets={1}))

    assert [point.name for point in list_side.points] == ["WP1 DCS Capture", "WP3 DCS Capture"]
    assert list_side.points[1].lat == 5.0


@pytest.mark.asyncio
async def test_capture_overwrites_from_replace_index(list_side, hub):
    for _ in range(2):
        list_side.add(SteerpointInfo(name="old", lat=0.0, lon=0.0))
    connect(list_side, hub=hub)
    channel = CaptureChannel()

    with list_side.begin_capture(channel, replace_index=1):
        await channel.deliver(_samples((1.0, 2.0), (3.0, 4.0)))
        await channel.deliver(_samples((5.0, 6.0)))

    assert [point.name for point in list_side.points] == [
        "old",
        "WP1 DCS Capture",
        "WP2 DCS Capture",
        "WP1 DCS Capture",
    ]
    assert [(verb, marker.index) for _, verb, marker in hub.emitted] == [
        (Verb.MOVED, 2),
        (Verb.ADDED, 3),
        (Verb.ADDED, 4),
    ]


@pytest.mark.asyncio
async def test_capture_after_delete_keeps_map_in_step(store, hub):
    side = ListSide(
        steerpoint_system([SteerpointInfo(lat=0.0, lon=0.0) for _ in range(2)]),
        store,
        route_tag=ROUTE,
    )
    map_side = MapSide({ROUTE: side.system})
    connect(side, map_side, hub=hub)
    channel = CaptureChannel()

    with side.begin_capture(channel):
        side.delete(1)
        await channel.deliver(_samples((1.0, 2.0)))

    assert len(side.points) == 2
    assert len(map_side.elements(ROUTE)) == len(side.points)
    assert hub.verbs_from(LIST_TAG) == [Verb.DELETED, Verb.ADDED]
    assert [point.number for point in side.points] == [1, 2]
    assert map_side.elements(ROUTE)[1].lat == 1.0

@pytest.mark.asyncio
async def test_capture_respects_point_cap(system, store):
    side = ListSide(system, store, max_capture_points=2)
    channel = CaptureChannel()

    with side.begin_capture(channel):
        await channel.deliver(_samples((1.0, 1.0), (2.0, 2.0), (3.0, 3.0)))
        await channel.deliver(_samples((4.0, 4.0)))

    assert len(side.points) == 2


@pytest.mark.asyncio
async def test_capture_stops_when_route_is_full(store):
    side = ListSide(steerpoint_system([SteerpointInfo() for _ in range(98)]), store)
    channel = CaptureChannel()

    with side.begin_capture(channel):
        await channel.deliver(_samples((1.0, 1.0), (2.0, 2.0)))

    assert len(side.points) == 99


@pytest.mark.asyncio
async def test_single_capture_updates_target_point(list_side, hub):
    list_side.add(SteerpointInfo(name="keep"))
    list_side.add(SteerpointInfo(name="target"))
    connect(list_side, hub=hub)
    channel = CaptureChannel()

    session = list_side.capture_single(channel, 1)
    await channel.deliver(_samples((7.0, 8.0), (9.0, 9.0)))

    point = list_side.points[1]
    assert (point.name, point.lat, point.lon) == ("target", 7.0, 8.0)
    assert not session.is_open
    assert hub.verbs_from(LIST_TAG) == [Verb.MOVED]


@pytest.mark.asyncio
async def test_single_capture_follows_point_after_delete(list_side):
    list_side.add(SteerpointInfo(name="first"))
    list_side.add(SteerpointInfo(name="target"))
    channel = CaptureChannel()

    list_side.capture_single(channel, 1)
    list_side.delete(0)
    await channel.deliver(_samples((7.0, 8.0)))

    assert list_side.points[0].lat == 7.0


@pytest.mark.asyncio
async def test_capture_refused_without_simulator(system, store):
    context = SimulatorContext()
    side = ListSide(system, store, context=context, airframe="f16c")
    channel = CaptureChannel()

    session = side.begin_capture(channel)
    await channel.deliver(_samples((1.0, 1.0)))

    assert not session.is_open
    assert side.points == []
