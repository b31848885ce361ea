from typing import Any, List, Optional, Tuple

import pytest

from dtc_uplink.core import DelayProfile
from dtc_uplink.mirror import Marker, Verb, VerbHandler, VerbHub


class RecordingStore:
    """Stands in for configuration persistence."""

    def __init__(self, events: Optional[List[Tuple[Any, ...]]] = None) -> None:
        self.saved: list[str] = []
        self.events = events if events is not None else []

    def save(self, tag: str) -> None:
        self.saved.append(tag)
        self.events.append(("save", tag))


class RecordingHub(VerbHub):
    """Hub that records every verb before forwarding it."""

    def __init__(self, events: Optional[List[Tuple[Any, ...]]] = None) -> None:
        super().__init__()
        self.emitted: list[tuple[Optional[str], Verb, Marker]] = []
        self.events = events if events is not None else []

    def mirror(self, verb: Verb, sender: Optional[VerbHandler], marker: Marker) -> None:
        tag = sender.handler_tag if sender is not None else None
        self.emitted.append((tag, verb, marker))
        self.events.append(("verb", verb, marker.index))
        super().mirror(verb, sender, marker)

    def verbs_from(self, tag: str) -> list[Verb]:
        return [verb for sender, verb, _ in self.emitted if sender == tag]


@pytest.fixture
def events() -> List[Tuple[Any, ...]]:
    return []


@pytest.fixture
def store(events) -> RecordingStore:
    return RecordingStore(events)


@pytest.fixture
def hub(events) -> RecordingHub:
    return RecordingHub(events)


@pytest.fixture
def delays() -> DelayProfile:
    return DelayProfile(base_ms=200)


class RecordingSender:
    """Transport double that keeps every script it is handed."""

    def __init__(self, result: bool = True) -> None:
        self.scripts: list = []
        self.result = result

    def send_script(self, script) -> bool:
        self.scripts.append(script)
        return self.result

    async def send_async(self, script) -> bool:
        return self.send_script(script)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()
