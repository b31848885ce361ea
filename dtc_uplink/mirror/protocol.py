"""Verb handler/mirror contracts and the per-side feedback guard.

Each side implements :class:`VerbHandler` and emits through a
:class:`VerbMirror`. Sides never reference each other directly; they
register with a :class:`VerbHub`, which forwards every verb to every
registered handler except its sender.
"""

from __future__ import annotations

import contextlib
import logging
from enum import Enum
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

from .markers import Marker, Verb

LOGGER = logging.getLogger(__name__)


class VerbHandler(Protocol):
    """Receives verbs emitted by other sides."""

    @property
    def handler_tag(self) -> str:
        ...

    def verb_selected(self, sender: Optional["VerbHandler"], marker: Marker) -> None:
        ...

    def verb_opened(self, sender: Optional["VerbHandler"], marker: Marker) -> None:
        ...

    def verb_moved(self, sender: Optional["VerbHandler"], marker: Marker) -> None:
        ...

    def verb_added(self, sender: Optional["VerbHandler"], marker: Marker) -> None:
        ...

    def verb_deleted(self, sender: Optional["VerbHandler"], marker: Marker) -> None:
        ...


class VerbMirror(Protocol):
    """Emission point a side uses to reach every other registered side."""

    def register(self, handler: VerbHandler) -> None:
        ...

    def unregister(self, handler: VerbHandler) -> None:
        ...

    def mirror(self, verb: Verb, sender: Optional[VerbHandler], marker: Marker) -> None:
        ...


_HANDLER_METHODS: Dict[Verb, str] = {
    Verb.SELECTED: "verb_selected",
    Verb.OPENED: "verb_opened",
    Verb.MOVED: "verb_moved",
    Verb.ADDED: "verb_added",
    Verb.DELETED: "verb_deleted",
}


class VerbHub:
    """Neutral registration point connecting the list and the map."""

    def __init__(self) -> None:
        self._handlers: Dict[str, VerbHandler] = {}

    def register(self, handler: VerbHandler) -> None:
        self._handlers[handler.handler_tag] = handler

    def unregister(self, handler: VerbHandler) -> None:
        if self._handlers.get(handler.handler_tag) is handler:
            del self._handlers[handler.handler_tag]

    @property
    def handler_tags(self) -> Tuple[str, ...]:
        return tuple(self._handlers)

    def mirror(self, verb: Verb, sender: Optional[VerbHandler], marker: Marker) -> None:
        sender_tag = sender.handler_tag if sender is not None else None
        LOGGER.debug("Mirror %s %s from %s", verb.value, marker, sender_tag)
        for tag, handler in list(self._handlers.items()):
            if tag == sender_tag:
                continue
            getattr(handler, _HANDLER_METHODS[verb])(sender, marker)


class SideState(str, Enum):
    IDLE = "idle"
    APPLYING_MIRRORED_VERB = "applying_mirrored_verb"


class MirrorGuard:
    """Idle -> ApplyingMirroredVerb -> Idle state machine for one side.

    While a side applies an incoming verb, its own change notifications
    must not be mirrored back out. Every transition is recorded so the
    suppression rule can be checked without any UI.
    """

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._state = SideState.IDLE
        self._verb: Optional[Verb] = None
        self.transitions: List[Tuple[SideState, SideState, Optional[Verb]]] = []
        self.suppressed = 0

    @property
    def state(self) -> SideState:
        return self._state

    @property
    def is_applying(self) -> bool:
        return self._state is SideState.APPLYING_MIRRORED_VERB

    @property
    def current_verb(self) -> Optional[Verb]:
        return self._verb

    @contextlib.contextmanager
    def applying(self, verb: Verb) -> Iterator[None]:
        if self._state is not SideState.IDLE:
            raise RuntimeError(
                f"{self._owner} received {verb.value} while applying {self._verb}"
            )
        self._transition(SideState.APPLYING_MIRRORED_VERB, verb)
        try:
            yield
        finally:
            self._transition(SideState.IDLE, verb)

    def may_emit(self, verb: Verb) -> bool:
        if self._state is SideState.IDLE:
            return True
        self.suppressed += 1
        LOGGER.debug(
            "%s suppressed %s while applying %s",
            self._owner,
            verb.value,
            self._verb.value if self._verb else None,
        )
        return False

    def _transition(self, state: SideState, verb: Verb) -> None:
        self.transitions.append((self._state, state, verb))
        self._state = state
        self._verb = verb if state is SideState.APPLYING_MIRRORED_VERB else None


class MirrorSide:
    """Shared plumbing for a side taking part in verb mirroring."""

    def __init__(self, handler_tag: str) -> None:
        self._handler_tag = handler_tag
        self._mirror: Optional[VerbMirror] = None
        self.guard = MirrorGuard(handler_tag)

    @property
    def handler_tag(self) -> str:
        return self._handler_tag

    @property
    def mirror_attached(self) -> bool:
        return self._mirror is not None

    def attach(self, mirror: VerbMirror) -> None:
        mirror.register(self)
        self._mirror = mirror

    def detach(self) -> None:
        if self._mirror is not None:
            self._mirror.unregister(self)
        self._mirror = None

    def emit(self, verb: Verb, marker: Marker) -> bool:
        """Send ``verb`` to the other sides; returns ``False`` when nothing was sent."""

        mirror = self._mirror
        if mirror is None:
            return False
        if not self.guard.may_emit(verb):
            return False
        mirror.mirror(verb, self, marker)
        return True


def connect(*sides: MirrorSide, hub: Optional[VerbHub] = None) -> VerbHub:
    """Attach ``sides`` to ``hub`` (a new one by default) and return it."""

    hub = hub or VerbHub()
    for side in sides:
        side.attach(hub)
    return hub


def disconnect(*sides: MirrorSide) -> None:
    for side in sides:
        side.detach()
