"""Builder base classes and the shared delay vocabulary.

A builder appends the invocations needed to drive one configuration
subsystem into the cockpit. Builders share one :class:`CommandScript`
per upload and must replicate the exact menu traversal of the real
device, since the simulator offers no random access to avionics state.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from .registry import CommandRegistry
from .script import CommandScript, ScriptValidationError, begin_marker, end_marker, wait

LOGGER = logging.getLogger(__name__)


class DelayCategory(str, Enum):
    """Kinds of cockpit interaction, each with its own settle time."""

    ENTER_VALUE = "enter_value"
    LIST_NAVIGATE = "list_navigate"
    CONFIRM = "confirm"
    STEP = "step"
    MENU_OPEN = "menu_open"


class UploadFeedback(str, Enum):
    """Cockpit feedback played once an upload has been replayed."""

    NONE = "none"
    LIGHTS = "lights"


class WaitLength(Enum):
    SHORT = 200
    LONG = 600
    VERY_LONG = 17000


DEFAULT_DELAY_FRACTIONS: Mapping[DelayCategory, float] = {
    DelayCategory.ENTER_VALUE: 0.0,
    DelayCategory.LIST_NAVIGATE: 0.25,
    DelayCategory.CONFIRM: 0.5,
    DelayCategory.STEP: 1.0,
    DelayCategory.MENU_OPEN: 1.0,
}

MIN_DELAY_SCALE = 0.1
MAX_DELAY_SCALE = 10.0


@dataclass(frozen=True, slots=True)
class DelayProfile:
    """Per-airframe base delay scaled by the user-controlled multiplier."""

    base_ms: int
    scale: float = 1.0
    fractions: Mapping[DelayCategory, float] = field(
        default_factory=lambda: dict(DEFAULT_DELAY_FRACTIONS)
    )

    def __post_init__(self) -> None:
        if self.base_ms < 0:
            raise ValueError("base_ms must be non-negative")
        if not MIN_DELAY_SCALE <= self.scale <= MAX_DELAY_SCALE:
            raise ValueError(
                f"delay scale {self.scale} outside [{MIN_DELAY_SCALE}, {MAX_DELAY_SCALE}]"
            )

    def delay(self, category: DelayCategory) -> int:
        fraction = self.fractions.get(category, 1.0)
        return int(round(self.base_ms * fraction * self.scale))

    def wait(self, length: WaitLength = WaitLength.SHORT) -> int:
        return int(round(length.value * self.scale))


_SEPARATORS = re.compile(r"[,.°’”\"':]")


def remove_separators(text: str) -> str:
    return _SEPARATORS.sub("", text)


def delete_leading_zeros(text: str) -> str:
    stripped = text.lstrip("0")
    return stripped or "0"


def format_ddm(value: float, *, is_latitude: bool, precision: int = 3) -> str:
    """Format decimal degrees as hemisphere-prefixed degrees/decimal minutes.

    >>> format_ddm(10.5, is_latitude=True)
    'N 10° 30.000’'
    """

    if is_latitude:
        hemisphere = "N" if value >= 0 else "S"
        degree_width = 2
    else:
        hemisphere = "E" if value >= 0 else "W"
        degree_width = 3
    magnitude = abs(value)
    degrees = int(magnitude)
    minutes = round((magnitude - degrees) * 60.0, precision)
    if minutes >= 60.0:
        degrees += 1
        minutes = 0.0
    minute_width = 3 + precision if precision else 2
    return (
        f"{hemisphere} {degrees:0{degree_width}d}° "
        f"{minutes:0{minute_width}.{precision}f}’"
    )


class BuilderBase(ABC):
    """Appends invocations for one subsystem to a shared script."""

    def __init__(
        self,
        registry: CommandRegistry,
        script: CommandScript,
        delays: DelayProfile,
    ) -> None:
        self._registry = registry
        self._script = script
        self._delays = delays

    @abstractmethod
    def build(self, configuration: Any) -> None:
        """Append this subsystem's invocations for ``configuration``."""

    # ------------------------------------------------------------------
    # Emission helpers
    # ------------------------------------------------------------------
    def action(
        self,
        device: str,
        command: str,
        value: Optional[float] = None,
        *,
        delay_ms: Optional[int] = None,
    ) -> None:
        resolved = self._registry.resolve(device, command)
        self._script.invoke(resolved, value, delay_ms)

    def actions(self, device: str, commands: Iterable[str]) -> None:
        for command in commands:
            self.action(device, command)

    def digits(self, device: str, text: str) -> None:
        for char in text:
            if not char.isdigit():
                raise ScriptValidationError(f"Non-digit {char!r} in {text!r}")
            self.action(device, char)

    def alphanumerics(self, device: str, text: str) -> None:
        for char in text.upper():
            self.action(device, "SPC" if char == " " else char)

    def coordinate_2864(self, device: str, text: str) -> None:
        """Type a DDM coordinate on a keypad where hemispheres share digit keys."""

        hemisphere_keys = {"N": "2", "S": "8", "E": "6", "W": "4"}
        for char in remove_separators(text.replace(" ", "")).upper():
            self.action(device, hemisphere_keys.get(char, char))

    def wait(self, length: WaitLength = WaitLength.SHORT) -> None:
        self._script.append(wait(self._delays.wait(length)))

    def wait_ms(self, delay_ms: int) -> None:
        self._script.append(wait(int(round(delay_ms * self._delays.scale))))

    @property
    def script(self) -> CommandScript:
        return self._script


class SetupBuilder(BuilderBase):
    """Opens the upload transaction."""

    def build(self, configuration: Any = None) -> None:
        self._script.append(begin_marker())


class TeardownBuilder(BuilderBase):
    """Returns the cockpit to rest and closes the upload transaction.

    Subclasses override :meth:`reset` with the airframe-specific steps; the
    end marker is always the last invocation.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        script: CommandScript,
        delays: DelayProfile,
        *,
        feedback: UploadFeedback = UploadFeedback.NONE,
    ) -> None:
        super().__init__(registry, script, delays)
        self._feedback = feedback

    def build(self, configuration: Any = None) -> None:
        if not self._script.is_empty:
            self.reset(configuration)
        self._script.append(end_marker())

    def reset(self, configuration: Any) -> None:
        LOGGER.debug("No reset steps for %s", self._registry.airframe)
