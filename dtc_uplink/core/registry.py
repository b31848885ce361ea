"""Static device/command tables for a simulated airframe.

A registry is built once per airframe at process start and is read-only
afterwards, so it can be shared freely between builders without locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, NamedTuple, Optional, Tuple

ValueRange = Tuple[int, int]

PRESS_RANGE: ValueRange = (0, 1)
ROCKER_RANGE: ValueRange = (-1, 1)


class ConfigurationIntegrityError(LookupError):
    """Raised when a builder asks for a device or command the registry lacks."""


@dataclass(frozen=True, slots=True)
class Command:
    """A named control on a device."""

    id: int
    name: str
    value_range: ValueRange = PRESS_RANGE
    activate: int = 1
    delay_ms: int = 0


class ResolvedCommand(NamedTuple):
    device_id: int
    command_id: int
    value_range: ValueRange
    activate: int
    delay_ms: int
    name: str

    def accepts(self, value: float) -> bool:
        low, high = self.value_range
        return low <= value <= high


@dataclass(slots=True)
class Device:
    """An addressable cockpit panel holding commands keyed by name."""

    id: int
    name: str
    _commands: Dict[str, Command] = field(default_factory=dict, repr=False)
    _sealed: bool = field(default=False, repr=False)

    def add_command(
        self,
        id: int,
        name: str,
        value_range: ValueRange = PRESS_RANGE,
        *,
        activate: int = 1,
        delay_ms: int = 0,
    ) -> Command:
        if self._sealed:
            raise RuntimeError(f"Device {self.name} is sealed; registry is read-only")
        if name in self._commands:
            raise ValueError(f"Duplicate command {name!r} on device {self.name}")
        low, high = value_range
        if low > high:
            raise ValueError(f"Empty value range {value_range!r} for {self.name}.{name}")
        if not low <= activate <= high:
            raise ValueError(
                f"Activate value {activate} outside {value_range!r} for {self.name}.{name}"
            )
        command = Command(
            id=id,
            name=name,
            value_range=value_range,
            activate=activate,
            delay_ms=max(0, int(delay_ms)),
        )
        self._commands[name] = command
        return command

    def command(self, name: str) -> Command:
        try:
            return self._commands[name]
        except KeyError:
            raise ConfigurationIntegrityError(
                f"Device {self.name} has no command {name!r}"
            ) from None

    @property
    def commands(self) -> Mapping[str, Command]:
        return MappingProxyType(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def seal(self) -> None:
        self._sealed = True


class CommandRegistry:
    """Per-airframe table of devices and their commands.

    Devices are registered during construction; :meth:`freeze` locks the
    table so later registration attempts fail loudly.
    """

    def __init__(self, airframe: str) -> None:
        self.airframe = airframe
        self._devices: Dict[str, Device] = {}
        self._device_ids: Dict[int, Device] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def register_device(self, id: int, name: str) -> Device:
        if self._frozen:
            raise RuntimeError(f"Registry for {self.airframe} is frozen")
        if name in self._devices:
            raise ValueError(f"Duplicate device name {name!r}")
        if id in self._device_ids:
            raise ValueError(f"Duplicate device id {id}")
        device = Device(id=id, name=name)
        self._devices[name] = device
        self._device_ids[id] = device
        return device

    def freeze(self) -> "CommandRegistry":
        for device in self._devices.values():
            device.seal()
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def device(self, name: str) -> Device:
        try:
            return self._devices[name]
        except KeyError:
            raise ConfigurationIntegrityError(
                f"Registry for {self.airframe} has no device {name!r}"
            ) from None

    def device_by_id(self, device_id: int) -> Optional[Device]:
        return self._device_ids.get(device_id)

    def resolve(self, device_name: str, command_name: str) -> ResolvedCommand:
        """Resolve a device/command name pair to simulator identifiers.

        Raises:
            ConfigurationIntegrityError: If either name is unknown.
        """

        device = self.device(device_name)
        command = device.command(command_name)
        return ResolvedCommand(
            device_id=device.id,
            command_id=command.id,
            value_range=command.value_range,
            activate=command.activate,
            delay_ms=command.delay_ms,
            name=f"{device.name}.{command.name}",
        )

    def __iter__(self) -> Iterator[Device]:
        return iter(self._devices.values())

    def __len__(self) -> int:
        return len(self._devices)
