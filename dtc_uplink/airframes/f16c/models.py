"""F-16C configuration objects consumed by the builders."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional

from ...core.navpoints import NavpointInfo, NavpointSystem
from ...core.script import ScriptValidationError

MAX_STEERPOINTS = 99
CMDS_PROGRAM_NAMES = ("MAN 1", "MAN 2", "MAN 3", "MAN 4", "PANIC", "BYPASS")

_TOS_PATTERN = re.compile(r"^\d{2}:\d{2}:\d{2}$")
_FREQUENCY_PATTERN = re.compile(r"^\d{3}(\.\d{1,3})?$")


def _int_field(name: str, text: str, low: int, high: int) -> str:
    try:
        value = int(text)
    except ValueError:
        raise ScriptValidationError(f"{name} {text!r} is not an integer") from None
    if not low <= value <= high:
        raise ScriptValidationError(f"{name} {value} outside [{low}, {high}]")
    return str(value)


def _decimal_field(name: str, text: str, low: str, high: str, places: int) -> str:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ScriptValidationError(f"{name} {text!r} is not a number") from None
    if not value.is_finite():
        raise ScriptValidationError(f"{name} {text!r} is not a number")
    if not Decimal(low) <= value <= Decimal(high):
        raise ScriptValidationError(f"{name} {value} outside [{low}, {high}]")
    return f"{value:.{places}f}"


# ----------------------------------------------------------------------
# Steerpoints
# ----------------------------------------------------------------------
@dataclass(slots=True)
class SteerpointInfo(NavpointInfo):
    tos: str = ""

    def tos_text(self) -> str:
        if not self.tos:
            return ""
        if not _TOS_PATTERN.match(self.tos):
            raise ScriptValidationError(f"Time on steerpoint {self.tos!r} is not HH:MM:SS")
        return self.tos


def steerpoint_system(points: Optional[List[SteerpointInfo]] = None) -> NavpointSystem[SteerpointInfo]:
    return NavpointSystem(
        factory=SteerpointInfo, points=list(points or []), max_count=MAX_STEERPOINTS
    )


# ----------------------------------------------------------------------
# Countermeasures
# ----------------------------------------------------------------------
@dataclass(slots=True)
class CMDSProgram:
    """One chaff or flare program; empty fields keep the jet's value."""

    bq: str = ""
    bi: str = ""
    sq: str = ""
    si: str = ""

    @property
    def is_default(self) -> bool:
        return not (self.bq or self.bi or self.sq or self.si)

    def field_values(self) -> List[str]:
        """Return BQ, BI, SQ, SI as normalised text, ``""`` for unset fields.

        Raises:
            ScriptValidationError: If a set field is outside its legal range.
        """

        return [
            _int_field("BQ", self.bq, 0, 99) if self.bq else "",
            _decimal_field("BI", self.bi, "0.020", "10.000", 3) if self.bi else "",
            _int_field("SQ", self.sq, 0, 99) if self.sq else "",
            _decimal_field("SI", self.si, "0.50", "150.00", 2) if self.si else "",
        ]


def _programs() -> List[CMDSProgram]:
    return [CMDSProgram() for _ in CMDS_PROGRAM_NAMES]


@dataclass(slots=True)
class CMDSSystem:
    bingo_chaff: str = ""
    bingo_flare: str = ""
    chaff: List[CMDSProgram] = field(default_factory=_programs)
    flare: List[CMDSProgram] = field(default_factory=_programs)

    @property
    def is_default(self) -> bool:
        return (
            not self.bingo_chaff
            and not self.bingo_flare
            and all(program.is_default for program in self.chaff)
            and all(program.is_default for program in self.flare)
        )

    def bingo_values(self) -> tuple[str, str]:
        return (
            _int_field("Bingo chaff", self.bingo_chaff, 0, 99) if self.bingo_chaff else "",
            _int_field("Bingo flare", self.bingo_flare, 0, 99) if self.bingo_flare else "",
        )


# ----------------------------------------------------------------------
# Radios
# ----------------------------------------------------------------------
RADIO_LIMITS = {
    "COM1": (Decimal("225.000"), Decimal("399.975")),
    "COM2": (Decimal("108.000"), Decimal("151.975")),
}
MAX_PRESET = 20


def frequency_text(radio: str, frequency: str) -> str:
    if not _FREQUENCY_PATTERN.match(frequency):
        raise ScriptValidationError(f"{radio} frequency {frequency!r} is not NNN.NNN")
    low, high = RADIO_LIMITS[radio]
    value = Decimal(frequency)
    if not low <= value <= high:
        raise ScriptValidationError(f"{radio} frequency {frequency} outside [{low}, {high}]")
    return f"{value:.3f}"


@dataclass(slots=True)
class RadioPreset:
    preset: int
    frequency: str


@dataclass(slots=True)
class RadioSettings:
    presets: List[RadioPreset] = field(default_factory=list)
    monitor_guard: bool = False
    initial_tuning: str = ""

    @property
    def is_default(self) -> bool:
        return not self.presets and not self.monitor_guard and not self.initial_tuning


@dataclass(slots=True)
class RadioSystem:
    com1: RadioSettings = field(default_factory=RadioSettings)
    com2: RadioSettings = field(default_factory=RadioSettings)

    @property
    def is_default(self) -> bool:
        return self.com1.is_default and self.com2.is_default


# ----------------------------------------------------------------------
# Aggregate
# ----------------------------------------------------------------------
@dataclass
class F16CConfiguration:
    name: str = ""
    stpt: NavpointSystem[SteerpointInfo] = field(default_factory=steerpoint_system)
    cmds: CMDSSystem = field(default_factory=CMDSSystem)
    radio: RadioSystem = field(default_factory=RadioSystem)


def _steerpoint_from_dict(data: Mapping[str, Any], index: int) -> SteerpointInfo:
    return SteerpointInfo(
        number=int(data.get("number", index + 1)),
        name=str(data.get("name", "")),
        lat=None if data.get("lat") is None else float(data["lat"]),
        lon=None if data.get("lon") is None else float(data["lon"]),
        alt=None if data.get("alt") is None else int(data["alt"]),
        tos=str(data.get("tos", "")),
    )


def _program_from_dict(data: Mapping[str, Any]) -> CMDSProgram:
    return CMDSProgram(
        bq=str(data.get("bq", "")),
        bi=str(data.get("bi", "")),
        sq=str(data.get("sq", "")),
        si=str(data.get("si", "")),
    )


def _programs_from_list(items: Any) -> List[CMDSProgram]:
    programs = [_program_from_dict(item) for item in (items or [])]
    if len(programs) > len(CMDS_PROGRAM_NAMES):
        raise ValueError(f"At most {len(CMDS_PROGRAM_NAMES)} CMDS programs per kind")
    programs.extend(CMDSProgram() for _ in range(len(CMDS_PROGRAM_NAMES) - len(programs)))
    return programs


def _radio_from_dict(data: Mapping[str, Any]) -> RadioSettings:
    presets = [
        RadioPreset(preset=int(item["preset"]), frequency=str(item["frequency"]))
        for item in data.get("presets", [])
    ]
    return RadioSettings(
        presets=presets,
        monitor_guard=bool(data.get("monitor_guard", False)),
        initial_tuning=str(data.get("initial_tuning", "")),
    )


def configuration_from_dict(data: Mapping[str, Any]) -> F16CConfiguration:
    """Decode the plain-JSON form used by the command line."""

    stpt_items = data.get("stpt", [])
    cmds = data.get("cmds", {})
    radio = data.get("radio", {})
    return F16CConfiguration(
        name=str(data.get("name", "")),
        stpt=steerpoint_system(
            [_steerpoint_from_dict(item, index) for index, item in enumerate(stpt_items)]
        ),
        cmds=CMDSSystem(
            bingo_chaff=str(cmds.get("bingo_chaff", "")),
            bingo_flare=str(cmds.get("bingo_flare", "")),
            chaff=_programs_from_list(cmds.get("chaff")),
            flare=_programs_from_list(cmds.get("flare")),
        ),
        radio=RadioSystem(
            com1=_radio_from_dict(radio.get("com1", {})),
            com2=_radio_from_dict(radio.get("com2", {})),
        ),
    )
