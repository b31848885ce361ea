"""Command scripts and their wire encoding."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .registry import ResolvedCommand

MARKER_DEVICE_ID = 0
BEGIN_COMMAND_ID = 1
END_COMMAND_ID = 2
WAIT_DEVICE_ID = -1

BEGIN_MARKER_TEXT = "<upload_prog>"
END_MARKER_TEXT = ""

RECORD_DELIMITER = ","


class ScriptValidationError(ValueError):
    """Raised when a builder tries to emit a value a command cannot take."""


class InvocationKind(str, Enum):
    COMMAND = "command"
    WAIT = "wait"
    BEGIN = "begin"
    END = "end"


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    device_id: int
    command_id: int
    value: float
    delay_ms: int
    label: Optional[str] = None

    @property
    def kind(self) -> InvocationKind:
        if self.device_id == WAIT_DEVICE_ID:
            return InvocationKind.WAIT
        if self.device_id == MARKER_DEVICE_ID:
            if self.command_id == BEGIN_COMMAND_ID:
                return InvocationKind.BEGIN
            if self.command_id == END_COMMAND_ID:
                return InvocationKind.END
        return InvocationKind.COMMAND

    def as_record(self) -> Dict[str, Any]:
        kind = self.kind
        if kind is InvocationKind.BEGIN:
            return {"marker": BEGIN_MARKER_TEXT}
        if kind is InvocationKind.END:
            return {"marker": END_MARKER_TEXT}
        if kind is InvocationKind.WAIT:
            return {"device": "wait", "delay": self.delay_ms}
        return {
            "device": str(self.device_id),
            "code": str(self.command_id),
            "delay": str(self.delay_ms),
            "activate": _format_value(self.value),
        }


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def begin_marker() -> CommandInvocation:
    return CommandInvocation(MARKER_DEVICE_ID, BEGIN_COMMAND_ID, 0, 0, "begin")


def end_marker() -> CommandInvocation:
    return CommandInvocation(MARKER_DEVICE_ID, END_COMMAND_ID, 0, 0, "end")


def wait(delay_ms: int) -> CommandInvocation:
    return CommandInvocation(WAIT_DEVICE_ID, 0, 0, max(0, int(delay_ms)), "wait")


class CommandScript:
    """Write-once, ordered buffer of invocations shared by a set of builders.

    Once :meth:`seal` has been called the script refuses further appends.
    """

    def __init__(self) -> None:
        self._invocations: List[CommandInvocation] = []
        self._sealed = False

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------
    def append(self, invocation: CommandInvocation) -> None:
        if self._sealed:
            raise RuntimeError("Command script is sealed")
        self._invocations.append(invocation)

    def extend(self, invocations: Iterable[CommandInvocation]) -> None:
        for invocation in invocations:
            self.append(invocation)

    def invoke(
        self,
        command: ResolvedCommand,
        value: Optional[float] = None,
        delay_ms: Optional[int] = None,
    ) -> CommandInvocation:
        """Append one use of ``command``, validating ``value`` against its range.

        Raises:
            ScriptValidationError: If ``value`` lies outside the command's range.
        """

        actual = command.activate if value is None else value
        if not command.accepts(actual):
            raise ScriptValidationError(
                f"Value {actual} outside {command.value_range} for {command.name}"
            )
        invocation = CommandInvocation(
            device_id=command.device_id,
            command_id=command.command_id,
            value=actual,
            delay_ms=command.delay_ms if delay_ms is None else max(0, int(delay_ms)),
            label=command.name,
        )
        self.append(invocation)
        return invocation

    def seal(self) -> "CommandScript":
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    @property
    def invocations(self) -> tuple[CommandInvocation, ...]:
        return tuple(self._invocations)

    @property
    def command_count(self) -> int:
        return sum(
            1 for item in self._invocations if item.kind is InvocationKind.COMMAND
        )

    @property
    def is_empty(self) -> bool:
        """True when nothing but markers and waits were appended."""
        return self.command_count == 0

    def __iter__(self) -> Iterator[CommandInvocation]:
        return iter(self._invocations)

    def __len__(self) -> int:
        return len(self._invocations)

    def __getitem__(self, index: int) -> CommandInvocation:
        return self._invocations[index]

    # ------------------------------------------------------------------
    # Wire encoding
    # ------------------------------------------------------------------
    def serialize(self) -> str:
        records = RECORD_DELIMITER.join(
            json.dumps(item.as_record()) for item in self._invocations
        )
        return f"[{records}]"
