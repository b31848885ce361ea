"""F-16C subsystem builders.

All of these drive the DED through the UFC, so each one starts by
returning the DED to its main page and leaves it there when done.
"""

from __future__ import annotations

import logging

from ...core.builder import (
    BuilderBase,
    TeardownBuilder,
    UploadFeedback,
    delete_leading_zeros,
    format_ddm,
    remove_separators,
)
from ...core.script import ScriptValidationError
from .commands import INTL, UFC
from .models import (
    MAX_PRESET,
    CMDSProgram,
    F16CConfiguration,
    RadioSettings,
    SteerpointInfo,
    frequency_text,
)

LOGGER = logging.getLogger(__name__)


class F16CBuilderBase(BuilderBase):
    def enter_digits(self, text: str, *, strip: bool = False) -> None:
        """Type ``text`` followed by ENTR; empty text emits nothing."""

        if not text:
            return
        if strip:
            text = delete_leading_zeros(remove_separators(text))
        self.digits(UFC, text)
        self.action(UFC, "ENTR")

    def return_to_main(self) -> None:
        self.actions(UFC, ("RTN", "RTN"))


class STPTBuilder(F16CBuilderBase):
    """Steerpoints via LIST 1 (STPT page)."""

    def build(self, configuration: F16CConfiguration) -> None:
        points = configuration.stpt.points
        if not points:
            return

        self.return_to_main()
        self.actions(UFC, ("LIST", "1", "SEQ"))
        for point in points:
            if not point.is_valid:
                LOGGER.debug("Skipping steerpoint %d without a position", point.number)
                continue
            self.build_steerpoint(point)

        self.digits(UFC, "1")
        self.actions(UFC, ("ENTR", "RTN"))

    def build_steerpoint(self, point: SteerpointInfo) -> None:
        if point.lat is None or point.lon is None:
            raise ScriptValidationError(f"Steerpoint {point.number} has no position")

        self.enter_digits(str(point.number))
        self.action(UFC, "DOWN")

        self.coordinate_2864(UFC, format_ddm(point.lat, is_latitude=True))
        self.action(UFC, "ENTR")
        self.action(UFC, "DOWN")

        self.coordinate_2864(UFC, format_ddm(point.lon, is_latitude=False))
        self.action(UFC, "ENTR")
        self.action(UFC, "DOWN")

        alt = point.alt or 0
        self.enter_digits(f"00{-alt}" if alt < 0 else str(alt))
        self.action(UFC, "DOWN")

        self.enter_digits(remove_separators(point.tos_text()))
        self.action(UFC, "DOWN")


class CMDSBuilder(F16CBuilderBase):
    """Countermeasure bingo levels and programs via LIST 7."""

    def build(self, configuration: F16CConfiguration) -> None:
        cmds = configuration.cmds
        if cmds.is_default:
            return

        bingo_chaff, bingo_flare = cmds.bingo_values()

        self.return_to_main()
        self.actions(UFC, ("LIST", "7"))

        self.enter_digits(bingo_chaff)
        self.action(UFC, "DOWN")
        self.enter_digits(bingo_flare)
        self.action(UFC, "UP")

        self.action(UFC, "SEQ")
        for program in cmds.chaff:
            self._program(program)

        self.action(UFC, "SEQ")
        for program in cmds.flare:
            self._program(program)

        self.action(UFC, "RTN")

    def _program(self, program: CMDSProgram) -> None:
        if not program.is_default:
            for value in program.field_values():
                self.enter_digits(value, strip=True)
                self.action(UFC, "DOWN")
        self.action(UFC, "INC")
        self.wait()


class RadioBuilder(F16CBuilderBase):
    """COM1/COM2 presets, guard monitor and initial tuning."""

    def build(self, configuration: F16CConfiguration) -> None:
        radio = configuration.radio
        if radio.is_default:
            return

        self.return_to_main()
        self._radio("COM1", radio.com1, monitor_guard=radio.com1.monitor_guard)
        self._radio("COM2", radio.com2, monitor_guard=False)

    def _radio(self, name: str, settings: RadioSettings, *, monitor_guard: bool) -> None:
        self.action(UFC, name)
        if monitor_guard:
            self.action(UFC, "SEQ")
        self.actions(UFC, ("DOWN", "DOWN"))

        for preset in settings.presets:
            if not 1 <= preset.preset <= MAX_PRESET:
                raise ScriptValidationError(
                    f"{name} preset {preset.preset} outside [1, {MAX_PRESET}]"
                )
            self.enter_digits(str(preset.preset))
            self.action(UFC, "DOWN")
            self.enter_digits(remove_separators(frequency_text(name, preset.frequency)))
            self.action(UFC, "UP")

        self.digits(UFC, "1")
        self.action(UFC, "ENTR")

        if settings.initial_tuning:
            self.actions(UFC, ("DOWN", "DOWN"))
            self.enter_digits(self._tuning_text(name, settings.initial_tuning))

        self.action(UFC, "RTN")

    @staticmethod
    def _tuning_text(name: str, tuning: str) -> str:
        if tuning.isdigit() and len(tuning) <= 2:
            if not 1 <= int(tuning) <= MAX_PRESET:
                raise ScriptValidationError(f"{name} initial preset {tuning} out of range")
            return str(int(tuning))
        return remove_separators(frequency_text(name, tuning))


class F16CTeardownBuilder(TeardownBuilder):
    def reset(self, configuration: F16CConfiguration) -> None:
        self.actions(UFC, ("RTN", "RTN"))
        if self._feedback is UploadFeedback.LIGHTS:
            self.action(INTL, "MAL_IND_LTS_TEST", 1)
            self.wait_ms(2500)
            self.action(INTL, "MAL_IND_LTS_TEST", 0)
