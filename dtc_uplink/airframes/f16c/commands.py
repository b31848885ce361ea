"""F-16C cockpit devices."""

from __future__ import annotations

from ...core.builder import DelayCategory, DelayProfile
from ...core.registry import ROCKER_RANGE, CommandRegistry

AIRFRAME = "f16c"
DEFAULT_BASE_DELAY_MS = 200

UFC = "UFC"
SMS = "SMS"
HOTAS = "HOTAS"
LMFD = "LMFD"
RMFD = "RMFD"
EHSI = "EHSI"
INTL = "INTL"


def build_registry(delays: DelayProfile) -> CommandRegistry:
    """Build the frozen F-16C registry with delays resolved from ``delays``."""

    step = delays.delay(DelayCategory.STEP)
    menu = delays.delay(DelayCategory.MENU_OPEN)
    confirm = delays.delay(DelayCategory.CONFIRM)
    navigate = delays.delay(DelayCategory.LIST_NAVIGATE)
    enter = delays.delay(DelayCategory.ENTER_VALUE)

    registry = CommandRegistry(AIRFRAME)

    sms = registry.register_device(22, SMS)
    sms.add_command(3002, "LEFT_HDPT")
    sms.add_command(3003, "RIGHT_HDPT")

    ufc = registry.register_device(17, UFC)
    for digit in range(10):
        ufc.add_command(3002 + digit, str(digit), delay_ms=enter)
    ufc.add_command(3012, "COM1", delay_ms=enter)
    ufc.add_command(3013, "COM2", delay_ms=enter)
    ufc.add_command(3015, "LIST", delay_ms=navigate)
    ufc.add_command(3016, "ENTR", delay_ms=confirm)
    ufc.add_command(3017, "RCL", delay_ms=enter)
    ufc.add_command(3018, "AA", delay_ms=menu)
    ufc.add_command(3019, "AG", delay_ms=menu)
    ufc.add_command(3030, "INC", delay_ms=step)
    ufc.add_command(3031, "DEC", delay_ms=step)
    ufc.add_command(3032, "RTN", ROCKER_RANGE, activate=-1, delay_ms=step)
    ufc.add_command(3033, "SEQ", delay_ms=step)
    ufc.add_command(3034, "UP", delay_ms=step)
    ufc.add_command(3035, "DOWN", ROCKER_RANGE, activate=-1, delay_ms=step)

    # DGFT/MSL share one three-position switch.
    hotas = registry.register_device(16, HOTAS)
    hotas.add_command(3030, "DGFT", ROCKER_RANGE, activate=1)
    hotas.add_command(3030, "MSL", ROCKER_RANGE, activate=-1)
    hotas.add_command(3030, "CENTER", ROCKER_RANGE, activate=0)

    for device_id, name in ((24, LMFD), (25, RMFD)):
        mfd = registry.register_device(device_id, name)
        for osb in range(1, 21):
            mfd.add_command(3000 + osb, f"OSB-{osb:02d}", delay_ms=navigate)

    ehsi = registry.register_device(28, EHSI)
    ehsi.add_command(3001, "MODE", delay_ms=menu)

    intl = registry.register_device(12, INTL)
    intl.add_command(3002, "MAL_IND_LTS_TEST", delay_ms=menu)

    return registry.freeze()
