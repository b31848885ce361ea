"""A-10C cockpit devices."""

from __future__ import annotations

import string

from ...core.builder import DelayCategory, DelayProfile
from ...core.registry import CommandRegistry

AIRFRAME = "a10c"
DEFAULT_BASE_DELAY_MS = 200

CDU = "CDU"


def build_registry(delays: DelayProfile) -> CommandRegistry:
    """Build the frozen A-10C registry with delays resolved from ``delays``."""

    enter = delays.delay(DelayCategory.ENTER_VALUE)
    confirm = delays.delay(DelayCategory.CONFIRM)
    menu = delays.delay(DelayCategory.MENU_OPEN)

    registry = CommandRegistry(AIRFRAME)

    cdu = registry.register_device(9, CDU)
    # Keypad runs 1..9 then 0.
    for offset, digit in enumerate("1234567890"):
        cdu.add_command(3015 + offset, digit, delay_ms=enter)
    for offset, letter in enumerate(string.ascii_uppercase):
        cdu.add_command(3027 + offset, letter, delay_ms=enter)
    cdu.add_command(3057, "SPC", delay_ms=enter)
    cdu.add_command(3058, "CLR", delay_ms=enter)

    for offset, key in enumerate(("3L", "5L", "7L", "9L", "3R", "5R", "7R", "9R")):
        cdu.add_command(3001 + offset, f"LSK_{key}", delay_ms=confirm)
    cdu.add_command(3011, "WP", delay_ms=menu)

    return registry.freeze()
