"""F-16C upload agent."""

from __future__ import annotations

from ...core.agent import UploadAgent
from .builders import CMDSBuilder, F16CTeardownBuilder, RadioBuilder, STPTBuilder
from .commands import AIRFRAME


class F16CUploadAgent(UploadAgent):
    airframe = AIRFRAME
    system_builders = (RadioBuilder, CMDSBuilder, STPTBuilder)
    teardown_builder = F16CTeardownBuilder
