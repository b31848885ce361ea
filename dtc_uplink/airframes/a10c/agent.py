"""A-10C upload agent."""

from __future__ import annotations

from ...core.agent import UploadAgent
from .builders import WYPTBuilder
from .commands import AIRFRAME


class A10CUploadAgent(UploadAgent):
    airframe = AIRFRAME
    system_builders = (WYPTBuilder,)
