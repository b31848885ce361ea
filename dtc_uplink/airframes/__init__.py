"""Per-airframe registries, builders and upload agents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Type

from ..core.agent import UploadAgent
from ..core.builder import DelayProfile, UploadFeedback
from ..core.context import SimulatorContext
from ..core.protocols import ScriptSender
from ..core.registry import CommandRegistry
from . import a10c, f16c


@dataclass(frozen=True, slots=True)
class AirframeSupport:
    key: str
    label: str
    default_delay_ms: int
    build_registry: Callable[[DelayProfile], CommandRegistry]
    agent_type: Type[UploadAgent]
    configuration_from_dict: Callable[[Mapping[str, Any]], Any]


AIRFRAMES: Dict[str, AirframeSupport] = {
    f16c.AIRFRAME: AirframeSupport(
        key=f16c.AIRFRAME,
        label="F-16C Viper",
        default_delay_ms=f16c.DEFAULT_BASE_DELAY_MS,
        build_registry=f16c.build_registry,
        agent_type=f16c.F16CUploadAgent,
        configuration_from_dict=f16c.configuration_from_dict,
    ),
    a10c.AIRFRAME: AirframeSupport(
        key=a10c.AIRFRAME,
        label="A-10C Warthog",
        default_delay_ms=a10c.DEFAULT_BASE_DELAY_MS,
        build_registry=a10c.build_registry,
        agent_type=a10c.A10CUploadAgent,
        configuration_from_dict=a10c.configuration_from_dict,
    ),
}


def get_airframe(key: str) -> AirframeSupport:
    try:
        return AIRFRAMES[key.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown airframe {key!r}; expected one of {', '.join(sorted(AIRFRAMES))}"
        ) from None


def build_agent(
    key: str,
    delays: DelayProfile,
    *,
    transport: Optional[ScriptSender] = None,
    context: Optional[SimulatorContext] = None,
    feedback: UploadFeedback = UploadFeedback.NONE,
) -> UploadAgent:
    """Create an upload agent with a freshly built registry for ``key``."""

    support = get_airframe(key)
    return support.agent_type(
        support.build_registry(delays),
        delays,
        transport=transport,
        context=context,
        feedback=feedback,
    )


__all__ = ["AIRFRAMES", "AirframeSupport", "build_agent", "get_airframe"]
