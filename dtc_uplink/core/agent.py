"""Upload agents: compile a configuration into one script and send it."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional, Sequence, Type

from .builder import BuilderBase, DelayProfile, SetupBuilder, TeardownBuilder, UploadFeedback
from .context import SimulatorContext
from .protocols import ScriptSender
from .registry import CommandRegistry, ConfigurationIntegrityError
from .script import CommandScript, ScriptValidationError

LOGGER = logging.getLogger(__name__)


class UploadAgent:
    """Runs Setup, the airframe's subsystem builders, then Teardown.

    Subclasses set ``airframe`` and ``system_builders``; the order of
    ``system_builders`` is the order the cockpit is driven in.
    """

    airframe: ClassVar[str] = ""
    system_builders: ClassVar[Sequence[Type[BuilderBase]]] = ()
    setup_builder: ClassVar[Type[SetupBuilder]] = SetupBuilder
    teardown_builder: ClassVar[Type[TeardownBuilder]] = TeardownBuilder

    def __init__(
        self,
        registry: CommandRegistry,
        delays: DelayProfile,
        *,
        transport: Optional[ScriptSender] = None,
        context: Optional[SimulatorContext] = None,
        feedback: UploadFeedback = UploadFeedback.NONE,
    ) -> None:
        self._registry = registry
        self._delays = delays
        self._transport = transport
        self._context = context
        self._feedback = feedback

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    def compile(self, configuration: Any) -> CommandScript:
        """Build the full script for ``configuration``.

        Raises:
            ConfigurationIntegrityError: A builder referenced an unknown
                device or command.
            ScriptValidationError: A configured value is outside the legal
                domain of the command it drives.
        """

        script = CommandScript()
        try:
            self.setup_builder(self._registry, script, self._delays).build(configuration)
            for builder_type in self.system_builders:
                builder_type(self._registry, script, self._delays).build(configuration)
            self.teardown_builder(
                self._registry, script, self._delays, feedback=self._feedback
            ).build(configuration)
        except (ConfigurationIntegrityError, ScriptValidationError) as exc:
            LOGGER.error("Unable to compile %s upload: %s", self.airframe, exc)
            raise
        script.seal()
        LOGGER.debug(
            "Compiled %s script with %d invocation(s)", self.airframe, len(script)
        )
        return script

    def is_simulator_ready(self) -> bool:
        context = self._context
        if context is None:
            return True
        return context.is_listening_for(self.airframe)

    def load(self, configuration: Any) -> bool:
        """Compile and send synchronously; build errors propagate."""

        if not self.is_simulator_ready():
            LOGGER.warning("Simulator or %s airframe unavailable", self.airframe)
            return False
        script = self.compile(configuration)
        return self._require_transport().send_script(script)

    async def load_async(self, configuration: Any) -> bool:
        """Compile on the loop, then send from a worker thread."""

        if not self.is_simulator_ready():
            LOGGER.warning("Simulator or %s airframe unavailable", self.airframe)
            return False
        script = self.compile(configuration)
        return await self._require_transport().send_async(script)

    def _require_transport(self) -> ScriptSender:
        if self._transport is None:
            raise RuntimeError(f"{type(self).__name__} has no transport")
        return self._transport
