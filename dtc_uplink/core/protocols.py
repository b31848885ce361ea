"""Protocol definitions for collaborators the core calls out to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol

if TYPE_CHECKING:
    from .script import CommandScript


CallbackType = Callable[[dict[str, Any]], Awaitable[None] | None]
UploadRequestCallback = Callable[[], Awaitable[None] | None]


class ConfigurationStore(Protocol):
    """Persistence hook the list editor calls after structural edits."""

    def save(self, tag: str) -> None:
        """Persist the system identified by ``tag``."""
        ...


class ScriptSender(Protocol):
    """Anything that can deliver a compiled script to the simulator."""

    def send_script(self, script: "CommandScript") -> bool:
        ...

    async def send_async(self, script: "CommandScript") -> bool:
        ...
