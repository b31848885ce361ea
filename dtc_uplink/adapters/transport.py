"""One-shot TCP sender for compiled command scripts."""

from __future__ import annotations

import asyncio
import logging
import socket

from ..core.script import CommandScript

LOGGER = logging.getLogger(__name__)


class ScriptTransport:
    """Send a serialized script to the simulator's command listener.

    Failures to reach the simulator are reported as ``False``; the
    simulator may simply not be running and the caller decides how to tell
    the user.
    """

    def __init__(self, host: str, port: int, *, timeout: float = 2.0) -> None:
        self._host = host
        self._port = port
        self._timeout = timeout
        self.sent = 0

    @property
    def endpoint(self) -> tuple[str, int]:
        return self._host, self._port

    def send(self, payload: str) -> bool:
        """Blocking send of one wire string, terminated by a newline."""

        data = (payload + "\n").encode("utf-8")
        try:
            with socket.create_connection(
                (self._host, self._port), timeout=self._timeout
            ) as sock:
                sock.sendall(data)
        except OSError as exc:
            LOGGER.warning(
                "Unable to reach simulator at %s:%s: %s", self._host, self._port, exc
            )
            return False

        self.sent += 1
        LOGGER.debug("Sent %d bytes to %s:%s", len(data), self._host, self._port)
        return True

    def send_script(self, script: CommandScript) -> bool:
        if script.is_empty:
            LOGGER.info("Nothing to upload; skipping send")
            return True
        return self.send(script.serialize())

    async def send_async(self, script: CommandScript) -> bool:
        """Run :meth:`send_script` off the event loop."""

        return await asyncio.to_thread(self.send_script, script)
