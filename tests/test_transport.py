import asyncio
import socket

import pytest

from dtc_uplink.adapters import ScriptTransport
from dtc_uplink.core import CommandScript
from dtc_uplink.core.registry import ResolvedCommand
from dtc_uplink.core.script import begin_marker, end_marker

PRESS = ResolvedCommand(17, 3016, (0, 1), 1, 100, "UFC.ENTR")


def _script() -> CommandScript:
    script = CommandScript()
    script.append(begin_marker())
    script.invoke(PRESS)
    script.append(end_marker())
    return script.seal()


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.asyncio
async def test_send_async_delivers_wire_string():
    received: asyncio.Queue[bytes] = asyncio.Queue()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await received.put(await reader.readline())
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    transport = ScriptTransport("127.0.0.1", port)
    script = _script()

    try:
        assert await transport.send_async(script) is True
        line = await asyncio.wait_for(received.get(), timeout=5)
    finally:
        server.close()
        await server.wait_closed()

    assert line.decode("utf-8") == script.serialize() + "\n"
    assert transport.sent == 1


def test_connection_refused_returns_false(caplog):
    transport = ScriptTransport("127.0.0.1", _closed_port(), timeout=0.5)

    with caplog.at_level("WARNING"):
        assert transport.send_script(_script()) is False

    assert transport.sent == 0
    assert "Unable to reach simulator" in caplog.text


def test_timeout_returns_false(monkeypatch):
    def fail(*args, **kwargs):
        raise socket.timeout("timed out")

    monkeypatch.setattr(socket, "create_connection", fail)

    assert ScriptTransport("127.0.0.1", 1).send("[]") is False


def test_empty_script_is_not_sent(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("empty scripts must not be sent")

    monkeypatch.setattr(socket, "create_connection", fail)
    script = CommandScript()
    script.append(begin_marker())
    script.append(end_marker())

    assert ScriptTransport("127.0.0.1", 1).send_script(script) is True
