"""Background UDP receiver feeding decoded text to a sink callable."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

DatagramSink = Callable[[str], None]


class UdpListener:
    """Receive datagrams on a daemon thread and hand each one to ``sink``.

    ``sink`` runs on the listener thread; it must marshal onto the event
    loop itself before touching shared state.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sink: DatagramSink,
        *,
        name: str = "udp-listener",
        buffer_size: int = 8 * 1024,
        poll_interval: float = 0.25,
    ) -> None:
        self._host = host
        self._port = port
        self._sink = sink
        self._name = name
        self._buffer_size = buffer_size
        self._poll_interval = poll_interval
        self._socket: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self.packets = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def bound_port(self) -> Optional[int]:
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    def start(self) -> None:
        if self.is_running:
            return

        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self._host, self._port))
        except OSError:
            sock.close()
            raise
        sock.settimeout(self._poll_interval)

        self._socket = sock
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        LOGGER.info("%s listening on udp://%s:%s", self._name, self._host, self.bound_port)

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        self._thread = None
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def _run(self) -> None:
        sock = self._socket
        if sock is None:
            return
        while not self._stop_event.is_set():
            try:
                data, _ = sock.recvfrom(self._buffer_size)
            except socket.timeout:
                continue
            except OSError as exc:
                if not self._stop_event.is_set():
                    LOGGER.warning("%s receive failed: %s", self._name, exc)
                break

            self.packets += 1
            try:
                self._sink(data.decode("utf-8", errors="replace"))
            except Exception:  # pragma: no cover
                LOGGER.exception("%s sink raised an exception", self._name)
