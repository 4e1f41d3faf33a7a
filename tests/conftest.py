from __future__ import annotations

import socket
import threading
import time
from typing import Any, Iterator, Mapping

import pytest

from lib_log_gelf.application.ports import DiagnosticsPort


class RecordingDiagnostics(DiagnosticsPort):
    def __init__(self) -> None:
        self.notices: list[tuple[str, dict[str, Any]]] = []

    def notice(self, event: str, payload: Mapping[str, Any]) -> None:
        self.notices.append((event, dict(payload)))

    def events(self) -> list[str]:
        return [event for event, _ in self.notices]


class UdpServer:
    def __init__(self) -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.settimeout(0.1)
        self.port = self._sock.getsockname()[1]
        self.datagrams: list[tuple[bytes, tuple[str, int]]] = []
        self._running = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> None:
        self._running.set()
        self._thread.start()

    def close(self) -> None:
        self._running.clear()
        self._thread.join(timeout=1)
        self._sock.close()

    def _run(self) -> None:
        while self._running.is_set():
            try:
                data, address = self._sock.recvfrom(65535)
            except socket.timeout:
                continue
            except OSError:
                break
            self.datagrams.append((data, address))

    def wait_for(self, count: int, timeout: float = 2.0) -> list[bytes]:
        deadline = time.monotonic() + timeout
        while len(self.datagrams) < count and time.monotonic() < deadline:
            time.sleep(0.01)
        return [data for data, _ in self.datagrams]


class TcpServer:
    def __init__(self) -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(4)
        self._sock.settimeout(0.1)
        self.port = self._sock.getsockname()[1]
        self.connections = 0
        self._buffer = bytearray()
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._running = threading.Event()

    def start(self) -> None:
        self._running.set()
        self._thread.start()

    def close(self) -> None:
        self._running.clear()
        self._thread.join(timeout=1)
        self._sock.close()

    def _run(self) -> None:
        while self._running.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            self.connections += 1
            threading.Thread(target=self._drain, args=(conn,), daemon=True).start()

    def _drain(self, conn: socket.socket) -> None:
        with conn:
            while True:
                try:
                    data = conn.recv(65536)
                except OSError:
                    return
                if not data:
                    return
                with self._lock:
                    self._buffer.extend(data)

    def frames(self) -> list[bytes]:
        with self._lock:
            raw = bytes(self._buffer)
        return raw.split(b"\x00")[:-1]

    def wait_for(self, count: int, timeout: float = 2.0) -> list[bytes]:
        deadline = time.monotonic() + timeout
        while len(self.frames()) < count and time.monotonic() < deadline:
            time.sleep(0.01)
        return self.frames()


@pytest.fixture
def diagnostics() -> RecordingDiagnostics:
    return RecordingDiagnostics()


@pytest.fixture
def udp_server() -> Iterator[UdpServer]:
    server = UdpServer()
    server.start()
    try:
        yield server
    finally:
        server.close()


@pytest.fixture
def tcp_server() -> Iterator[TcpServer]:
    server = TcpServer()
    server.start()
    try:
        yield server
    finally:
        server.close()


@pytest.fixture
def closed_port() -> int:
    """Return a loopback TCP port nothing listens on."""

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]
