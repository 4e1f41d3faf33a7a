"""TCP transport writing NUL-terminated GELF frames to a persistent stream.

The connection is opened lazily on the first send with a non-blocking socket.
Connect completion and partial writes are awaited with :mod:`selectors`,
bounded by ``timeout`` seconds (``None`` waits forever). Any I/O failure
closes the socket, forgets the resolved destination, reports the failure and
drops the in-flight message; the next send resolves and connects again.
"""

from __future__ import annotations

import errno
import logging
import os
import selectors
import socket
import time
from typing import Callable, Sequence

from lib_log_gelf.adapters.diagnostics import NullDiagnostics
from lib_log_gelf.application.ports import DiagnosticsPort
from lib_log_gelf.application.ports.transport import Destination, DestinationPort, TransportPort
from lib_log_gelf.domain.protocol import TransportProtocol

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

_CONNECT_PENDING = {
    errno.EINPROGRESS,
    errno.EALREADY,
    errno.EWOULDBLOCK,
    getattr(errno, "WSAEWOULDBLOCK", errno.EWOULDBLOCK),
}

SocketFactory = Callable[..., socket.socket]
SelectorFactory = Callable[[], selectors.BaseSelector]


class TcpTransport(TransportPort):
    """Persistent stream transport with self-healing reconnect."""

    protocol = TransportProtocol.TCP

    def __init__(
        self,
        resolver: DestinationPort,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        diagnostics: DiagnosticsPort | None = None,
        socket_factory: SocketFactory = socket.socket,
        selector_factory: SelectorFactory = selectors.DefaultSelector,
    ) -> None:
        self._resolver = resolver
        self._timeout = timeout
        self._diagnostics = diagnostics or NullDiagnostics()
        self._socket_factory = socket_factory
        self._selector_factory = selector_factory
        self._socket: socket.socket | None = None
        self._destination: Destination | None = None

    @property
    def is_open(self) -> bool:
        return self._socket is not None

    @property
    def destination(self) -> Destination | None:
        return self._destination

    def open(self) -> None:
        self._connection()

    def _connection(self) -> tuple[socket.socket, Destination]:
        if self._socket is not None and self._destination is not None:
            return self._socket, self._destination
        destination = self._resolver.resolve()
        sock = self._socket_factory(destination.family, socket.SOCK_STREAM)
        try:
            sock.setblocking(False)
            self._connect(sock, destination)
        except OSError:
            sock.close()
            raise
        self._socket = sock
        self._destination = destination
        logger.debug("TCP connection established to %s", destination)
        return sock, destination

    def _deadline(self) -> float | None:
        return None if self._timeout is None else time.monotonic() + self._timeout

    def _wait_writable(self, sock: socket.socket, deadline: float | None, what: str) -> None:
        remaining = None if deadline is None else deadline - time.monotonic()
        if remaining is not None and remaining <= 0:
            raise TimeoutError(f"{what} timed out after {self._timeout}s")
        with self._selector_factory() as selector:
            selector.register(sock, selectors.EVENT_WRITE)
            if not selector.select(remaining):
                raise TimeoutError(f"{what} timed out after {self._timeout}s")

    def _connect(self, sock: socket.socket, destination: Destination) -> None:
        code = sock.connect_ex(destination.sockaddr)
        if code == 0:
            return
        if code not in _CONNECT_PENDING:
            raise OSError(code, os.strerror(code))
        self._wait_writable(sock, self._deadline(), "connect")
        code = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if code != 0:
            raise OSError(code, os.strerror(code))

    def _write_all(self, sock: socket.socket, data: bytes) -> None:
        view = memoryview(data)
        deadline = self._deadline()
        while view:
            try:
                written = sock.send(view)
            except (BlockingIOError, InterruptedError):
                written = 0
            if written:
                view = view[written:]
                continue
            self._wait_writable(sock, deadline, "write")

    def send(self, frames: Sequence[bytes]) -> bool:
        destination = self._destination
        try:
            sock, destination = self._connection()
            for frame in frames:
                self._write_all(sock, frame)
        except OSError as exc:
            self._teardown()
            self._diagnostics.notice(
                "tcp_send_failed",
                {"destination": str(destination) if destination else self._describe_target(), "error": repr(exc)},
            )
            return False
        return True

    def _describe_target(self) -> str:
        host = getattr(self._resolver, "host", None)
        port = getattr(self._resolver, "port", None)
        return f"{host}:{port}" if host is not None else "unresolved"

    def _teardown(self) -> None:
        sock, self._socket = self._socket, None
        self._destination = None
        if sock is not None:
            try:
                sock.close()
            except OSError as exc:
                logger.debug("error closing TCP socket: %s", exc)

    def close(self) -> None:
        self._teardown()


__all__ = ["DEFAULT_TIMEOUT", "TcpTransport"]
