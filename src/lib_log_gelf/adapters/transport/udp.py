"""UDP transport sending each frame as an independent datagram.

On first use the transport resolves the destination and binds a local socket
to the first free port in :data:`PORT_MIN`..:data:`PORT_MAX`. Datagrams are
fire-and-forget: when one frame fails, the remaining frames of that message
are abandoned, the failure is reported, and the socket stays open for the
next message.
"""

from __future__ import annotations

import logging
import socket
from typing import Callable, Sequence

from lib_log_gelf.adapters.diagnostics import NullDiagnostics
from lib_log_gelf.application.ports import DiagnosticsPort
from lib_log_gelf.application.ports.transport import Destination, DestinationPort, TransportPort
from lib_log_gelf.domain.errors import PortRangeExhaustedError
from lib_log_gelf.domain.protocol import TransportProtocol

logger = logging.getLogger(__name__)

PORT_MIN = 9000
PORT_MAX = 9888

_WILDCARD = {
    socket.AF_INET: "0.0.0.0",
    socket.AF_INET6: "::",
}

SocketFactory = Callable[..., socket.socket]


class UdpTransport(TransportPort):
    """Unacknowledged datagram transport."""

    protocol = TransportProtocol.UDP

    def __init__(
        self,
        resolver: DestinationPort,
        *,
        port_range: tuple[int, int] = (PORT_MIN, PORT_MAX),
        diagnostics: DiagnosticsPort | None = None,
        socket_factory: SocketFactory = socket.socket,
    ) -> None:
        low, high = port_range
        if low > high:
            raise ValueError(f"invalid port range {port_range!r}")
        self._resolver = resolver
        self._port_range = (low, high)
        self._diagnostics = diagnostics or NullDiagnostics()
        self._socket_factory = socket_factory
        self._socket: socket.socket | None = None
        self._destination: Destination | None = None

    @property
    def is_open(self) -> bool:
        return self._socket is not None

    @property
    def destination(self) -> Destination | None:
        return self._destination

    @property
    def local_port(self) -> int | None:
        if self._socket is None:
            return None
        return int(self._socket.getsockname()[1])

    def open(self) -> None:
        self._connection()

    def _connection(self) -> tuple[socket.socket, Destination]:
        sock, destination = self._socket, self._destination
        if sock is None or destination is None:
            destination = self._resolver.resolve()
            sock = self._bind(destination.family)
            self._socket, self._destination = sock, destination
            logger.debug("UDP socket bound to port %s for %s", self.local_port, destination)
        return sock, destination

    def _bind(self, family: int) -> socket.socket:
        low, high = self._port_range
        host = _WILDCARD.get(family, "")
        last_error: OSError | None = None
        for port in range(low, high + 1):
            sock = self._socket_factory(family, socket.SOCK_DGRAM)
            try:
                sock.bind((host, port))
            except OSError as exc:
                sock.close()
                last_error = exc
                continue
            return sock
        raise PortRangeExhaustedError(f"no free local UDP port in {low}..{high}: {last_error}")

    def send(self, frames: Sequence[bytes]) -> bool:
        sock, destination = self._connection()
        for index, frame in enumerate(frames):
            try:
                sock.sendto(frame, destination.sockaddr)
            except OSError as exc:
                self._diagnostics.notice(
                    "udp_send_failed",
                    {
                        "destination": str(destination),
                        "frame": f"{index + 1}/{len(frames)}",
                        "error": repr(exc),
                    },
                )
                return False
        return True

    def close(self) -> None:
        sock, self._socket = self._socket, None
        self._destination = None
        if sock is not None:
            sock.close()


__all__ = ["PORT_MAX", "PORT_MIN", "UdpTransport"]
