"""Ports for destination resolution and the UDP/TCP transports.

Contents
--------
* :class:`Destination` - one resolved socket address.
* :class:`DestinationPort` - resolves the configured host list.
* :class:`TransportPort` - owns a socket and writes prepared frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence, runtime_checkable

from lib_log_gelf.domain.protocol import TransportProtocol


@dataclass(slots=True, frozen=True)
class Destination:
    """Resolved address as returned by :func:`socket.getaddrinfo`."""

    family: int
    sockaddr: tuple[Any, ...]

    @property
    def address(self) -> str:
        return str(self.sockaddr[0])

    @property
    def port(self) -> int:
        return int(self.sockaddr[1])

    def __str__(self) -> str:
        if ":" in self.address:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


@runtime_checkable
class DestinationPort(Protocol):
    """Turn the configured host list into one socket address."""

    def resolve(self) -> Destination:
        """Return the chosen destination or raise ``DestinationResolutionError``."""


@runtime_checkable
class TransportPort(Protocol):
    """Owns a socket and writes already-framed bytes to the destination.

    ``send`` returns ``False`` when the frames could not be written; the
    failure has then been reported through diagnostics and the message is
    dropped.
    """

    protocol: TransportProtocol

    @property
    def is_open(self) -> bool: ...

    def open(self) -> None: ...

    def send(self, frames: Sequence[bytes]) -> bool: ...

    def close(self) -> None: ...


__all__ = ["Destination", "DestinationPort", "TransportPort"]
