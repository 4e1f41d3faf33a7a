"""Transport protocol selector shared by configuration, sender and transports."""

from __future__ import annotations

from enum import Enum

DEFAULT_PORT = 12201


class TransportProtocol(str, Enum):
    """Wire transport used to reach the GELF input."""

    UDP = "udp"
    TCP = "tcp"

    @classmethod
    def from_name(cls, name: str | "TransportProtocol") -> "TransportProtocol":
        if isinstance(name, TransportProtocol):
            return name
        normalized = name.strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unknown protocol: {name!r}") from exc


__all__ = ["DEFAULT_PORT", "TransportProtocol"]
