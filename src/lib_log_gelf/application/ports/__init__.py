"""Protocols the application layer depends on."""

from __future__ import annotations

from .diagnostics import DiagnosticsPort
from .time import ClockPort
from .transport import Destination, DestinationPort, TransportPort
from .updater import MessageUpdater

__all__ = [
    "ClockPort",
    "Destination",
    "DestinationPort",
    "DiagnosticsPort",
    "MessageUpdater",
    "TransportPort",
]
