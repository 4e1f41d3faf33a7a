"""Socket transports for GELF frames."""

from __future__ import annotations

from .tcp import TcpTransport
from .udp import UdpTransport

__all__ = ["TcpTransport", "UdpTransport"]
