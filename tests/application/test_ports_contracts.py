from __future__ import annotations

import socket

from lib_log_gelf.adapters.diagnostics import NullDiagnostics, RichDiagnostics
from lib_log_gelf.adapters.resolver import DestinationResolver
from lib_log_gelf.adapters.transport import TcpTransport, UdpTransport
from lib_log_gelf.adapters.updaters import ContextFieldsUpdater, ProcessIdUpdater
from lib_log_gelf.application.ports import (
    ClockPort,
    Destination,
    DestinationPort,
    DiagnosticsPort,
    MessageUpdater,
    TransportPort,
)


def test_adapters_satisfy_their_ports() -> None:
    resolver = DestinationResolver("localhost", 12201)

    assert isinstance(resolver, DestinationPort)
    assert isinstance(UdpTransport(resolver), TransportPort)
    assert isinstance(TcpTransport(resolver), TransportPort)
    assert isinstance(NullDiagnostics(), DiagnosticsPort)
    assert isinstance(RichDiagnostics(), DiagnosticsPort)
    assert isinstance(ContextFieldsUpdater(), MessageUpdater)
    assert isinstance(ProcessIdUpdater(), MessageUpdater)


def test_clock_port_is_structural() -> None:
    class Clock:
        def now_ms(self) -> int:
            return 1

    assert isinstance(Clock(), ClockPort)


def test_destination_renders_ipv4_and_ipv6() -> None:
    v4 = Destination(family=socket.AF_INET, sockaddr=("10.0.0.5", 12201))
    v6 = Destination(family=socket.AF_INET6, sockaddr=("::1", 12201, 0, 0))

    assert (v4.address, v4.port, str(v4)) == ("10.0.0.5", 12201, "10.0.0.5:12201")
    assert str(v6) == "[::1]:12201"
