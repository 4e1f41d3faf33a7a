"""Composition helpers wiring settings to resolver, transport and sender.

Purpose
-------
Translate a :class:`~lib_log_gelf.config.GelfSettings` into live objects so
callers (the logging handler, the CLI, host applications) never assemble
transports by hand.

Contents
--------
* :func:`create_resolver`, :func:`create_transport`, :func:`create_sender`.
* :func:`summary_info` - metadata banner used by the CLI.
"""

from __future__ import annotations

import socket

from lib_log_gelf import __init__conf__
from lib_log_gelf.adapters.diagnostics import DiagnosticHook, coerce_diagnostics
from lib_log_gelf.adapters.resolver import DestinationResolver
from lib_log_gelf.adapters.transport import TcpTransport, UdpTransport
from lib_log_gelf.application.ports import ClockPort, DestinationPort, DiagnosticsPort, TransportPort
from lib_log_gelf.application.sender import GelfSender
from lib_log_gelf.config import GelfSettings
from lib_log_gelf.domain.protocol import TransportProtocol


def create_resolver(settings: GelfSettings) -> DestinationResolver:
    """Build the resolver for the configured host list and port."""

    socktype = socket.SOCK_STREAM if settings.protocol is TransportProtocol.TCP else socket.SOCK_DGRAM
    return DestinationResolver(settings.host, settings.port, socktype=socktype)


def create_transport(
    settings: GelfSettings,
    *,
    diagnostics: DiagnosticsPort,
    resolver: DestinationPort | None = None,
) -> TransportPort:
    """Return the UDP or TCP transport selected by ``settings.protocol``."""

    resolver = resolver or create_resolver(settings)
    if settings.protocol is TransportProtocol.TCP:
        return TcpTransport(resolver, timeout=settings.tcp_timeout, diagnostics=diagnostics)
    return UdpTransport(resolver, diagnostics=diagnostics)


def create_sender(
    settings: GelfSettings | None = None,
    *,
    diagnostics: DiagnosticsPort | DiagnosticHook | None = None,
    resolver: DestinationPort | None = None,
    clock: ClockPort | None = None,
) -> GelfSender:
    """Assemble a :class:`GelfSender` for ``settings`` (defaults when ``None``).

    Examples
    --------
    >>> from lib_log_gelf.adapters.diagnostics import NullDiagnostics
    >>> sender = create_sender(GelfSettings(protocol="tcp"), diagnostics=NullDiagnostics())
    >>> sender.protocol.value, sender.state.value
    ('tcp', 'unconnected')
    >>> sender.close()
    """

    settings = settings or GelfSettings()
    port = coerce_diagnostics(diagnostics)
    transport = create_transport(settings, diagnostics=port, resolver=resolver)
    return GelfSender(transport, clock=clock)


def summary_info() -> str:
    """Return the metadata banner printed by the CLI.

    Examples
    --------
    >>> "Info for lib_log_gelf" in summary_info()
    True
    """

    lines: list[str] = []

    def _capture(text: str) -> None:
        lines.append(text)

    __init__conf__.print_info(writer=_capture)
    return "".join(lines)


__all__ = ["create_resolver", "create_sender", "create_transport", "summary_info"]
