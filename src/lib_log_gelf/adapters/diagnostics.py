"""Diagnostics adapters printing notices outside the logging pipeline.

Purpose
-------
Report handler start/stop and transport failures to the operator without
going through :mod:`logging`: when the GELF endpoint is the thing that is
broken, routing the complaint through the same handler would loop.

Contents
--------
* :class:`RichDiagnostics` - default adapter, writes to stderr via Rich.
* :class:`HookDiagnostics` - wraps a ``(event, payload)`` callback.
* :class:`NullDiagnostics` - discards everything.
* :func:`coerce_diagnostics` - normalise user input into a port.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from rich.console import Console

from lib_log_gelf.application.ports.diagnostics import DiagnosticsPort

DiagnosticHook = Callable[[str, dict[str, Any]], None]

_STYLE_MAP: Mapping[str, str] = {
    "started": "green",
    "stopped": "dim",
    "send_failed": "bold red",
    "tcp_send_failed": "red",
    "udp_send_failed": "red",
    "updater_failed": "yellow",
}
# Unlisted events print unstyled.


class RichDiagnostics(DiagnosticsPort):
    """Print notices to stderr with a Rich console."""

    def __init__(self, *, console: Console | None = None, prefix: str = "lib_log_gelf") -> None:
        self._console = console if console is not None else Console(stderr=True)
        self._prefix = prefix

    def notice(self, event: str, payload: Mapping[str, Any]) -> None:
        """Print ``event`` and its payload as one line.

        Examples
        --------
        >>> from io import StringIO
        >>> console = Console(file=StringIO(), record=True)
        >>> RichDiagnostics(console=console).notice("started", {"endpoint": "udp://gray:12201"})
        >>> console.export_text().strip()
        'lib_log_gelf: started endpoint=udp://gray:12201'
        """

        details = " ".join(f"{key}={value}" for key, value in payload.items())
        line = f"{self._prefix}: {event}" + (f" {details}" if details else "")
        self._console.print(line, style=_STYLE_MAP.get(event, ""), markup=False, highlight=False)


class HookDiagnostics(DiagnosticsPort):
    """Forward notices to a plain callback."""

    def __init__(self, hook: DiagnosticHook) -> None:
        self._hook = hook

    def notice(self, event: str, payload: Mapping[str, Any]) -> None:
        self._hook(event, dict(payload))


class NullDiagnostics(DiagnosticsPort):
    """Discard all notices."""

    def notice(self, event: str, payload: Mapping[str, Any]) -> None:
        return None


def coerce_diagnostics(value: DiagnosticsPort | DiagnosticHook | None) -> DiagnosticsPort:
    """Return a port for ``value``: ``None`` yields :class:`RichDiagnostics`."""

    if value is None:
        return RichDiagnostics()
    if isinstance(value, DiagnosticsPort):
        return value
    if callable(value):
        return HookDiagnostics(value)
    raise TypeError(f"diagnostics must be a DiagnosticsPort or callable, got {type(value).__name__}")


__all__ = ["DiagnosticHook", "HookDiagnostics", "NullDiagnostics", "RichDiagnostics", "coerce_diagnostics"]
