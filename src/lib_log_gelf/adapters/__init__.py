"""Adapters implementing the application ports.

The stdlib :mod:`logging` binding lives in
:mod:`lib_log_gelf.adapters.logging_handler` and is imported from the package
root; it is not re-exported here because it depends on the configuration
layer, which itself builds on these adapters.
"""

from __future__ import annotations

from .diagnostics import HookDiagnostics, NullDiagnostics, RichDiagnostics, coerce_diagnostics
from .resolver import DestinationResolver, split_hosts
from .transport import TcpTransport, UdpTransport
from .updaters import ContextFieldsUpdater, ProcessIdUpdater, load_updater

__all__ = [
    "ContextFieldsUpdater",
    "DestinationResolver",
    "HookDiagnostics",
    "NullDiagnostics",
    "ProcessIdUpdater",
    "RichDiagnostics",
    "TcpTransport",
    "UdpTransport",
    "coerce_diagnostics",
    "load_updater",
    "split_hosts",
]
