"""Port for start/stop/error notices.

Notices travel on a channel separate from :mod:`logging` so a failing GELF
endpoint can never feed its own error reports back into the handler that is
failing.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class DiagnosticsPort(Protocol):
    """Receive lifecycle and failure notices from the sender stack."""

    def notice(self, event: str, payload: Mapping[str, Any]) -> None:
        """Report ``event`` (``"started"``, ``"send_failed"``, ...) with details."""


__all__ = ["DiagnosticsPort"]
