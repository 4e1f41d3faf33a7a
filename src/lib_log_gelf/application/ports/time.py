"""Port for wall-clock time in epoch milliseconds."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Provide the current time used for chunk message ids."""

    def now_ms(self) -> int: ...


__all__ = ["ClockPort"]
