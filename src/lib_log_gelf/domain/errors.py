"""Exception hierarchy raised by the GELF pipeline.

Every error the library raises on purpose derives from :class:`GelfError` so
bindings can report failures without catching unrelated exceptions.
"""

from __future__ import annotations


class GelfError(Exception):
    """Base class for all errors raised by :mod:`lib_log_gelf`."""


class DestinationResolutionError(GelfError):
    """No address could be resolved for any configured hostname."""


class PortRangeExhaustedError(GelfError):
    """Every local UDP port in the bind range is already taken."""


class ChunkLimitError(GelfError):
    """A compressed payload needs more frames than the 1-byte header allows."""


class SenderClosedError(GelfError):
    """``send_message`` was called on a sender after :meth:`close`."""


__all__ = [
    "ChunkLimitError",
    "DestinationResolutionError",
    "GelfError",
    "PortRangeExhaustedError",
    "SenderClosedError",
]
