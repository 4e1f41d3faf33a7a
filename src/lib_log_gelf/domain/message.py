"""GELF message model.

Purpose
-------
Hold the fields of one log event in GELF 1.1 shape. The model is deliberately
mutable: updaters enrich it in place before it is handed to the sender, after
which the caller must not touch it again.

Contents
--------
* :class:`GelfMessage` - dataclass with :meth:`GelfMessage.is_valid`.
* Module constants for the GELF version, the reserved ``id`` key and the
  short-message length limit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .levels import SyslogLevel

GELF_VERSION = "1.1"
RESERVED_FIELD_ID = "id"
MAX_SHORT_MESSAGE_LENGTH = 250


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


@dataclass(slots=True)
class GelfMessage:
    """One log event in GELF shape.

    Attributes
    ----------
    short_message:
        Required headline, at most :data:`MAX_SHORT_MESSAGE_LENGTH` characters.
    host:
        Required origin host name.
    facility:
        Required free-text source tag.
    full_message:
        Optional long text; encoded as ``short_message`` when ``None``.
    timestamp:
        Milliseconds since the epoch.
    level:
        Syslog severity (0..7).
    file, line:
        Optional source location; ``line == 0`` means unset.
    additional_fields:
        Custom fields emitted with a ``_`` prefix. The key ``id`` is reserved
        and never emitted.
    version:
        GELF version, fixed at ``"1.1"``.
    """

    short_message: str | None = None
    host: str | None = None
    facility: str | None = None
    full_message: str | None = None
    timestamp: int = 0
    level: int = int(SyslogLevel.INFO)
    file: str | None = None
    line: int = 0
    additional_fields: dict[str, Any] = field(default_factory=dict)
    version: str = GELF_VERSION

    def add_field(self, key: str, value: Any) -> "GelfMessage":
        """Set an additional field and return ``self`` for chaining."""

        self.additional_fields[key] = value
        return self

    def is_valid(self) -> bool:
        """Return ``True`` when version, host, short message and facility are set.

        Examples
        --------
        >>> GelfMessage(short_message="x", host="h", facility="f").is_valid()
        True
        >>> GelfMessage(short_message="x", host=" ", facility="f").is_valid()
        False
        """

        return not any(
            _is_blank(value)
            for value in (self.version, self.host, self.short_message, self.facility)
        )


__all__ = ["GELF_VERSION", "GelfMessage", "MAX_SHORT_MESSAGE_LENGTH", "RESERVED_FIELD_ID"]
