"""Syslog severities and the fixed severity-name translation table.

Purpose
-------
GELF carries the syslog severity scale (0 = emergency .. 7 = debug). Bindings
hand over a framework-specific severity *name*; :func:`syslog_level_for`
collapses it onto the three levels this library produces.

Contents
--------
* :class:`SyslogLevel` - the full syslog scale for readability.
* :func:`syslog_level_for` - name to level lookup (``ERROR``/``WARNING``/``INFO``).
"""

from __future__ import annotations

from enum import IntEnum


class SyslogLevel(IntEnum):
    """Syslog severity scale used by the GELF ``level`` field."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


_SEVERITY_TABLE = {
    "FATAL": SyslogLevel.ERROR,
    "ERROR": SyslogLevel.ERROR,
    "SEVERE": SyslogLevel.ERROR,
    "WARN": SyslogLevel.WARNING,
    "WARNING": SyslogLevel.WARNING,
}
# Anything not listed here maps to INFO.


def syslog_level_for(severity: str | None) -> int:
    """Return the syslog level for a framework severity name.

    Examples
    --------
    >>> syslog_level_for("severe"), syslog_level_for("WARN"), syslog_level_for("DEBUG")
    (3, 4, 6)
    """

    if not severity:
        return int(SyslogLevel.INFO)
    return int(_SEVERITY_TABLE.get(severity.strip().upper(), SyslogLevel.INFO))


__all__ = ["SyslogLevel", "syslog_level_for"]
