"""Framework-neutral log event consumed by the message factory.

Every binding (currently the stdlib :mod:`logging` handler) translates its own
record type into a :class:`LogEvent`; nothing downstream knows which logging
framework produced it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class LogEvent:
    """Narrow view of one log call.

    Attributes
    ----------
    timestamp_ms:
        Event time in milliseconds since the epoch.
    severity:
        Framework severity name (``"ERROR"``, ``"WARN"``, ...), translated via
        :func:`lib_log_gelf.domain.levels.syslog_level_for`.
    message:
        Rendered message text; ``None`` means there is nothing to publish.
    logger_name:
        Name of the emitting logger.
    exc_info:
        Exception attached to the call, if any.
    source_class, source_method:
        Code location that issued the call.
    thread_name:
        Name of the emitting thread.
    file, line:
        Source file and line of the call, when the framework knows them.
    extra:
        Caller-supplied key/value pairs emitted as additional fields.
    """

    timestamp_ms: int
    severity: str
    message: str | None
    logger_name: str | None = None
    exc_info: BaseException | None = None
    source_class: str | None = None
    source_method: str | None = None
    thread_name: str | None = None
    file: str | None = None
    line: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", dict(self.extra))


__all__ = ["LogEvent"]
