"""Stdlib :mod:`logging` binding.

Purpose
-------
Plug GELF delivery into any application that already logs through
:mod:`logging`: :class:`GelfHandler` turns each :class:`logging.LogRecord`
into a :class:`~lib_log_gelf.domain.events.LogEvent`, lets the shared message
factory build the GELF message, and hands it to a lazily created sender.

Contents
--------
* :func:`severity_name` - map stdlib level numbers onto severity names.
* :func:`event_from_record` - ``LogRecord`` to ``LogEvent``.
* :class:`GelfHandler` - the handler itself.

System Role
-----------
This is the only framework-specific code in the package. Failures are
reported through a :class:`~lib_log_gelf.application.ports.DiagnosticsPort`,
never through :mod:`logging`, and records from the ``lib_log_gelf`` logger
namespace are ignored so the handler cannot feed on its own output.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from lib_log_gelf.adapters.diagnostics import DiagnosticHook, coerce_diagnostics
from lib_log_gelf.application.ports import DiagnosticsPort
from lib_log_gelf.application.sender import GelfSender
from lib_log_gelf.application.use_cases.make_message import make_message
from lib_log_gelf.config import GelfSettings, build_settings
from lib_log_gelf.domain.errors import GelfError
from lib_log_gelf.domain.events import LogEvent
from lib_log_gelf.runtime import create_sender

INTERNAL_LOGGER_PREFIX = "lib_log_gelf"

_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}
# Anything else on a record came in through ``extra=`` and becomes a field.

SenderFactory = Callable[..., GelfSender]


def severity_name(levelno: int, levelname: str) -> str:
    """Map a stdlib level onto the severity names of the GELF level table.

    Examples
    --------
    >>> severity_name(logging.CRITICAL, "CRITICAL"), severity_name(45, "Level 45")
    ('FATAL', 'ERROR')
    >>> severity_name(logging.DEBUG, "DEBUG")
    'DEBUG'
    """

    if levelno >= logging.CRITICAL:
        return "FATAL"
    if levelno >= logging.ERROR:
        return "ERROR"
    if levelno >= logging.WARNING:
        return "WARNING"
    return levelname


def _record_extra(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


def event_from_record(record: logging.LogRecord, rendered: str | None) -> LogEvent:
    """Translate ``record`` into a :class:`LogEvent` carrying ``rendered`` text."""

    exc = record.exc_info[1] if record.exc_info else None
    return LogEvent(
        timestamp_ms=int(record.created * 1000),
        severity=severity_name(record.levelno, record.levelname),
        message=rendered,
        logger_name=record.name,
        exc_info=exc,
        source_class=record.module,
        source_method=record.funcName,
        thread_name=record.threadName,
        file=record.pathname or None,
        line=record.lineno or 0,
        extra=_record_extra(record),
    )


def _is_internal(name: str) -> bool:
    return name == INTERNAL_LOGGER_PREFIX or name.startswith(INTERNAL_LOGGER_PREFIX + ".")


class GelfHandler(logging.Handler):
    """Send log records to Graylog as GELF messages.

    Parameters
    ----------
    settings:
        Resolved configuration; built from keyword defaults and ``GELF_*``
        environment variables when ``None``.
    level:
        Minimum record level handled.
    diagnostics:
        Port or ``(event, payload)`` callback receiving start/stop/failure
        notices; defaults to a Rich console on stderr.
    sender_factory:
        Builds the sender on the first record; tests inject fakes here.

    Once :meth:`close` has run the handler ignores further records instead of
    reopening a connection.

    Examples
    --------
    >>> from lib_log_gelf.adapters.diagnostics import NullDiagnostics
    >>> handler = GelfHandler(GelfSettings(host="gray.example"), diagnostics=NullDiagnostics())
    >>> handler.settings.endpoint
    'udp://gray.example:12201'
    >>> handler.close()
    """

    def __init__(
        self,
        settings: GelfSettings | None = None,
        *,
        level: int = logging.NOTSET,
        diagnostics: DiagnosticsPort | DiagnosticHook | None = None,
        sender_factory: SenderFactory | None = None,
    ) -> None:
        super().__init__(level=level)
        self._settings = settings or build_settings()
        self._diagnostics = coerce_diagnostics(diagnostics)
        self._sender_factory = sender_factory or create_sender
        self._sender: GelfSender | None = None
        self._closed = False

    @property
    def settings(self) -> GelfSettings:
        return self._settings

    @property
    def sender(self) -> GelfSender | None:
        return self._sender

    def _ensure_sender(self) -> GelfSender:
        if self._sender is None:
            self._sender = self._sender_factory(self._settings, diagnostics=self._diagnostics)
            self._diagnostics.notice(
                "started",
                {
                    "endpoint": self._settings.endpoint,
                    "level": logging.getLevelName(self.level),
                    "facility": self._settings.facility,
                    "origin_host": self._settings.origin_host,
                },
            )
        return self._sender

    def _render(self, record: logging.LogRecord) -> str | None:
        if self.formatter is not None:
            if record.exc_info and self._settings.extract_stacktrace:
                # make_message appends the traceback itself
                record = logging.makeLogRecord(record.__dict__)
                record.exc_info = None
                record.exc_text = None
            return self.format(record)
        if record.msg is None:
            return None
        return record.getMessage()

    def emit(self, record: logging.LogRecord) -> None:
        if self._closed or _is_internal(record.name):
            return
        try:
            event = event_from_record(record, self._render(record))
            message = make_message(event, self._settings, diagnostics=self._diagnostics)
            if message is None:
                return
            self._ensure_sender().send_message(message)
        except (GelfError, OSError) as exc:
            self._diagnostics.notice("send_failed", {"endpoint": self._settings.endpoint, "error": repr(exc)})
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        self.acquire()
        try:
            if not self._closed:
                self._closed = True
                sender, self._sender = self._sender, None
                if sender is not None:
                    sender.close()
                    self._diagnostics.notice("stopped", {"endpoint": self._settings.endpoint})
        finally:
            self.release()
            super().close()


__all__ = ["GelfHandler", "event_from_record", "severity_name"]
