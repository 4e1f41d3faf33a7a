"""Use case turning a :class:`LogEvent` into a :class:`GelfMessage`.

Purpose
-------
Hold the translation rules every binding shares: short-message truncation,
stack-trace extraction, static fields, extended information and the ordered
updater chain. Bindings only have to produce a :class:`LogEvent`.

Contents
--------
* :class:`MessageOptions` - the settings this use case reads.
* :func:`truncate_short_message` - cut long text to the GELF headline size.
* :func:`make_message` - build, enrich and return the message.
"""

from __future__ import annotations

import traceback
from typing import Any, Mapping, Protocol, Sequence

from lib_log_gelf.application.ports import DiagnosticsPort, MessageUpdater
from lib_log_gelf.domain.events import LogEvent
from lib_log_gelf.domain.levels import syslog_level_for
from lib_log_gelf.domain.message import GelfMessage, MAX_SHORT_MESSAGE_LENGTH


class MessageOptions(Protocol):
    """Settings consumed by :func:`make_message`."""

    facility: str
    origin_host: str | None
    extract_stacktrace: bool
    add_extended_information: bool
    fields: Mapping[str, str]
    updaters: Sequence[MessageUpdater]


def truncate_short_message(text: str) -> str:
    """Return ``text`` cut to 249 characters when it exceeds the 250 limit.

    Examples
    --------
    >>> len(truncate_short_message("x" * 251))
    249
    >>> truncate_short_message("short")
    'short'
    """

    if len(text) > MAX_SHORT_MESSAGE_LENGTH:
        return text[: MAX_SHORT_MESSAGE_LENGTH - 1]
    return text


def _exception_name(exc: BaseException) -> str:
    cls = type(exc)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _format_stacktrace(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip("\n")


def _raise_site(exc: BaseException) -> tuple[str, int] | None:
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ is not None else []
    if not frames:
        return None
    innermost = frames[-1]
    return innermost.filename, innermost.lineno or 0


def _add_extended_information(message: GelfMessage, event: LogEvent, rendered: str) -> None:
    exc = event.exc_info
    if exc is not None:
        message.add_field("exception", _exception_name(exc))
        if str(exc):
            message.add_field("exception_message", str(exc))
    if event.thread_name:
        message.add_field("thread_name", event.thread_name)
    message.add_field("original_level", event.severity)
    message.add_field("char_length", len(rendered))
    if event.source_class is not None:
        message.add_field("source_class", event.source_class)
        if event.source_method is not None:
            message.add_field("source_method", event.source_method)
    if event.logger_name and event.logger_name != event.source_class:
        message.add_field("logger", event.logger_name)


def _apply_updaters(
    message: GelfMessage,
    updaters: Sequence[MessageUpdater],
    diagnostics: DiagnosticsPort | None,
) -> GelfMessage:
    for updater in updaters:
        try:
            result = updater(message)
        except Exception as exc:  # reported, then skipped
            if diagnostics is not None:
                diagnostics.notice("updater_failed", {"updater": repr(updater), "error": repr(exc)})
            continue
        if result is not None:
            message = result
    return message


def make_message(
    event: LogEvent,
    options: MessageOptions,
    *,
    diagnostics: DiagnosticsPort | None = None,
) -> GelfMessage | None:
    """Build the GELF message for ``event``; ``None`` when there is no text."""

    if event.message is None:
        return None

    rendered = event.message
    short_message = truncate_short_message(rendered)

    file, line = event.file, event.line
    exc = event.exc_info
    if options.extract_stacktrace and exc is not None:
        rendered = f"{rendered}\n{_format_stacktrace(exc)}"
        if file is None:
            site = _raise_site(exc)
            if site is not None:
                file, line = site

    message = GelfMessage(
        short_message=short_message,
        full_message=rendered,
        timestamp=event.timestamp_ms,
        level=syslog_level_for(event.severity),
        host=options.origin_host,
        facility=options.facility,
        file=file,
        line=line,
    )

    for key, value in options.fields.items():
        message.add_field(key, value)
    for key, value in event.extra.items():
        message.add_field(key, _scalar(value))

    if options.add_extended_information:
        _add_extended_information(message, event, rendered)

    return _apply_updaters(message, options.updaters, diagnostics)


def _scalar(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float)):
        return value
    return str(value)


__all__ = ["MessageOptions", "make_message", "truncate_short_message"]
