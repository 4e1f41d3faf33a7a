"""GELF 1.1 sender with UDP (gzip, chunked) and TCP (NUL-terminated) transports.

Typical use is through the stdlib :mod:`logging` binding::

    import logging
    from lib_log_gelf import GelfHandler, build_settings

    logging.getLogger().addHandler(GelfHandler(build_settings(host="graylog", protocol="tcp")))

or directly with a sender::

    from lib_log_gelf import GelfMessage, create_sender

    with create_sender(build_settings(host="graylog")) as sender:
        sender.send_message(GelfMessage(short_message="disk full", host="node1", facility="app"))
"""

from __future__ import annotations

from .adapters.logging_handler import GelfHandler
from .adapters.updaters import ContextFieldsUpdater, ProcessIdUpdater
from .application.sender import GelfSender, SenderState
from .application.use_cases.make_message import make_message
from .config import GelfSettings, build_settings
from .domain import (
    DestinationResolutionError,
    GelfError,
    GelfMessage,
    LogEvent,
    SenderClosedError,
    TransportProtocol,
    bind_fields,
    encode_message,
    syslog_level_for,
)
from .runtime import create_sender, summary_info

__all__ = [
    "ContextFieldsUpdater",
    "DestinationResolutionError",
    "GelfError",
    "GelfHandler",
    "GelfMessage",
    "GelfSender",
    "GelfSettings",
    "LogEvent",
    "ProcessIdUpdater",
    "SenderClosedError",
    "SenderState",
    "TransportProtocol",
    "bind_fields",
    "build_settings",
    "create_sender",
    "encode_message",
    "make_message",
    "summary_info",
    "syslog_level_for",
]
