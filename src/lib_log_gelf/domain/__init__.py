"""Domain model and pure codecs for GELF messages."""

from __future__ import annotations

from .chunker import ChunkFrame, chunk_payload, make_message_id, parse_frame, reassemble
from .compression import gunzip_payload, gzip_payload
from .context import DEFAULT_CONTEXT, FieldContext, bind_fields
from .encoder import encode_message, escape_json, format_timestamp
from .errors import (
    ChunkLimitError,
    DestinationResolutionError,
    GelfError,
    PortRangeExhaustedError,
    SenderClosedError,
)
from .events import LogEvent
from .levels import SyslogLevel, syslog_level_for
from .message import GelfMessage
from .protocol import DEFAULT_PORT, TransportProtocol

__all__ = [
    "ChunkFrame",
    "ChunkLimitError",
    "DEFAULT_CONTEXT",
    "DEFAULT_PORT",
    "DestinationResolutionError",
    "FieldContext",
    "GelfError",
    "GelfMessage",
    "LogEvent",
    "PortRangeExhaustedError",
    "SenderClosedError",
    "SyslogLevel",
    "TransportProtocol",
    "bind_fields",
    "chunk_payload",
    "encode_message",
    "escape_json",
    "format_timestamp",
    "gunzip_payload",
    "gzip_payload",
    "make_message_id",
    "parse_frame",
    "reassemble",
    "syslog_level_for",
]
