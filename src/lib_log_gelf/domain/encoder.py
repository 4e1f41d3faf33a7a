"""Serialise a :class:`GelfMessage` to GELF JSON text.

Purpose
-------
Produce the JSON object both transports put on the wire. The members are
collected in an ordered mapping and handed to :func:`json.dumps`; GELF rules
are applied while collecting: the timestamp is a ``"<seconds>.<millis>"``
string built with integer arithmetic, additional string values are stripped
and the reserved ``id`` key is dropped.

Output is pure ASCII (``ensure_ascii``), so text carrying lone surrogates from
``surrogateescape`` decoding still encodes to UTF-8 bytes.

Contents
--------
* :func:`encode_message` - message to JSON string.
* :func:`escape_json` - strip and escape an arbitrary value for a JSON string.
* :func:`format_timestamp` - milliseconds to ``"<seconds>.<millis>"``.
"""

from __future__ import annotations

import json
import math
from typing import Any

from .message import GelfMessage, RESERVED_FIELD_ID

ADDITIONAL_FIELD_PREFIX = "_"


def escape_json(value: Any) -> str:
    """Stringify, strip and escape ``value`` for use inside a JSON string.

    Examples
    --------
    >>> escape_json('  say "hi"\\n ')
    'say \\\\"hi\\\\"'
    >>> escape_json("a\\tb")
    'a\\\\tb'
    """

    return json.dumps(str(value).strip())[1:-1]


def format_timestamp(timestamp_ms: int) -> str:
    """Render milliseconds as ``"<seconds>.<millis>"`` without float rounding.

    Examples
    --------
    >>> format_timestamp(1700000000123)
    '1700000000.123'
    >>> format_timestamp(1700000000005)
    '1700000000.005'
    """

    seconds, millis = divmod(int(timestamp_ms), 1000)
    return f"{seconds}.{millis:03d}"


def _additional_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else repr(value)
    return str(value).strip()


def encode_message(message: GelfMessage) -> str:
    """Return the GELF JSON object for ``message``.

    Keys are written in a stable order, but consumers must parse the output as
    JSON rather than rely on positions.

    Examples
    --------
    >>> m = GelfMessage(short_message="disk full", host="node1", facility="app", level=3, timestamp=1700000000123)
    >>> payload = encode_message(m)
    >>> '"timestamp":"1700000000.123"' in payload, '"level":3' in payload
    (True, True)
    """

    full_message = message.full_message if message.full_message is not None else message.short_message
    document: dict[str, Any] = {
        "version": message.version,
        "host": message.host or "",
        "short_message": message.short_message or "",
        "full_message": full_message or "",
        "timestamp": format_timestamp(message.timestamp),
        "level": int(message.level),
        "facility": message.facility or "",
    }
    if message.file is not None:
        document["file"] = message.file
    if message.line > 0:
        document["line"] = int(message.line)

    for key, value in message.additional_fields.items():
        if key == RESERVED_FIELD_ID:
            continue
        document[ADDITIONAL_FIELD_PREFIX + key] = _additional_value(value)

    return json.dumps(document, separators=(",", ":"))


__all__ = ["ADDITIONAL_FIELD_PREFIX", "encode_message", "escape_json", "format_timestamp"]
