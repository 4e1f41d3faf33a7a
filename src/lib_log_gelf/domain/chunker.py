"""UDP chunk framing for oversized GELF payloads.

Purpose
-------
Split a compressed payload that does not fit a single datagram into bounded
frames that a receiver can group (shared message id) and reorder (sequence
index plus total count), and parse such frames back.

Frame layout
------------
``0x1E 0x0F`` magic, 32-byte message id, 1-byte sequence index, 1-byte total
count, then at most :data:`MAX_CHUNK_SIZE` payload bytes.

The sequence and total fields are single bytes, so one message can span at
most :data:`MAX_CHUNK_COUNT` frames (roughly 350 KB compressed). Larger
payloads raise :class:`~lib_log_gelf.domain.errors.ChunkLimitError` instead of
wrapping the counter.
"""

from __future__ import annotations

import math
from typing import Iterable, NamedTuple

from .errors import ChunkLimitError

GELF_CHUNK_MAGIC = b"\x1e\x0f"
MAX_CHUNK_SIZE = 1420
MESSAGE_ID_LENGTH = 32
MAX_CHUNK_COUNT = 255
HEADER_LENGTH = len(GELF_CHUNK_MAGIC) + MESSAGE_ID_LENGTH + 2


class ChunkFrame(NamedTuple):
    """Decoded view of one chunked datagram."""

    message_id: bytes
    sequence: int
    total: int
    payload: bytes


def make_message_id(timestamp_ms: int, host: str | None) -> bytes:
    """Return the 32-byte id shared by all frames of one message.

    The id is the send time in milliseconds followed by the message host,
    truncated or NUL-padded to :data:`MESSAGE_ID_LENGTH` bytes.

    Examples
    --------
    >>> make_message_id(1700000000123, "node1")[:18]
    b'1700000000123node1'
    >>> len(make_message_id(1, "x" * 64))
    32
    """

    raw = f"{int(timestamp_ms)}{host or ''}".encode("utf-8")[:MESSAGE_ID_LENGTH]
    return raw.ljust(MESSAGE_ID_LENGTH, b"\x00")


def chunk_count(length: int) -> int:
    """Number of frames needed for ``length`` payload bytes."""

    return max(1, math.ceil(length / MAX_CHUNK_SIZE))


def chunk_payload(payload: bytes, message_id: bytes) -> list[bytes]:
    """Return the datagrams carrying ``payload``.

    A payload of at most :data:`MAX_CHUNK_SIZE` bytes is returned unchanged as
    a single datagram without a chunk header.
    """

    if len(payload) <= MAX_CHUNK_SIZE:
        return [payload]
    if len(message_id) != MESSAGE_ID_LENGTH:
        raise ValueError(f"message id must be {MESSAGE_ID_LENGTH} bytes, got {len(message_id)}")

    total = chunk_count(len(payload))
    if total > MAX_CHUNK_COUNT:
        raise ChunkLimitError(
            f"payload of {len(payload)} bytes needs {total} chunks, limit is {MAX_CHUNK_COUNT}"
        )

    frames: list[bytes] = []
    for index in range(total):
        start = index * MAX_CHUNK_SIZE
        body = payload[start : start + MAX_CHUNK_SIZE]
        frames.append(GELF_CHUNK_MAGIC + message_id + bytes((index, total)) + body)
    return frames


def is_chunked(datagram: bytes) -> bool:
    """Return ``True`` when ``datagram`` starts with the chunk magic bytes."""

    return datagram[: len(GELF_CHUNK_MAGIC)] == GELF_CHUNK_MAGIC and len(datagram) >= HEADER_LENGTH


def parse_frame(datagram: bytes) -> ChunkFrame:
    """Decode the header of a chunked datagram."""

    if not is_chunked(datagram):
        raise ValueError("datagram is not a GELF chunk")
    id_end = len(GELF_CHUNK_MAGIC) + MESSAGE_ID_LENGTH
    return ChunkFrame(
        message_id=datagram[len(GELF_CHUNK_MAGIC) : id_end],
        sequence=datagram[id_end],
        total=datagram[id_end + 1],
        payload=datagram[HEADER_LENGTH:],
    )


def reassemble(datagrams: Iterable[bytes]) -> bytes:
    """Rebuild the payload from the frames of a single message, in any order.

    Raises :class:`ValueError` when frames belong to different messages or the
    set is incomplete.
    """

    frames = [parse_frame(datagram) for datagram in datagrams]
    if not frames:
        raise ValueError("no frames to reassemble")
    message_ids = {frame.message_id for frame in frames}
    if len(message_ids) != 1:
        raise ValueError("frames belong to more than one message")
    total = frames[0].total
    by_sequence = {frame.sequence: frame.payload for frame in frames}
    if sorted(by_sequence) != list(range(total)):
        raise ValueError(f"incomplete message: have {sorted(by_sequence)}, expected {total} frames")
    return b"".join(by_sequence[index] for index in range(total))


__all__ = [
    "ChunkFrame",
    "GELF_CHUNK_MAGIC",
    "HEADER_LENGTH",
    "MAX_CHUNK_COUNT",
    "MAX_CHUNK_SIZE",
    "MESSAGE_ID_LENGTH",
    "chunk_count",
    "chunk_payload",
    "is_chunked",
    "make_message_id",
    "parse_frame",
    "reassemble",
]
