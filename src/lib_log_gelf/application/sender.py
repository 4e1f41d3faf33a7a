"""Sender orchestrating validate, encode, frame and transport.

Purpose
-------
Own the lifecycle of one transport and turn :class:`GelfMessage` objects into
bytes on the wire: UDP payloads are gzip-compressed and chunked, TCP payloads
are terminated with a single NUL byte.

Contents
--------
* :class:`SenderState` - ``UNCONNECTED`` / ``ACTIVE`` / ``CLOSED``.
* :class:`GelfSender` - thread-safe sender with :meth:`GelfSender.send_message`.

System Role
-----------
Bindings build messages and call :meth:`GelfSender.send_message`; nothing else
touches the transport. A single lock per sender serialises socket creation,
teardown and writes so concurrent callers can neither race the lazy connect
nor interleave bytes of two messages on one TCP stream.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from types import TracebackType
from typing import Callable

from lib_log_gelf.domain.chunker import chunk_payload, make_message_id
from lib_log_gelf.domain.compression import gzip_payload
from lib_log_gelf.domain.encoder import encode_message
from lib_log_gelf.domain.errors import SenderClosedError
from lib_log_gelf.domain.message import GelfMessage
from lib_log_gelf.domain.protocol import TransportProtocol

from .ports import ClockPort, TransportPort

logger = logging.getLogger(__name__)

TCP_TERMINATOR = b"\x00"


class SenderState(Enum):
    """Lifecycle states of a :class:`GelfSender`."""

    UNCONNECTED = "unconnected"
    ACTIVE = "active"
    CLOSED = "closed"


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


class GelfSender:
    """Send GELF messages through one UDP or TCP transport.

    Parameters
    ----------
    transport:
        Transport owning the socket; its ``protocol`` attribute selects the
        framing applied here.
    clock:
        Optional clock for the chunk message id; defaults to wall-clock time.

    A closed sender stays closed: :meth:`send_message` then raises
    :class:`~lib_log_gelf.domain.errors.SenderClosedError`.
    """

    def __init__(self, transport: TransportPort, *, clock: ClockPort | None = None) -> None:
        self._transport = transport
        self._now_ms: Callable[[], int] = clock.now_ms if clock is not None else _wall_clock_ms
        self._lock = threading.RLock()
        self._closed = False

    @property
    def protocol(self) -> TransportProtocol:
        return self._transport.protocol

    @property
    def state(self) -> SenderState:
        with self._lock:
            if self._closed:
                return SenderState.CLOSED
            if self._transport.is_open:
                return SenderState.ACTIVE
            return SenderState.UNCONNECTED

    def send_message(self, message: GelfMessage) -> bool:
        """Validate, encode and transmit ``message``.

        Returns ``True`` when every frame was written, ``False`` when the
        message was dropped (invalid, or a transport failure that has already
        been reported). Destination resolution and UDP bind failures propagate
        as :class:`~lib_log_gelf.domain.errors.GelfError` subclasses.
        """

        if self._closed:
            raise SenderClosedError("sender is closed")
        if not message.is_valid():
            logger.debug("dropping invalid GELF message (host=%r, facility=%r)", message.host, message.facility)
            return False

        frames = self._frame(message, encode_message(message))
        with self._lock:
            if self._closed:
                raise SenderClosedError("sender is closed")
            return self._transport.send(frames)

    def _frame(self, message: GelfMessage, payload: str) -> list[bytes]:
        if self._transport.protocol is TransportProtocol.TCP:
            return [payload.encode("utf-8") + TCP_TERMINATOR]
        compressed = gzip_payload(payload)
        return chunk_payload(compressed, make_message_id(self._now_ms(), message.host))

    def close(self) -> None:
        """Release the transport; further sends raise ``SenderClosedError``."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._transport.close()

    def __enter__(self) -> "GelfSender":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["GelfSender", "SenderState", "TCP_TERMINATOR"]
