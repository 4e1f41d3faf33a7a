from __future__ import annotations

import json
import os
import threading
from typing import Sequence

import pytest

from lib_log_gelf.application.ports import TransportPort
from lib_log_gelf.application.sender import TCP_TERMINATOR, GelfSender, SenderState
from lib_log_gelf.domain.chunker import MAX_CHUNK_SIZE, make_message_id, parse_frame, reassemble
from lib_log_gelf.domain.compression import gunzip_payload
from lib_log_gelf.domain.encoder import encode_message
from lib_log_gelf.domain.errors import SenderClosedError
from lib_log_gelf.domain.message import GelfMessage
from lib_log_gelf.domain.protocol import TransportProtocol


class FakeTransport(TransportPort):
    def __init__(self, protocol: TransportProtocol, *, fail: bool = False) -> None:
        self.protocol = protocol
        self.fail = fail
        self.sent: list[bytes] = []
        self.opened = 0
        self.closed = 0
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        if not self._open:
            self._open = True
            self.opened += 1

    def send(self, frames: Sequence[bytes]) -> bool:
        self.open()
        if self.fail:
            return False
        self.sent.extend(frames)
        return True

    def close(self) -> None:
        self._open = False
        self.closed += 1


class FixedClock:
    def now_ms(self) -> int:
        return 1700000000999


def _message(**overrides: object) -> GelfMessage:
    values: dict[str, object] = {
        "short_message": "disk full",
        "host": "node1",
        "facility": "app",
        "level": 3,
        "timestamp": 1700000000123,
    }
    values.update(overrides)
    return GelfMessage(**values)  # type: ignore[arg-type]


def test_tcp_bytes_are_encoded_json_plus_one_nul() -> None:
    transport = FakeTransport(TransportProtocol.TCP)
    sender = GelfSender(transport)
    message = _message()

    assert sender.send_message(message) is True

    assert transport.sent == [encode_message(message).encode("utf-8") + TCP_TERMINATOR]
    assert transport.sent[0].count(b"\x00") == 1


def test_udp_small_message_is_one_gzip_datagram() -> None:
    transport = FakeTransport(TransportProtocol.UDP)
    message = _message()

    GelfSender(transport).send_message(message)

    assert len(transport.sent) == 1
    assert transport.sent[0][:2] == b"\x1f\x8b"
    assert gunzip_payload(transport.sent[0]) == encode_message(message)


def test_udp_large_message_is_chunked_with_clock_and_host_id() -> None:
    transport = FakeTransport(TransportProtocol.UDP)
    message = _message(full_message=os.urandom(8 * MAX_CHUNK_SIZE).hex())

    GelfSender(transport, clock=FixedClock()).send_message(message)

    assert len(transport.sent) > 1
    ids = {parse_frame(frame).message_id for frame in transport.sent}
    assert ids == {make_message_id(1700000000999, "node1")}
    decoded = json.loads(gunzip_payload(reassemble(transport.sent)))
    assert decoded["full_message"] == message.full_message


@pytest.mark.parametrize("protocol", list(TransportProtocol))
def test_invalid_message_produces_no_bytes(protocol: TransportProtocol) -> None:
    transport = FakeTransport(protocol)
    sender = GelfSender(transport)

    assert sender.send_message(_message(host="")) is False
    assert sender.send_message(_message(facility=None)) is False
    assert transport.sent == []
    assert transport.opened == 0
    assert sender.state is SenderState.UNCONNECTED


@pytest.mark.parametrize("protocol", list(TransportProtocol))
def test_undecodable_filename_text_is_still_sent(protocol: TransportProtocol) -> None:
    """Text decoded with ``surrogateescape`` carries lone surrogates."""

    transport = FakeTransport(protocol)
    sender = GelfSender(transport)
    message = _message(short_message="file /srv/\udcff.log")

    assert sender.send_message(message) is True

    (frame,) = transport.sent
    if protocol is TransportProtocol.TCP:
        document = json.loads(frame[:-1].decode("ascii"))
    else:
        document = json.loads(gunzip_payload(frame))
    assert document["short_message"] == "file /srv/\udcff.log"


def test_state_moves_from_unconnected_to_active_to_closed() -> None:
    transport = FakeTransport(TransportProtocol.TCP)
    sender = GelfSender(transport)
    assert sender.state is SenderState.UNCONNECTED

    sender.send_message(_message())
    assert sender.state is SenderState.ACTIVE

    sender.close()
    assert sender.state is SenderState.CLOSED
    assert transport.closed == 1


def test_closed_sender_rejects_messages_and_does_not_reopen() -> None:
    transport = FakeTransport(TransportProtocol.UDP)
    sender = GelfSender(transport)
    sender.close()

    with pytest.raises(SenderClosedError):
        sender.send_message(_message())
    assert transport.opened == 0


def test_close_is_idempotent_and_context_manager_closes() -> None:
    transport = FakeTransport(TransportProtocol.TCP)
    with GelfSender(transport) as sender:
        sender.send_message(_message())
    sender.close()

    assert sender.state is SenderState.CLOSED
    assert transport.closed == 1


def test_transport_failure_is_reported_as_false() -> None:
    sender = GelfSender(FakeTransport(TransportProtocol.TCP, fail=True))
    assert sender.send_message(_message()) is False


def test_concurrent_tcp_sends_never_interleave() -> None:
    transport = FakeTransport(TransportProtocol.TCP)
    sender = GelfSender(transport)

    def worker(index: int) -> None:
        for count in range(50):
            sender.send_message(_message(short_message=f"worker {index} message {count}"))

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    stream = b"".join(transport.sent)
    documents = [json.loads(part) for part in stream.split(b"\x00")[:-1]]
    assert len(documents) == 200
    assert transport.opened == 1


def test_protocol_follows_the_transport() -> None:
    assert GelfSender(FakeTransport(TransportProtocol.UDP)).protocol is TransportProtocol.UDP
