from __future__ import annotations

import json
import logging
import os
from typing import Any, Iterator

import pytest

from lib_log_gelf.adapters.logging_handler import GelfHandler, event_from_record, severity_name
from lib_log_gelf.config import GelfSettings
from lib_log_gelf.domain.chunker import is_chunked, parse_frame, reassemble
from lib_log_gelf.domain.compression import gunzip_payload
from lib_log_gelf.domain.errors import DestinationResolutionError
from lib_log_gelf.domain.message import GelfMessage


class FakeSender:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.messages: list[GelfMessage] = []
        self.closed = False
        self._error = error

    def send_message(self, message: GelfMessage) -> bool:
        if self._error is not None:
            raise self._error
        self.messages.append(message)
        return True

    def close(self) -> None:
        self.closed = True


class SenderFactory:
    def __init__(self, sender: FakeSender) -> None:
        self.sender = sender
        self.calls = 0

    def __call__(self, settings: GelfSettings, **kwargs: Any) -> FakeSender:
        self.calls += 1
        return self.sender


@pytest.fixture
def settings() -> GelfSettings:
    return GelfSettings(host="gray.example", facility="billing", origin_host="node1")


@pytest.fixture
def app_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("tests.gelf.app")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _handler(settings: GelfSettings, diagnostics, sender: FakeSender | None = None) -> tuple[GelfHandler, SenderFactory]:
    factory = SenderFactory(sender or FakeSender())
    return GelfHandler(settings, diagnostics=diagnostics, sender_factory=factory), factory


@pytest.mark.parametrize(
    ("levelno", "expected"),
    [(logging.CRITICAL, "FATAL"), (logging.ERROR, "ERROR"), (logging.WARNING, "WARNING"), (logging.INFO, "INFO")],
)
def test_severity_name(levelno: int, expected: str) -> None:
    assert severity_name(levelno, logging.getLevelName(levelno)) == expected


def test_records_become_gelf_messages(settings, diagnostics, app_logger) -> None:
    handler, factory = _handler(settings, diagnostics)
    app_logger.addHandler(handler)

    app_logger.warning("disk %s full", "/var", extra={"order_id": 17})

    (message,) = factory.sender.messages
    assert message.short_message == "disk /var full"
    assert message.level == 4
    assert message.host == "node1"
    assert message.facility == "billing"
    assert (message.file or "").endswith("test_logging_handler.py")
    assert message.line > 0
    assert message.additional_fields["order_id"] == 17
    assert message.additional_fields["original_level"] == "WARNING"
    assert message.additional_fields["source_method"] == "test_records_become_gelf_messages"
    assert message.additional_fields["logger"] == "tests.gelf.app"


def test_sender_is_created_lazily_once_and_start_is_announced(settings, diagnostics, app_logger) -> None:
    handler, factory = _handler(settings, diagnostics)
    app_logger.addHandler(handler)
    assert factory.calls == 0

    app_logger.info("one")
    app_logger.info("two")

    assert factory.calls == 1
    assert diagnostics.events() == ["started"]
    assert diagnostics.notices[0][1]["endpoint"] == "udp://gray.example:12201"


def test_exception_records_carry_the_stacktrace(settings, diagnostics, app_logger) -> None:
    handler, factory = _handler(settings, diagnostics)
    app_logger.addHandler(handler)

    try:
        raise KeyError("missing")
    except KeyError:
        app_logger.exception("lookup failed")

    (message,) = factory.sender.messages
    assert message.level == 3
    assert message.short_message == "lookup failed"
    assert "Traceback (most recent call last):" in (message.full_message or "")
    assert message.additional_fields["exception"] == "KeyError"


def test_critical_maps_to_error_level(settings, diagnostics, app_logger) -> None:
    handler, factory = _handler(settings, diagnostics)
    app_logger.addHandler(handler)

    app_logger.critical("down")

    assert factory.sender.messages[0].level == 3
    assert factory.sender.messages[0].additional_fields["original_level"] == "FATAL"


def test_formatter_is_used_when_configured(settings, diagnostics, app_logger) -> None:
    handler, factory = _handler(settings, diagnostics)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    app_logger.addHandler(handler)

    app_logger.info("ready")

    assert factory.sender.messages[0].short_message == "[INFO] ready"


def test_formatted_exception_carries_one_traceback(settings, diagnostics, app_logger) -> None:
    handler, factory = _handler(settings, diagnostics)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    app_logger.addHandler(handler)

    try:
        raise KeyError("missing")
    except KeyError:
        app_logger.exception("lookup failed")

    (message,) = factory.sender.messages
    assert message.short_message == "[ERROR] lookup failed"
    assert (message.full_message or "").count("Traceback (most recent call last):") == 1


def test_records_from_the_library_namespace_are_ignored(settings, diagnostics) -> None:
    handler, factory = _handler(settings, diagnostics)
    record = logging.LogRecord("lib_log_gelf.adapters.transport.tcp", logging.ERROR, __file__, 1, "x", (), None)

    handler.handle(record)

    assert factory.calls == 0


def test_send_failures_are_reported_not_raised(settings, diagnostics, app_logger) -> None:
    handler, _ = _handler(settings, diagnostics, FakeSender(error=DestinationResolutionError("no address")))
    app_logger.addHandler(handler)

    app_logger.error("boom")

    assert diagnostics.events() == ["started", "send_failed"]
    assert "no address" in diagnostics.notices[1][1]["error"]


def test_close_stops_sender_and_ignores_later_records(settings, diagnostics, app_logger) -> None:
    handler, factory = _handler(settings, diagnostics)
    app_logger.addHandler(handler)
    app_logger.info("before")

    handler.close()
    app_logger.info("after")

    assert factory.sender.closed is True
    assert [m.short_message for m in factory.sender.messages] == ["before"]
    assert diagnostics.events() == ["started", "stopped"]
    assert factory.calls == 1


def test_event_from_record_copies_location_and_thread() -> None:
    record = logging.LogRecord("svc", logging.INFO, "/srv/svc.py", 12, "hello %s", ("you",), None, func="handle")

    event = event_from_record(record, record.getMessage())

    assert event.message == "hello you"
    assert (event.file, event.line) == ("/srv/svc.py", 12)
    assert event.source_method == "handle"
    assert event.source_class == "svc"
    assert event.thread_name == record.threadName
    assert event.timestamp_ms == int(record.created * 1000)
    assert event.extra == {}


def test_end_to_end_over_udp_loopback(udp_server, diagnostics, app_logger) -> None:
    settings = GelfSettings(host="127.0.0.1", port=udp_server.port, facility="e2e", origin_host="node1")
    handler = GelfHandler(settings, diagnostics=diagnostics)
    app_logger.addHandler(handler)

    app_logger.error("payment declined", extra={"amount": 12.5})

    (datagram,) = udp_server.wait_for(1)
    assert not is_chunked(datagram)
    document = json.loads(gunzip_payload(datagram))
    assert document["short_message"] == "payment declined"
    assert document["facility"] == "e2e"
    assert document["level"] == 3
    assert document["_amount"] == 12.5


def test_end_to_end_chunked_over_udp_loopback(udp_server, diagnostics, app_logger) -> None:
    settings = GelfSettings(host="127.0.0.1", port=udp_server.port, facility="e2e", origin_host="node1")
    app_logger.addHandler(GelfHandler(settings, diagnostics=diagnostics))
    text = os.urandom(20000).hex()

    app_logger.info(text)

    first = udp_server.wait_for(1)[0]
    assert is_chunked(first)
    frames = udp_server.wait_for(parse_frame(first).total)
    document = json.loads(gunzip_payload(reassemble(frames)))
    assert document["full_message"] == text
    assert len(document["short_message"]) == 249


def test_end_to_end_over_tcp_loopback(tcp_server, diagnostics, app_logger) -> None:
    settings = GelfSettings(protocol="tcp", host="127.0.0.1", port=tcp_server.port, origin_host="node1")
    app_logger.addHandler(GelfHandler(settings, diagnostics=diagnostics))

    app_logger.info("first")
    app_logger.info("second")

    documents = [json.loads(frame) for frame in tcp_server.wait_for(2)]
    assert [d["short_message"] for d in documents] == ["first", "second"]
    assert tcp_server.connections == 1
