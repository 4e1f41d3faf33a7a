"""Port for message enrichment callbacks."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_gelf.domain.message import GelfMessage


@runtime_checkable
class MessageUpdater(Protocol):
    """Enrich a message before it is sent.

    Implementations mutate ``message`` in place and return ``None``, or return
    a replacement message.
    """

    def __call__(self, message: GelfMessage) -> GelfMessage | None: ...


__all__ = ["MessageUpdater"]
