"""Application layer: the sender and the message factory."""

from __future__ import annotations

from .sender import GelfSender, SenderState, TCP_TERMINATOR
from .use_cases import make_message

__all__ = ["GelfSender", "SenderState", "TCP_TERMINATOR", "make_message"]
