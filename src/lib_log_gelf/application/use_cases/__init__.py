"""Application use cases."""

from __future__ import annotations

from .make_message import MessageOptions, make_message, truncate_short_message

__all__ = ["MessageOptions", "make_message", "truncate_short_message"]
