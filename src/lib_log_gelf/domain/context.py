"""Per-scope custom fields built atop :mod:`contextvars`.

Purpose
-------
Let application code attach request/job metadata to every GELF message sent
from the current execution flow (thread or asyncio task) without threading it
through each log call. :class:`~lib_log_gelf.adapters.updaters.ContextFieldsUpdater`
copies the bound fields onto outgoing messages.

Contents
--------
* :class:`FieldContext` - stack of field frames with :meth:`FieldContext.bind`.
* :data:`DEFAULT_CONTEXT` and :func:`bind_fields` - process-wide default stack.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Iterator, Mapping


class FieldContext:
    """Manage field frames bound to the current execution flow."""

    _stack_var: contextvars.ContextVar[tuple[Mapping[str, Any], ...]]

    def __init__(self, name: str = "lib_log_gelf_fields") -> None:
        self._stack_var = contextvars.ContextVar(name, default=())

    @contextmanager
    def bind(self, **fields: Any) -> Iterator[Mapping[str, Any]]:
        """Push ``fields`` on top of the current frame for the ``with`` block.

        Inner frames override keys of outer frames; the previous state is
        restored on exit.
        """

        for key in fields:
            if not key.strip():
                raise ValueError("field names must not be empty")
        stack = self._stack_var.get()
        merged = {**(stack[-1] if stack else {}), **fields}
        frame = MappingProxyType(merged)
        token = self._stack_var.set(stack + (frame,))
        try:
            yield frame
        finally:
            self._stack_var.reset(token)

    def current(self) -> dict[str, Any]:
        """Return a copy of the fields bound to the current scope."""

        stack = self._stack_var.get()
        return dict(stack[-1]) if stack else {}

    def clear(self) -> None:
        """Remove all bound frames from the current flow."""

        self._stack_var.set(())


DEFAULT_CONTEXT = FieldContext()


def bind_fields(**fields: Any):
    """Bind ``fields`` on :data:`DEFAULT_CONTEXT`; usable as a context manager.

    Examples
    --------
    >>> with bind_fields(request_id="r-1"):
    ...     DEFAULT_CONTEXT.current()
    {'request_id': 'r-1'}
    >>> DEFAULT_CONTEXT.current()
    {}
    """

    return DEFAULT_CONTEXT.bind(**fields)


__all__ = ["DEFAULT_CONTEXT", "FieldContext", "bind_fields"]
