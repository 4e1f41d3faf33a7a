"""Message updaters: ordered enrichment callbacks applied before sending.

Contents
--------
* :class:`ContextFieldsUpdater` - copies fields bound with
  :func:`lib_log_gelf.bind_fields`.
* :class:`ProcessIdUpdater` - adds the ``pid`` field.
* :func:`load_updater` - resolve ``"package.module:attr"`` references or the
  built-in aliases ``"context"`` and ``"pid"`` from configuration text.
"""

from __future__ import annotations

import importlib
import os
from typing import Any, Callable

from lib_log_gelf.application.ports.updater import MessageUpdater
from lib_log_gelf.domain.context import DEFAULT_CONTEXT, FieldContext
from lib_log_gelf.domain.message import GelfMessage


class ContextFieldsUpdater(MessageUpdater):
    """Add the fields bound to the current execution flow.

    Bound fields replace fields of the same name the message already carries,
    so request context wins over ``extra=`` values and static fields.
    """

    def __init__(self, context: FieldContext | None = None) -> None:
        self._context = context or DEFAULT_CONTEXT

    def __call__(self, message: GelfMessage) -> None:
        message.additional_fields.update(self._context.current())


class ProcessIdUpdater(MessageUpdater):
    """Add the current process id as ``pid``."""

    def __call__(self, message: GelfMessage) -> None:
        message.add_field("pid", os.getpid())


_ALIASES: dict[str, Callable[[], MessageUpdater]] = {
    "context": ContextFieldsUpdater,
    "pid": ProcessIdUpdater,
}


def load_updater(reference: str) -> MessageUpdater:
    """Return the updater named by ``reference``.

    ``reference`` is an alias (``"context"``, ``"pid"``) or a
    ``"package.module:attribute"`` path; ``"package.module.attribute"`` is
    accepted too. Classes are instantiated without arguments, other callables
    are used as they are.

    Examples
    --------
    >>> type(load_updater("pid")).__name__
    'ProcessIdUpdater'
    >>> type(load_updater("lib_log_gelf.adapters.updaters:ContextFieldsUpdater")).__name__
    'ContextFieldsUpdater'
    """

    name = reference.strip()
    if name in _ALIASES:
        return _ALIASES[name]()
    if ":" in name:
        module_name, _, attribute = name.partition(":")
    else:
        module_name, _, attribute = name.rpartition(".")
    if not module_name or not attribute:
        raise ValueError(f"invalid updater reference: {reference!r}")
    target: Any = importlib.import_module(module_name)
    for part in attribute.split("."):
        target = getattr(target, part)
    if isinstance(target, type):
        target = target()
    if not callable(target):
        raise TypeError(f"updater {reference!r} is not callable")
    return target


__all__ = ["ContextFieldsUpdater", "ProcessIdUpdater", "load_updater"]
