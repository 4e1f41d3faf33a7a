"""Configuration: settings dataclass, environment overrides and ``.env`` loading.

Purpose
-------
Collect every knob the sender and the logging handler read into one immutable
:class:`GelfSettings`, built from keyword arguments with ``GELF_*``
environment variables taking precedence. A nearby ``.env`` file can seed the
environment through :func:`enable_dotenv`.

Contents
--------
* :class:`GelfSettings` and :func:`build_settings`.
* :func:`parse_fields` - ``"name=value"`` token lists for static fields.
* :func:`enable_dotenv` / :func:`should_use_dotenv` - ``python-dotenv`` glue.

Environment variables
---------------------
``GELF_PROTOCOL``, ``GELF_HOST``, ``GELF_PORT``, ``GELF_FACILITY``,
``GELF_ORIGIN_HOST``, ``GELF_STACKTRACE``, ``GELF_EXTENDED``, ``GELF_FIELDS``,
``GELF_UPDATERS`` (comma-separated references, see
:func:`lib_log_gelf.adapters.updaters.load_updater`), ``GELF_TCP_TIMEOUT``
(seconds, ``none`` to wait forever).
"""

from __future__ import annotations

import os
import re
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from dotenv import find_dotenv, load_dotenv

from lib_log_gelf.adapters.transport.tcp import DEFAULT_TIMEOUT
from lib_log_gelf.adapters.updaters import load_updater
from lib_log_gelf.application.ports.updater import MessageUpdater
from lib_log_gelf.domain.protocol import DEFAULT_PORT, TransportProtocol

DOTENV_ENV_VAR = "LIB_LOG_GELF_USE_DOTENV"
DEFAULT_FACILITY = "gelf-logger"
DEFAULT_HOST = "localhost"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_FIELD_SEPARATORS = re.compile(r"[,;\s]+")

_DOTENV_STATE: dict[str, Path | None] = {"path": None}


def local_hostname() -> str | None:
    """Return this machine's host name, or ``None`` when it cannot be read."""

    try:
        return socket.gethostname() or None
    except OSError:  # pragma: no cover - platform specific
        return None


@dataclass(slots=True, frozen=True)
class GelfSettings:
    """Resolved configuration for one sender/handler pair.

    Attributes
    ----------
    protocol:
        ``udp`` (gzip + chunking) or ``tcp`` (NUL-terminated stream).
    host:
        One hostname or a comma-separated list; one resolved address is used.
    port:
        GELF input port.
    facility:
        Value of the ``facility`` field.
    origin_host:
        Value of the ``host`` field; the local host name by default.
    extract_stacktrace:
        Append formatted tracebacks to ``full_message``.
    add_extended_information:
        Add thread/logger/exception/source fields.
    fields:
        Static additional fields added to every message.
    updaters:
        Enrichment callbacks applied in order.
    tcp_timeout:
        Connect/write deadline in seconds for TCP; ``None`` waits forever.
    """

    protocol: TransportProtocol = TransportProtocol.UDP
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    facility: str = DEFAULT_FACILITY
    origin_host: str | None = field(default_factory=local_hostname)
    extract_stacktrace: bool = True
    add_extended_information: bool = True
    fields: Mapping[str, str] = field(default_factory=dict)
    updaters: tuple[MessageUpdater, ...] = ()
    tcp_timeout: float | None = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "protocol", TransportProtocol.from_name(self.protocol))
        object.__setattr__(self, "port", _validate_port(self.port))
        object.__setattr__(self, "fields", dict(self.fields))
        object.__setattr__(self, "updaters", tuple(self.updaters))
        if not self.host.strip():
            raise ValueError("host must not be empty")
        if not self.facility.strip():
            raise ValueError("facility must not be empty")

    @property
    def endpoint(self) -> str:
        return f"{self.protocol.value}://{self.host}:{self.port}"


def _validate_port(value: int | str) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"port must be an integer, got {value!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"port must be between 1 and 65535, got {port}")
    return port


def _parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {value!r}")


def _parse_timeout(value: str) -> float | None:
    normalized = value.strip().lower()
    if normalized in {"", "none", "off"}:
        return None
    timeout = float(normalized)
    if timeout <= 0:
        raise ValueError(f"GELF_TCP_TIMEOUT must be positive, got {value!r}")
    return timeout


def parse_fields(text: str | None) -> dict[str, str]:
    """Parse ``name=value`` tokens separated by commas, semicolons or whitespace.

    Tokens without ``=`` are ignored.

    Examples
    --------
    >>> parse_fields("env=prod, team=core; =x junk")
    {'env': 'prod', 'team': 'core'}
    """

    result: dict[str, str] = {}
    if not text:
        return result
    for token in _FIELD_SEPARATORS.split(text):
        name, sep, value = token.partition("=")
        if sep and name:
            result[name] = value
    return result


def _load_updaters(references: Iterable[MessageUpdater | str]) -> tuple[MessageUpdater, ...]:
    return tuple(load_updater(item) if isinstance(item, str) else item for item in references)


def _pick(env: Mapping[str, str], name: str, value: Any, default: Any) -> Any:
    """Return the ``name`` override, else ``value``, else ``default``.

    Blank environment values count as unset. Explicit arguments are kept as
    given, so ``port=0`` reaches validation instead of becoming the default.

    Examples
    --------
    >>> _pick({"GELF_PORT": "5555"}, "GELF_PORT", 1, 12201)
    '5555'
    >>> _pick({"GELF_PORT": " "}, "GELF_PORT", 0, 12201)
    0
    >>> _pick({}, "GELF_PORT", None, 12201)
    12201
    """

    text = env.get(name)
    if text is not None and text.strip():
        return text
    return default if value is None else value


def build_settings(
    *,
    protocol: str | TransportProtocol | None = None,
    host: str | None = None,
    port: int | None = None,
    facility: str | None = None,
    origin_host: str | None = None,
    extract_stacktrace: bool | None = None,
    add_extended_information: bool | None = None,
    fields: Mapping[str, str] | None = None,
    updaters: Iterable[MessageUpdater | str] | None = None,
    tcp_timeout: float | None = DEFAULT_TIMEOUT,
    environ: Mapping[str, str] | None = None,
) -> GelfSettings:
    """Merge keyword arguments with ``GELF_*`` environment overrides.

    Environment values win over keyword arguments; unset values fall back to
    the :class:`GelfSettings` defaults. ``GELF_FIELDS`` is merged on top of
    ``fields`` and ``GELF_UPDATERS`` is appended to ``updaters``.

    Raises
    ------
    ValueError
        For unknown protocols, invalid ports, flags or timeouts, and for
        explicitly blank hosts or facilities.
    """

    env = os.environ if environ is None else environ
    defaults = GelfSettings(origin_host=None)

    protocol = _pick(env, "GELF_PROTOCOL", protocol, defaults.protocol)
    host = _pick(env, "GELF_HOST", host, defaults.host)
    port_value: int | str = _pick(env, "GELF_PORT", port, defaults.port)
    facility = _pick(env, "GELF_FACILITY", facility, defaults.facility)
    origin_host = _pick(env, "GELF_ORIGIN_HOST", origin_host, None)
    if origin_host is None:
        origin_host = local_hostname()

    if "GELF_STACKTRACE" in env:
        extract_stacktrace = _parse_bool("GELF_STACKTRACE", env["GELF_STACKTRACE"])
    if "GELF_EXTENDED" in env:
        add_extended_information = _parse_bool("GELF_EXTENDED", env["GELF_EXTENDED"])
    if "GELF_TCP_TIMEOUT" in env:
        tcp_timeout = _parse_timeout(env["GELF_TCP_TIMEOUT"])

    merged_fields = {**dict(fields or {}), **parse_fields(env.get("GELF_FIELDS"))}
    references: list[MessageUpdater | str] = list(updaters or ())
    references.extend(ref for ref in env.get("GELF_UPDATERS", "").split(",") if ref.strip())

    return GelfSettings(
        protocol=TransportProtocol.from_name(protocol),
        host=host,
        port=_validate_port(port_value),
        facility=facility,
        origin_host=origin_host,
        extract_stacktrace=defaults.extract_stacktrace if extract_stacktrace is None else extract_stacktrace,
        add_extended_information=(
            defaults.add_extended_information if add_extended_information is None else add_extended_information
        ),
        fields=merged_fields,
        updaters=_load_updaters(references),
        tcp_timeout=tcp_timeout,
    )


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether to load ``.env``: an explicit flag beats the env toggle.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    return env_value.strip().lower() in _TRUE


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` without overriding existing variables.

    The search walks upwards from ``search_from`` (the working directory by
    default). Returns the loaded path, or ``None`` when no file was found.
    """

    if search_from is None:
        candidate = find_dotenv(usecwd=True)
    else:
        candidate = _find_upwards(search_from)
    if not candidate:
        return None
    path = Path(candidate).resolve()
    load_dotenv(path, override=False)
    _DOTENV_STATE["path"] = path
    return path


def _find_upwards(start: Path) -> str:
    for directory in (start.resolve(), *start.resolve().parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return str(candidate)
    return ""


def loaded_dotenv_path() -> Path | None:
    """Return the ``.env`` path loaded by :func:`enable_dotenv`, if any."""

    return _DOTENV_STATE["path"]


def _reset_dotenv_state_for_testing() -> None:
    _DOTENV_STATE["path"] = None


__all__ = [
    "DEFAULT_FACILITY",
    "DEFAULT_HOST",
    "DOTENV_ENV_VAR",
    "GelfSettings",
    "build_settings",
    "enable_dotenv",
    "loaded_dotenv_path",
    "local_hostname",
    "parse_fields",
    "should_use_dotenv",
]
