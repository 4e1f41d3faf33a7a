"""Destination resolver spreading load over several collector addresses.

The configured host is a single name or a comma-separated list. Every name is
resolved to all of its addresses; when the union holds more than one, one is
picked uniformly at random. Transports call :meth:`DestinationResolver.resolve`
once per connection cycle, which gives simple client-side spreading across
collector instances without a central balancer.
"""

from __future__ import annotations

import logging
import random
import socket
from typing import Any, Callable

from lib_log_gelf.application.ports.transport import Destination, DestinationPort
from lib_log_gelf.domain.errors import DestinationResolutionError

logger = logging.getLogger(__name__)

AddrInfoResolver = Callable[..., list[tuple[Any, ...]]]


def split_hosts(host: str) -> list[str]:
    """Split a comma-separated host list, dropping blanks.

    Examples
    --------
    >>> split_hosts(" a.example , b.example,, ")
    ['a.example', 'b.example']
    """

    return [part.strip() for part in host.split(",") if part.strip()]


class DestinationResolver(DestinationPort):
    """Resolve ``host`` (one name or a comma list) to a single destination."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        socktype: int = socket.SOCK_DGRAM,
        rng: random.Random | None = None,
        getaddrinfo: AddrInfoResolver | None = None,
    ) -> None:
        self._hosts = split_hosts(host)
        if not self._hosts:
            raise ValueError("host must name at least one hostname")
        self._host = host
        self._port = port
        self._socktype = socktype
        self._rng = rng or random.Random()
        self._getaddrinfo = getaddrinfo or socket.getaddrinfo

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    def candidates(self) -> list[Destination]:
        """Return the de-duplicated union of addresses for all hostnames."""

        seen: dict[tuple[int, tuple[Any, ...]], Destination] = {}
        for name in self._hosts:
            try:
                infos = self._getaddrinfo(name, self._port, 0, self._socktype)
            except (socket.gaierror, UnicodeError) as exc:
                logger.debug("could not resolve %s: %s", name, exc)
                continue
            for family, _type, _proto, _canonname, sockaddr in infos:
                key = (family, tuple(sockaddr))
                seen.setdefault(key, Destination(family=family, sockaddr=tuple(sockaddr)))
        return list(seen.values())

    def resolve(self) -> Destination:
        """Return one destination, chosen at random when several exist."""

        candidates = self.candidates()
        if not candidates:
            raise DestinationResolutionError(f"no address found for {self._host!r}")
        if len(candidates) == 1:
            return candidates[0]
        return self._rng.choice(candidates)


__all__ = ["DestinationResolver", "split_hosts"]
