"""Gzip helpers for the UDP path. TCP sends uncompressed JSON."""

from __future__ import annotations

import gzip


def gzip_payload(text: str) -> bytes:
    """Gzip-compress the UTF-8 encoding of ``text``."""

    return gzip.compress(text.encode("utf-8"))


def gunzip_payload(data: bytes) -> str:
    """Inverse of :func:`gzip_payload`, used when reassembling datagrams."""

    return gzip.decompress(data).decode("utf-8")


__all__ = ["gunzip_payload", "gzip_payload"]
