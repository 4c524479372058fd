# SPDX-License-Identifier: MIT

"""Deterministic masking of identifiers such as namespace and object names.

A masked value is derived from an HMAC of the original keyed with a salt drawn
once per process. Within a process the mapping is stable; across restarts it
is not. A masker that remembers keeps a reverse table so authorized consumers
can recover the original. The process-wide default does not remember; each
analysis run forks its own masker so the table lives only as long as the run.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import string
import threading

MIN_MASK_LENGTH = 8
_ALPHABET = string.ascii_letters


class Masker:
    def __init__(self, salt: bytes | None = None, remember: bool = True):
        self._salt = salt if salt is not None else secrets.token_bytes(32)
        self._remember = remember
        self._reverse: dict[str, str] = {}
        self._lock = threading.Lock()

    def fork(self) -> Masker:
        """Same salt, fresh reverse table."""
        return Masker(salt=self._salt, remember=True)

    def mask(self, value: str) -> str:
        if not value:
            return value
        length = max(len(value), MIN_MASK_LENGTH)
        digest = b""
        counter = 0
        while len(digest) < length:
            digest += hmac.new(self._salt, f"{counter}:{value}".encode(), hashlib.sha256).digest()
            counter += 1
        masked = "".join(_ALPHABET[b % len(_ALPHABET)] for b in digest[:length])
        if self._remember:
            with self._lock:
                self._reverse.setdefault(masked, value)
        return masked

    def unmask(self, masked: str) -> str:
        with self._lock:
            return self._reverse.get(masked, masked)

    @property
    def remembered(self) -> int:
        return len(self._reverse)


_default_masker: Masker | None = None
_default_lock = threading.Lock()


def default_masker() -> Masker:
    global _default_masker
    with _default_lock:
        if _default_masker is None:
            _default_masker = Masker(remember=False)
        return _default_masker


def run_masker() -> Masker:
    """A masker for one analysis run: process-stable masks, run-scoped reverse table."""
    return default_masker().fork()


def mask_string(value: str) -> str:
    return default_masker().mask(value)
