# -*- coding: utf-8 -*-
"""
Process-wide random source and small byte helpers.

All key and nonce material in cliffcrypt is drawn through ``random_bytes``.
The underlying generator is the OS CSPRNG exposed by ``secrets``; it is
thread-safe, needs no seeding and is never replaced at runtime.
"""
from __future__ import annotations

import hmac
import logging
import secrets
from collections import Counter
from typing import Callable, Final, Optional, Union

from cliffcrypt.exceptions import CryptoError

_LOGGER: Final = logging.getLogger(__name__)

_MAX_RANDOM_BYTES: Final[int] = 10 * 1024 * 1024
_SMALL_APT_MIN_N: Final[int] = 32
_APT_MAX_PROPORTION: Final[float] = 0.80

# Read-only after import.
_RANDOM_SOURCE: Final[Callable[[int], bytes]] = secrets.token_bytes

BytesLike = Union[bytes, bytearray]


def random_bytes(n: int) -> bytes:
    """
    Draw ``n`` bytes from the OS CSPRNG.

    Args:
        n: number of bytes to generate (1..10MiB).

    Returns:
        Random bytes of requested length.

    Raises:
        ValueError: if n is out of range.
        CryptoError: if the output fails the degenerate-output sanity checks.
    """
    if not isinstance(n, int) or isinstance(n, bool) or n <= 0 or n > _MAX_RANDOM_BYTES:
        raise ValueError("Requested random size must be in 1..10MiB")

    out = _RANDOM_SOURCE(n)
    if len(out) != n:
        _LOGGER.error("Random source returned %d bytes, expected %d", len(out), n)
        raise CryptoError("random source failure")
    _rct_apt_checks(out)
    return out


def _rct_apt_checks(data: bytes) -> None:
    """
    Repetition Count Test (RCT) and Adaptive Proportion Test (APT) sanity checks.

    Only meaningful for samples of 8 bytes or more; shorter samples are not checked.
    """
    if len(data) < 8:
        return
    if all(b == data[0] for b in data):
        _LOGGER.error("Degenerate RNG output detected (%d bytes)", len(data))
        raise CryptoError("random source failure")
    if len(data) >= _SMALL_APT_MIN_N:
        freq: Counter[int] = Counter(data)
        max_prop = max(freq.values()) / float(len(data))
        if max_prop > _APT_MAX_PROPORTION:
            _LOGGER.error("RNG output fails adaptive proportion check")
            raise CryptoError("random source failure")


def zero_memory(buf: Optional[bytearray]) -> None:
    """
    Best-effort zeroization of a mutable buffer.

    Notes:
        - Only works on bytearray; Python bytes cannot be wiped.
        - Garbage collection, interning and swap mean true erasure is not
          achievable in pure Python. This only narrows the exposure window.
    """
    if buf is None:
        return
    try:
        for i in range(len(buf)):
            buf[i] = 0
    except (TypeError, AttributeError) as e:
        _LOGGER.debug("zero_memory skip (immutable): %s", e.__class__.__name__)


def secure_compare(a: BytesLike, b: BytesLike) -> bool:
    """Constant-time bytes comparison."""
    return hmac.compare_digest(bytes(a), bytes(b))


def ensure_bytes(data: object, name: str = "data") -> bytes:
    """
    Return ``data`` as immutable bytes.

    Raises:
        TypeError: if data is not bytes-like.
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"{name} must be bytes-like, got {type(data).__name__}")


__all__ = [
    "random_bytes",
    "zero_memory",
    "secure_compare",
    "ensure_bytes",
]
