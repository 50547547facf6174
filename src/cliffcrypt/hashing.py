# -*- coding: utf-8 -*-
"""
SHA-256 / SHA-512 digests.

Pure functions of their input: one-shot ``hash_bytes``, incremental
``Hasher`` (feed chunks, then finalize) and ``hash_stream`` for readable
binary streams supplied by the caller. Output is always raw bytes; hex or
base64 rendering is left to the caller.

Example:
    >>> hash_bytes(HashAlgorithm.SHA256, b"abc").hex()[:16]
    'ba7816bf8f01cfea'
    >>> h = Hasher(HashAlgorithm.SHA512)
    >>> _ = h.update(b"a").update(b"bc")
    >>> h.finalize() == hash_bytes(HashAlgorithm.SHA512, b"abc")
    True
"""

from __future__ import annotations

import hashlib
import logging
from enum import Enum
from typing import BinaryIO, Final, Union

from cliffcrypt.exceptions import HashingError, UnsupportedAlgorithm

_LOGGER: Final = logging.getLogger(__name__)

CHUNK_SIZE: Final[int] = 65536  # 64 KB

SHA256_OUTPUT_SIZE: Final[int] = 32
SHA512_OUTPUT_SIZE: Final[int] = 64


class HashAlgorithm(str, Enum):
    SHA256 = "sha256"
    SHA512 = "sha512"


_OUTPUT_SIZES: Final[dict[HashAlgorithm, int]] = {
    HashAlgorithm.SHA256: SHA256_OUTPUT_SIZE,
    HashAlgorithm.SHA512: SHA512_OUTPUT_SIZE,
}


def _resolve(algorithm: Union[HashAlgorithm, str]) -> HashAlgorithm:
    try:
        return HashAlgorithm(algorithm)
    except ValueError:
        _LOGGER.warning("Unsupported hash algorithm requested: %r", algorithm)
        raise UnsupportedAlgorithm(
            f"Unsupported hash algorithm: {algorithm!r} (use sha256 or sha512)"
        ) from None


def _check_bytes(data: object) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"data must be bytes, got {type(data).__name__}")


def digest_size(algorithm: Union[HashAlgorithm, str]) -> int:
    """Output size in bytes (32 for SHA-256, 64 for SHA-512)."""
    return _OUTPUT_SIZES[_resolve(algorithm)]


class Hasher:
    """
    Incremental SHA-2 hasher.

    ``update`` may be called any number of times; ``finalize`` returns the
    digest and closes the hasher. Not safe to share between threads while
    feeding; use one instance per stream.

    Raises:
        UnsupportedAlgorithm: on construction with an unknown algorithm.
        HashingError: on update/finalize after finalize.
    """

    __slots__ = ("_algorithm", "_ctx", "_finalized")

    def __init__(self, algorithm: Union[HashAlgorithm, str]) -> None:
        self._algorithm = _resolve(algorithm)
        self._ctx = hashlib.new(self._algorithm.value)
        self._finalized = False

    @property
    def algorithm(self) -> HashAlgorithm:
        return self._algorithm

    @property
    def digest_size(self) -> int:
        return _OUTPUT_SIZES[self._algorithm]

    def update(self, chunk: bytes) -> "Hasher":
        if self._finalized:
            raise HashingError("Hasher already finalized")
        self._ctx.update(_check_bytes(chunk))
        return self

    def finalize(self) -> bytes:
        if self._finalized:
            raise HashingError("Hasher already finalized")
        self._finalized = True
        return self._ctx.digest()


def hash_bytes(algorithm: Union[HashAlgorithm, str], data: bytes) -> bytes:
    """
    One-shot digest of ``data``. Empty input is allowed.

    Raises:
        UnsupportedAlgorithm: if algorithm is not SHA-256/SHA-512.
        TypeError: if data is not bytes-like.
    """
    alg = _resolve(algorithm)
    return hashlib.new(alg.value, _check_bytes(data)).digest()


def salted_hash(
    algorithm: Union[HashAlgorithm, str], data: bytes, salt: bytes
) -> bytes:
    """Digest of ``salt || data``."""
    return (
        Hasher(algorithm).update(_check_bytes(salt)).update(_check_bytes(data)).finalize()
    )


def hash_stream(
    algorithm: Union[HashAlgorithm, str],
    stream: BinaryIO,
    chunk_size: int = CHUNK_SIZE,
) -> bytes:
    """
    Digest a readable binary stream chunk by chunk.

    The stream is read to EOF but not closed; opening and closing it is the
    caller's business.

    Example:
        >>> import io
        >>> hash_stream("sha256", io.BytesIO(b"abc")) == hash_bytes("sha256", b"abc")
        True
    """
    if not hasattr(stream, "read"):
        raise TypeError("stream must be a binary readable object")
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer")

    hasher = Hasher(algorithm)
    bytes_processed = 0
    while chunk := stream.read(chunk_size):
        hasher.update(chunk)
        bytes_processed += len(chunk)
    _LOGGER.debug(
        "%s stream hashed: %d bytes", hasher.algorithm.value.upper(), bytes_processed
    )
    return hasher.finalize()


__all__ = [
    "CHUNK_SIZE",
    "SHA256_OUTPUT_SIZE",
    "SHA512_OUTPUT_SIZE",
    "HashAlgorithm",
    "Hasher",
    "digest_size",
    "hash_bytes",
    "salted_hash",
    "hash_stream",
]
