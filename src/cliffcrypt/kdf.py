# -*- coding: utf-8 -*-
"""
Password-based derivation of AES keys.

Argon2id (argon2-cffi) is the default. PBKDF2-HMAC-SHA256 is available for
interoperability with systems that only speak PBKDF2 (salt + iteration count).

Derivation is deterministic: the same password, salt and parameters always
give the same ``SymmetricKey``. The salt is not secret but must be stored
alongside whatever the key protects; ``generate_salt`` gives a fresh one.
"""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Final, Optional, Union

from argon2.low_level import Type, hash_secret_raw

from cliffcrypt.config import validate_symmetric_key_bits
from cliffcrypt.exceptions import KdfError, UnsupportedKeySize
from cliffcrypt.keys import SymmetricKey
from cliffcrypt.utils import random_bytes, zero_memory

_LOGGER: Final = logging.getLogger(__name__)

_MIN_SALT_LEN: Final[int] = 8
_MAX_SALT_LEN: Final[int] = 64
_MIN_PBKDF2_ITERS: Final[int] = 100_000
_ARGON2_VERSION: Final[int] = 19


@dataclass(frozen=True)
class Argon2idParams:
    """
    Argon2id cost parameters.

    Attributes:
        time_cost: number of iterations (>= 2).
        memory_cost: memory usage in KiB (>= 65536).
        parallelism: number of lanes (>= 1).
    """

    time_cost: int = 3
    memory_cost: int = 65_536  # KiB
    parallelism: int = 4

    def __post_init__(self) -> None:
        if not (isinstance(self.time_cost, int) and self.time_cost >= 2):
            raise KdfError("Argon2id time_cost must be >= 2")
        if not (isinstance(self.memory_cost, int) and self.memory_cost >= 65_536):
            raise KdfError("Argon2id memory_cost must be >= 65536 (KiB)")
        if not (isinstance(self.parallelism, int) and self.parallelism >= 1):
            raise KdfError("Argon2id parallelism must be >= 1")


@dataclass(frozen=True)
class Pbkdf2Params:
    """PBKDF2-HMAC-SHA256 iteration count (>= 100_000)."""

    iterations: int = 600_000

    def __post_init__(self) -> None:
        if not isinstance(self.iterations, int) or self.iterations < _MIN_PBKDF2_ITERS:
            raise KdfError(f"PBKDF2 iterations must be >= {_MIN_PBKDF2_ITERS}")


KdfParams = Union[Argon2idParams, Pbkdf2Params]


def generate_salt(length: int = 16) -> bytes:
    """
    Fresh random salt.

    Raises:
        KdfError: if length is outside 8..64.
    """
    if not isinstance(length, int) or length < _MIN_SALT_LEN or length > _MAX_SALT_LEN:
        raise KdfError("Salt length must be between 8 and 64 bytes")
    return random_bytes(length)


def _derive_argon2id(pw: bytes, salt: bytes, length: int, params: Argon2idParams) -> bytes:
    try:
        dk: bytes = hash_secret_raw(
            secret=pw,
            salt=salt,
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=length,
            type=Type.ID,
            version=_ARGON2_VERSION,
        )
    except Exception as exc:
        _LOGGER.error("Argon2id derivation failed: %s", exc.__class__.__name__)
        raise KdfError("Argon2id failed") from exc
    _LOGGER.debug(
        "Argon2id derivation completed (t=%d, m=%d)", params.time_cost, params.memory_cost
    )
    return dk


def _derive_pbkdf2(pw: bytes, salt: bytes, length: int, params: Pbkdf2Params) -> bytes:
    try:
        dk = hashlib.pbkdf2_hmac("sha256", pw, salt, params.iterations, dklen=length)
    except Exception as exc:
        _LOGGER.error("PBKDF2 derivation failed: %s", exc.__class__.__name__)
        raise KdfError("PBKDF2 failed") from exc
    _LOGGER.debug("PBKDF2 derivation completed (iters=%d)", params.iterations)
    return dk


def derive_symmetric_key(
    password: Union[str, bytes, bytearray],
    salt: bytes,
    bit_length: int = 256,
    *,
    params: Optional[KdfParams] = None,
) -> SymmetricKey:
    """
    Derive an AES key from a password.

    Args:
        password: user password or secret (str is UTF-8 encoded).
        salt: random salt, 8..64 bytes.
        bit_length: 128, 192 or 256.
        params: ``Argon2idParams`` (default) or ``Pbkdf2Params``.

    Returns:
        Derived SymmetricKey.

    Raises:
        UnsupportedKeySize: on unsupported bit_length.
        KdfError: on invalid password/salt/params or backend failure.

    Examples:
        >>> salt = generate_salt()
        >>> k1 = derive_symmetric_key("pw", salt, params=Pbkdf2Params(100_000))
        >>> k1 == derive_symmetric_key("pw", salt, params=Pbkdf2Params(100_000))
        True
    """
    if not validate_symmetric_key_bits(bit_length):
        raise UnsupportedKeySize(f"Unsupported AES key size: {bit_length!r} bits")
    if not isinstance(salt, (bytes, bytearray)):
        raise KdfError("Salt must be bytes")
    if len(salt) < _MIN_SALT_LEN or len(salt) > _MAX_SALT_LEN:
        raise KdfError("Salt length must be between 8 and 64 bytes")
    if isinstance(password, str):
        pw = bytearray(password.encode("utf-8"))
    elif isinstance(password, (bytes, bytearray)):
        pw = bytearray(password)
    else:
        raise KdfError("Password must be str, bytes or bytearray")
    if not pw:
        raise KdfError("Password must not be empty")

    if params is None:
        params = Argon2idParams()

    length = bit_length // 8
    try:
        if isinstance(params, Argon2idParams):
            dk = _derive_argon2id(bytes(pw), bytes(salt), length, params)
        elif isinstance(params, Pbkdf2Params):
            dk = _derive_pbkdf2(bytes(pw), bytes(salt), length, params)
        else:
            raise KdfError("Unsupported KDF parameters")
    finally:
        zero_memory(pw)
    return SymmetricKey.from_raw_bytes(dk)


__all__ = [
    "Argon2idParams",
    "Pbkdf2Params",
    "KdfParams",
    "generate_salt",
    "derive_symmetric_key",
]
