# -*- coding: utf-8 -*-
"""
Key material: AES keys, GCM nonces and RSA key pairs.

Every type here validates its size on construction, so code holding a
``SymmetricKey``, ``Nonce`` or ``RsaKeyPair`` never has to re-check lengths.
Key bytes and private keys are never part of ``repr()``, log records or
exception messages.

Thread-safety:
- All types are immutable after construction and can be shared freely.
- Fresh material comes from ``cliffcrypt.utils.random_bytes`` (OS CSPRNG).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final, Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm as _BackendUnsupported
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from cliffcrypt.config import (
    MAX_RSA_KEY_BITS,
    MIN_RSA_KEY_BITS,
    SUPPORTED_SYMMETRIC_KEY_BITS,
    validate_rsa_key_bits,
    validate_symmetric_key_bits,
)
from cliffcrypt.exceptions import (
    InvalidKeyFormat,
    InvalidKeyLength,
    KeyMaterialError,
    MalformedEnvelope,
    UnsupportedKeySize,
)
from cliffcrypt.hashing import HashAlgorithm, hash_bytes
from cliffcrypt.utils import random_bytes, secure_compare

_LOGGER: Final = logging.getLogger(__name__)

SYMMETRIC_KEY_LENGTHS: Final[tuple[int, ...]] = tuple(
    bits // 8 for bits in SUPPORTED_SYMMETRIC_KEY_BITS
)
NONCE_LEN: Final[int] = 12
RSA_PUBLIC_EXPONENT: Final[int] = 65537

BytesLike = Union[bytes, bytearray]


class SymmetricKey:
    """
    AES key of 128, 192 or 256 bits.

    Build through ``generate``/``from_raw_bytes`` (or the module-level
    ``generate_symmetric_key``/``import_symmetric_key``); the constructor
    performs the same validation.

    Examples:
        >>> key = SymmetricKey.generate(256)
        >>> key.bit_length
        256
        >>> repr(key)
        'SymmetricKey(bits=256)'
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: BytesLike) -> None:
        if not isinstance(raw, (bytes, bytearray)):
            raise InvalidKeyLength("Symmetric key must be raw bytes")
        if len(raw) not in SYMMETRIC_KEY_LENGTHS:
            raise InvalidKeyLength(
                f"Symmetric key must be 16, 24 or 32 bytes, got {len(raw)}"
            )
        self._raw = bytes(raw)

    @classmethod
    def generate(cls, bit_length: int = 256) -> "SymmetricKey":
        """
        Generate a fresh random key.

        Raises:
            UnsupportedKeySize: if bit_length is not 128, 192 or 256.
            CryptoError: if the random source fails its health checks.
        """
        if not validate_symmetric_key_bits(bit_length):
            raise UnsupportedKeySize(
                f"Unsupported AES key size: {bit_length!r} bits (use 128, 192 or 256)"
            )
        _LOGGER.debug("Generating %d-bit symmetric key", bit_length)
        return cls(random_bytes(bit_length // 8))

    @classmethod
    def from_raw_bytes(cls, raw: BytesLike) -> "SymmetricKey":
        """
        Import existing key bytes.

        Raises:
            InvalidKeyLength: if len(raw) is not 16, 24 or 32.
        """
        return cls(raw)

    @property
    def bit_length(self) -> int:
        return len(self._raw) * 8

    @property
    def byte_length(self) -> int:
        return len(self._raw)

    def raw(self) -> bytes:
        """Return the key bytes. Callers must not log or persist them."""
        return self._raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SymmetricKey):
            return NotImplemented
        return secure_compare(self._raw, other._raw)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"SymmetricKey(bits={self.bit_length})"


@dataclass(frozen=True, slots=True)
class Nonce:
    """
    96-bit GCM nonce.

    ``generate`` is the only way nonces enter an encryption; ``from_bytes``
    exists to read them back out of an envelope.
    """

    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, bytes) or len(self.value) != NONCE_LEN:
            raise MalformedEnvelope("GCM nonce must be 12 bytes")

    @classmethod
    def generate(cls) -> "Nonce":
        return cls(random_bytes(NONCE_LEN))

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "Nonce":
        return cls(bytes(data))

    def __bytes__(self) -> bytes:
        return self.value

    def __len__(self) -> int:
        return len(self.value)


@dataclass(frozen=True, eq=False)
class RsaKeyPair:
    """
    RSA public key with an optional private half.

    Public-only pairs (loaded from a peer's PEM) can encrypt but not decrypt.
    The private key can only leave the process as password-encrypted PKCS#8.

    Thread safety: guaranteed (frozen dataclass over immutable key objects).
    """

    public_key: rsa.RSAPublicKey
    private_key: Optional[rsa.RSAPrivateKey] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.public_key, rsa.RSAPublicKey):
            raise InvalidKeyFormat("public_key must be an RSA public key")
        if self.private_key is not None and not isinstance(
            self.private_key, rsa.RSAPrivateKey
        ):
            raise InvalidKeyFormat("private_key must be an RSA private key")

    @property
    def key_size(self) -> int:
        """Modulus size in bits."""
        return self.public_key.key_size

    @property
    def modulus_bytes(self) -> int:
        return (self.public_key.key_size + 7) // 8

    @property
    def has_private_key(self) -> bool:
        return self.private_key is not None

    def public_only(self) -> "RsaKeyPair":
        return RsaKeyPair(self.public_key)

    def export_public_pem(self) -> bytes:
        return self.public_key.public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def export_private_pem(self, password: bytes) -> bytes:
        """
        Export the private key as encrypted PKCS#8 PEM.

        Raises:
            KeyMaterialError: if this pair holds no private key.
            InvalidKeyFormat: if password is empty or not bytes.
        """
        if self.private_key is None:
            raise KeyMaterialError("No private key present")
        if not isinstance(password, (bytes, bytearray)) or len(password) == 0:
            raise InvalidKeyFormat("Private key export requires a non-empty password")
        return self.private_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.BestAvailableEncryption(bytes(password)),
        )

    def fingerprint(self) -> bytes:
        """SHA-256 over the DER SubjectPublicKeyInfo."""
        der = self.public_key.public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return hash_bytes(HashAlgorithm.SHA256, der)

    def same_public_key(self, other: object) -> bool:
        if not isinstance(other, RsaKeyPair):
            return False
        return secure_compare(self.fingerprint(), other.fingerprint())

    def __repr__(self) -> str:
        return (
            f"RsaKeyPair(bits={self.key_size}, "
            f"private={'yes' if self.has_private_key else 'no'})"
        )


def generate_symmetric_key(bit_length: int = 256) -> SymmetricKey:
    """Generate a random AES key (128/192/256 bits)."""
    return SymmetricKey.generate(bit_length)


def import_symmetric_key(raw: BytesLike) -> SymmetricKey:
    """Wrap existing AES key bytes (16/24/32 bytes)."""
    return SymmetricKey.from_raw_bytes(raw)


def generate_rsa_key_pair(bit_length: int = 2048) -> RsaKeyPair:
    """
    Generate an RSA key pair with public exponent 65537.

    Prime search is CPU-bound and blocks the calling thread; run it in an
    executor if the caller cannot afford to wait.

    Raises:
        UnsupportedKeySize: if bit_length is below 2048, above 16384 or not a
            multiple of 256.
        KeyMaterialError: if the backend fails to produce a key.
    """
    if not validate_rsa_key_bits(bit_length):
        raise UnsupportedKeySize(
            f"RSA key size must be between {MIN_RSA_KEY_BITS} and "
            f"{MAX_RSA_KEY_BITS} bits and divisible by 256"
        )
    _LOGGER.info("Generating RSA key pair: bits=%d", bit_length)
    try:
        private_key = rsa.generate_private_key(
            public_exponent=RSA_PUBLIC_EXPONENT, key_size=bit_length
        )
    except Exception as exc:
        _LOGGER.error("RSA key generation failed: %s", exc.__class__.__name__)
        raise KeyMaterialError("RSA key generation failed") from exc
    return RsaKeyPair(private_key.public_key(), private_key)


def _check_loaded_size(bits: int) -> None:
    if bits < MIN_RSA_KEY_BITS or bits > MAX_RSA_KEY_BITS:
        raise UnsupportedKeySize(f"RSA key size {bits} is outside the supported range")


def load_rsa_public_key(pem: bytes) -> RsaKeyPair:
    """
    Load a PEM SubjectPublicKeyInfo RSA public key.

    Raises:
        InvalidKeyFormat: if the data is not a PEM RSA public key.
        UnsupportedKeySize: if the modulus is outside 2048..16384 bits.
    """
    try:
        pk = serialization.load_pem_public_key(bytes(pem))
    except (ValueError, TypeError, _BackendUnsupported) as exc:
        _LOGGER.warning("Public key import failed: %s", exc.__class__.__name__)
        raise InvalidKeyFormat("Failed to import RSA public key") from exc
    if not isinstance(pk, rsa.RSAPublicKey):
        raise InvalidKeyFormat("PEM is not an RSA public key")
    _check_loaded_size(pk.key_size)
    return RsaKeyPair(pk)


def load_rsa_private_key(pem: bytes, password: bytes) -> RsaKeyPair:
    """
    Load an encrypted PKCS#8 PEM RSA private key.

    Raises:
        InvalidKeyFormat: on malformed data, wrong password or non-RSA key.
        UnsupportedKeySize: if the modulus is outside 2048..16384 bits.
    """
    if not isinstance(password, (bytes, bytearray)) or len(password) == 0:
        raise InvalidKeyFormat("Private key import requires a non-empty password")
    try:
        pk = serialization.load_pem_private_key(bytes(pem), password=bytes(password))
    except (ValueError, TypeError, _BackendUnsupported) as exc:
        # Wrong password and corrupt data share one message.
        _LOGGER.warning("Private key import failed: %s", exc.__class__.__name__)
        raise InvalidKeyFormat("Failed to import RSA private key") from None
    if not isinstance(pk, rsa.RSAPrivateKey):
        raise InvalidKeyFormat("PEM is not an RSA private key")
    _check_loaded_size(pk.key_size)
    return RsaKeyPair(pk.public_key(), pk)


__all__ = [
    "SYMMETRIC_KEY_LENGTHS",
    "NONCE_LEN",
    "SymmetricKey",
    "Nonce",
    "RsaKeyPair",
    "generate_symmetric_key",
    "import_symmetric_key",
    "generate_rsa_key_pair",
    "load_rsa_public_key",
    "load_rsa_private_key",
]
