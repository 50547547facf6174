# -*- coding: utf-8 -*-
"""
Centralized exception hierarchy for cliffcrypt.

Guidelines:
- Do not put secrets (keys, nonces, tags, plaintexts, salts) into exception messages.
- Raise the narrowest subclass at the call site; callers may catch ``CryptoError``.
- Decryption failures carry one fixed message regardless of cause so that
  error responses cannot be used as a padding or tag oracle.
"""

from __future__ import annotations

from typing import Final, Optional

DECRYPTION_FAILED_MESSAGE: Final[str] = "decryption failed"


class CryptoError(Exception):
    """Base exception for all cliffcrypt failures."""

    def __init__(
        self, message: str = "", *, cause: Optional[BaseException] = None
    ) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


# Key material
class KeyMaterialError(CryptoError):
    """Base class for key generation/import errors."""


class InvalidKeyLength(KeyMaterialError):
    """Raised when imported key bytes do not match a supported key size."""


class UnsupportedKeySize(KeyMaterialError):
    """Raised when a requested key size is not supported or below the safe minimum."""


class InvalidKeyFormat(KeyMaterialError):
    """Raised when serialized key material cannot be loaded."""


# Algorithms and configuration
class UnsupportedAlgorithm(CryptoError):
    """Raised on an unknown hash or cipher algorithm selection."""


class ConfigurationMismatch(CryptoError):
    """Raised when configuration and supplied key material are incompatible."""


# Encryption
class EncryptionFailure(CryptoError):
    """Raised on primitive-level encryption faults. Never retried internally."""


class PlaintextTooLarge(EncryptionFailure):
    """Raised when plaintext exceeds the RSA-OAEP ceiling for the key."""


# Decryption
class DecryptionError(CryptoError):
    """Base class for decryption-side failures."""


class MalformedEnvelope(DecryptionError):
    """Raised when an envelope cannot be split into nonce/ciphertext/tag."""


class AuthenticationFailure(DecryptionError):
    """Raised when AEAD authentication fails. Carries no detail beyond failure."""

    def __init__(self, message: str = DECRYPTION_FAILED_MESSAGE) -> None:
        super().__init__(message)


class DecryptionFailure(DecryptionError):
    """Raised when RSA decryption fails. Carries no detail beyond failure."""

    def __init__(self, message: str = DECRYPTION_FAILED_MESSAGE) -> None:
        super().__init__(message)


# Hashing / KDF
class HashingError(CryptoError):
    """Raised on misuse of a streaming hasher."""


class KdfError(CryptoError):
    """Raised on invalid key-derivation parameters or KDF backend failure."""


__all__ = [
    "DECRYPTION_FAILED_MESSAGE",
    "CryptoError",
    "KeyMaterialError",
    "InvalidKeyLength",
    "UnsupportedKeySize",
    "InvalidKeyFormat",
    "UnsupportedAlgorithm",
    "ConfigurationMismatch",
    "EncryptionFailure",
    "PlaintextTooLarge",
    "DecryptionError",
    "MalformedEnvelope",
    "AuthenticationFailure",
    "DecryptionFailure",
    "HashingError",
    "KdfError",
]
