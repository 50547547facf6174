# -*- coding: utf-8 -*-
"""
AES-GCM authenticated encryption with a fresh random nonce per call.

Wire format of an envelope (fixed order, no metadata):

    nonce (12 bytes) || ciphertext (len(plaintext) bytes) || tag (16 bytes)

Key size and algorithm travel out-of-band; see ``cliffcrypt.config``.

Nonce strategy:
- Fully random 96-bit nonce drawn for every ``encrypt`` call (NIST SP 800-38D).
- No counters, no caller-supplied nonces: there is no API that accepts a
  nonce for encryption, so a nonce cannot be replayed through this module.
- Birthday bound: stay well below 2^32 messages per key.

Decryption:
- The tag is verified by the AEAD primitive before any plaintext is
  released; there is no way to obtain unverified plaintext.
- Every failure after envelope parsing surfaces as ``AuthenticationFailure``
  with the same message, whatever the cause.

Thread-safety:
- No shared state; one ``SymmetricCipher`` may serve any number of threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Optional, Union

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from cliffcrypt.exceptions import (
    AuthenticationFailure,
    ConfigurationMismatch,
    EncryptionFailure,
    MalformedEnvelope,
)
from cliffcrypt.keys import NONCE_LEN, Nonce, SymmetricKey
from cliffcrypt.utils import ensure_bytes

_LOGGER: Final = logging.getLogger(__name__)

TAG_LEN: Final[int] = 16
MIN_ENVELOPE_LEN: Final[int] = NONCE_LEN + TAG_LEN

BytesLike = Union[bytes, bytearray]


@dataclass(frozen=True, slots=True)
class Envelope:
    """
    Result of AES-GCM encryption: ``{nonce, ciphertext, tag}``.

    The caller owns it after return; nothing in cliffcrypt keeps a reference.

    Examples:
        >>> key = SymmetricKey.generate(128)
        >>> env = SymmetricCipher().encrypt(key, b"")
        >>> len(env.to_bytes())
        28
    """

    nonce: Nonce
    ciphertext: bytes
    tag: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.nonce, Nonce):
            raise MalformedEnvelope("Envelope nonce must be a Nonce")
        if not isinstance(self.ciphertext, bytes):
            raise MalformedEnvelope("Envelope ciphertext must be bytes")
        if not isinstance(self.tag, bytes) or len(self.tag) != TAG_LEN:
            raise MalformedEnvelope("GCM tag must be 16 bytes")

    def to_bytes(self) -> bytes:
        return self.nonce.value + self.ciphertext + self.tag

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __len__(self) -> int:
        return NONCE_LEN + len(self.ciphertext) + TAG_LEN

    @classmethod
    def from_bytes(cls, blob: BytesLike) -> "Envelope":
        """
        Split wire bytes into nonce, ciphertext and tag.

        Raises:
            MalformedEnvelope: if blob is not bytes or shorter than 28 bytes.
        """
        if not isinstance(blob, (bytes, bytearray, memoryview)):
            raise MalformedEnvelope("Envelope must be bytes")
        data = bytes(blob)
        if len(data) < MIN_ENVELOPE_LEN:
            raise MalformedEnvelope(
                f"Envelope must be at least {MIN_ENVELOPE_LEN} bytes"
            )
        return cls(
            nonce=Nonce.from_bytes(data[:NONCE_LEN]),
            ciphertext=data[NONCE_LEN:-TAG_LEN],
            tag=data[-TAG_LEN:],
        )

    def __repr__(self) -> str:
        return f"Envelope(ciphertext_len={len(self.ciphertext)})"


def _check_aad(associated_data: Optional[BytesLike]) -> Optional[bytes]:
    if associated_data is None:
        return None
    aad = ensure_bytes(associated_data, "associated_data")
    # GCM authenticates b"" and None identically.
    return aad or None


class SymmetricCipher:
    """
    AES-GCM (128/192/256) encryption and decryption.

    Methods:
        encrypt(key, plaintext, associated_data) -> Envelope
        decrypt(key, envelope, associated_data) -> plaintext

    Examples:
        >>> cipher = SymmetricCipher()
        >>> key = SymmetricKey.generate(256)
        >>> env = cipher.encrypt(key, b"hello", b"hdr")
        >>> cipher.decrypt(key, env, b"hdr")
        b'hello'
    """

    __slots__ = ()

    @staticmethod
    def _validate_key(key: object) -> SymmetricKey:
        if not isinstance(key, SymmetricKey):
            raise ConfigurationMismatch("AES-GCM requires a SymmetricKey")
        return key

    def encrypt(
        self,
        key: SymmetricKey,
        plaintext: BytesLike,
        associated_data: Optional[BytesLike] = None,
    ) -> Envelope:
        """
        Encrypt under a freshly generated nonce.

        Args:
            key: AES key.
            plaintext: message to encrypt (may be empty).
            associated_data: authenticated but unencrypted context; must be
                passed identically to ``decrypt``.

        Returns:
            Envelope with nonce, ciphertext and 16-byte tag.

        Raises:
            ConfigurationMismatch: if key is not a SymmetricKey.
            EncryptionFailure: on primitive failure. Do not retry with the
                same envelope; a new call draws a new nonce.
            CryptoError: if the random source fails its health checks while
                drawing the nonce.
        """
        k = self._validate_key(key)
        pt = ensure_bytes(plaintext, "plaintext")
        aad = _check_aad(associated_data)

        nonce = Nonce.generate()
        try:
            combined = AESGCM(k.raw()).encrypt(nonce.value, pt, aad)
        except Exception as exc:
            _LOGGER.error("AES-GCM encryption failed: %s", exc.__class__.__name__)
            raise EncryptionFailure("AES-GCM encryption failed") from exc

        _LOGGER.debug("AES-%d-GCM encrypted %d bytes", k.bit_length, len(pt))
        return Envelope(
            nonce=nonce,
            ciphertext=combined[:-TAG_LEN],
            tag=combined[-TAG_LEN:],
        )

    def decrypt(
        self,
        key: SymmetricKey,
        envelope: Union[Envelope, BytesLike],
        associated_data: Optional[BytesLike] = None,
    ) -> bytes:
        """
        Verify and decrypt.

        Args:
            key: AES key used for encryption.
            envelope: ``Envelope`` or its wire bytes.
            associated_data: must equal the value given to ``encrypt``.

        Returns:
            Plaintext bytes, only after successful tag verification.

        Raises:
            ConfigurationMismatch: if key is not a SymmetricKey.
            MalformedEnvelope: if envelope cannot be split into nonce/ciphertext/tag.
            AuthenticationFailure: on tag mismatch or any other decryption fault.
        """
        k = self._validate_key(key)
        env = envelope if isinstance(envelope, Envelope) else Envelope.from_bytes(envelope)
        aad = _check_aad(associated_data)

        try:
            return AESGCM(k.raw()).decrypt(env.nonce.value, env.ciphertext + env.tag, aad)
        except Exception:
            _LOGGER.warning("AES-GCM decryption failed")
            raise AuthenticationFailure() from None


def encrypt_aes_gcm(
    key: SymmetricKey,
    plaintext: BytesLike,
    associated_data: Optional[BytesLike] = None,
) -> bytes:
    """
    Functional helper returning wire bytes ``nonce || ciphertext || tag``.

    Example:
        >>> key = SymmetricKey.generate()
        >>> decrypt_aes_gcm(key, encrypt_aes_gcm(key, b"hi"))
        b'hi'
    """
    return SymmetricCipher().encrypt(key, plaintext, associated_data).to_bytes()


def decrypt_aes_gcm(
    key: SymmetricKey,
    blob: BytesLike,
    associated_data: Optional[BytesLike] = None,
) -> bytes:
    """Functional helper for wire bytes produced by ``encrypt_aes_gcm``."""
    return SymmetricCipher().decrypt(key, blob, associated_data)


__all__ = [
    "TAG_LEN",
    "MIN_ENVELOPE_LEN",
    "Envelope",
    "SymmetricCipher",
    "encrypt_aes_gcm",
    "decrypt_aes_gcm",
]
