"""
RSA-OAEP encryption for short payloads (keys, tokens, small secrets).

RSA is not a bulk cipher: the plaintext ceiling is

    modulus_bytes - 2 * hash_len - 2

(190 bytes for RSA-2048 with SHA-256). Larger inputs fail with
``PlaintextTooLarge``; encrypt a symmetric key instead.

Ciphertext is the raw OAEP output, exactly ``modulus_bytes`` long, with no
framing. The OAEP hash is fixed per ``AsymmetricCipher`` instance and must
match between encryption and decryption.

Every decryption failure (wrong length, bad padding, wrong key) raises the
same ``DecryptionFailure`` so callers cannot be turned into a padding oracle.
"""

from __future__ import annotations

import logging
from typing import Final, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from cliffcrypt.config import OaepHash
from cliffcrypt.exceptions import (
    ConfigurationMismatch,
    DecryptionFailure,
    EncryptionFailure,
    PlaintextTooLarge,
)
from cliffcrypt.keys import RsaKeyPair
from cliffcrypt.utils import ensure_bytes

logger = logging.getLogger(__name__)

_HASHES: Final[dict[OaepHash, type[hashes.HashAlgorithm]]] = {
    OaepHash.SHA256: hashes.SHA256,
    OaepHash.SHA512: hashes.SHA512,
}

BytesLike = Union[bytes, bytearray]


def _rsa_oaep_overhead(hash_alg: hashes.HashAlgorithm) -> int:
    return 2 * hash_alg.digest_size + 2


class AsymmetricCipher:
    """
    RSA encryption with OAEP(MGF1) padding, label ``None``.

    Example usage:
        >>> from cliffcrypt.keys import generate_rsa_key_pair
        >>> pair = generate_rsa_key_pair(2048)
        >>> cipher = AsymmetricCipher()
        >>> cipher.max_plaintext_size(pair)
        190
        >>> cipher.decrypt(pair, cipher.encrypt(pair, b"secret"))
        b'secret'

    Thread safety: guaranteed (no mutable state).
    """

    __slots__ = ("_oaep_hash",)

    def __init__(self, oaep_hash: Union[OaepHash, str] = OaepHash.SHA256) -> None:
        try:
            self._oaep_hash = OaepHash(oaep_hash)
        except ValueError:
            raise ConfigurationMismatch(
                f"Unsupported OAEP hash: {oaep_hash!r}"
            ) from None

    @property
    def oaep_hash(self) -> OaepHash:
        return self._oaep_hash

    def _hash(self) -> hashes.HashAlgorithm:
        return _HASHES[self._oaep_hash]()

    def _padding(self) -> padding.OAEP:
        return padding.OAEP(
            mgf=padding.MGF1(algorithm=self._hash()),
            algorithm=self._hash(),
            label=None,
        )

    @staticmethod
    def _validate_pair(key_pair: object) -> RsaKeyPair:
        if not isinstance(key_pair, RsaKeyPair):
            raise ConfigurationMismatch("RSA-OAEP requires an RsaKeyPair")
        return key_pair

    def max_plaintext_size(self, key_pair: RsaKeyPair) -> int:
        """Largest plaintext (bytes) that fits one OAEP block under this key."""
        pair = self._validate_pair(key_pair)
        return pair.modulus_bytes - _rsa_oaep_overhead(self._hash())

    def encrypt(self, key_pair: RsaKeyPair, plaintext: BytesLike) -> bytes:
        """
        Encrypt with the public half of ``key_pair``.

        Raises:
            ConfigurationMismatch: if key_pair is not an RsaKeyPair.
            PlaintextTooLarge: if plaintext exceeds ``max_plaintext_size``.
            EncryptionFailure: on primitive failure.
        """
        pair = self._validate_pair(key_pair)
        data = ensure_bytes(plaintext, "plaintext")
        limit = self.max_plaintext_size(pair)
        if len(data) > limit:
            logger.warning(
                "RSA plaintext too large: %d > %d bytes (key=%d bits)",
                len(data),
                limit,
                pair.key_size,
            )
            raise PlaintextTooLarge(
                f"RSA-OAEP plaintext must be <= {limit} bytes for a {pair.key_size}-bit key"
            )
        try:
            return pair.public_key.encrypt(data, self._padding())
        except Exception as exc:
            logger.error("RSA encryption failed: %s", exc.__class__.__name__)
            raise EncryptionFailure("RSA encryption failed") from exc

    def decrypt(self, key_pair: RsaKeyPair, ciphertext: BytesLike) -> bytes:
        """
        Decrypt with the private half of ``key_pair``.

        Raises:
            ConfigurationMismatch: if key_pair is not an RsaKeyPair or has no private key.
            DecryptionFailure: on any length, padding or primitive error.
        """
        pair = self._validate_pair(key_pair)
        if pair.private_key is None:
            raise ConfigurationMismatch("RSA decryption requires a private key")
        if not isinstance(ciphertext, (bytes, bytearray, memoryview)):
            raise DecryptionFailure()
        data = bytes(ciphertext)
        if len(data) != pair.modulus_bytes:
            logger.warning("RSA decryption failed")
            raise DecryptionFailure()
        try:
            return pair.private_key.decrypt(data, self._padding())
        except Exception:
            logger.warning("RSA decryption failed")
            raise DecryptionFailure() from None


__all__ = [
    "AsymmetricCipher",
]
