# -*- coding: utf-8 -*-
"""
EncryptionFacade: the public entry point for encryption in cliffcrypt.

- ``EncryptionConfig.family`` selects AES-GCM or RSA-OAEP; dispatch is an
  explicit match over ``CipherFamily``.
- Key material is checked against the configuration before any primitive
  runs; a mismatch raises ``ConfigurationMismatch``.
- Stateless: no keys, nonces or envelopes are retained between calls.
- No secrets are logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final, Optional, Union, cast

from cliffcrypt.asymmetric import AsymmetricCipher
from cliffcrypt.config import CipherFamily, EncryptionConfig, OaepHash
from cliffcrypt.exceptions import ConfigurationMismatch
from cliffcrypt.hashing import HashAlgorithm, hash_bytes
from cliffcrypt.keys import (
    RsaKeyPair,
    SymmetricKey,
    generate_rsa_key_pair,
    generate_symmetric_key,
)
from cliffcrypt.symmetric import Envelope, SymmetricCipher

LOGGER: Final = logging.getLogger(__name__)

KeyMaterial = Union[SymmetricKey, RsaKeyPair]
BytesLike = Union[bytes, bytearray]


def _asymmetric_ciphers() -> dict[OaepHash, AsymmetricCipher]:
    return {h: AsymmetricCipher(h) for h in OaepHash}


@dataclass(slots=True)
class EncryptionFacade:
    """
    Unified encryption façade.

    Example:
        >>> facade = EncryptionFacade()
        >>> cfg = EncryptionConfig(CipherFamily.SYMMETRIC, symmetric_key_bits=256)
        >>> key = facade.generate_key(cfg)
        >>> env = facade.encrypt(cfg, key, b"payload")
        >>> facade.decrypt(cfg, key, env)
        b'payload'
    """

    symmetric: SymmetricCipher = field(default_factory=SymmetricCipher)
    asymmetric: dict[OaepHash, AsymmetricCipher] = field(
        default_factory=_asymmetric_ciphers
    )

    # ---- Validation ----

    @staticmethod
    def _check_config(config: object) -> EncryptionConfig:
        if not isinstance(config, EncryptionConfig):
            raise ConfigurationMismatch("config must be an EncryptionConfig")
        return config

    def validate(
        self, config: EncryptionConfig, key: KeyMaterial, *, for_decrypt: bool = False
    ) -> None:
        """
        Check that ``key`` can serve ``config``.

        Raises:
            ConfigurationMismatch: on wrong key type, wrong size or a
                public-only RSA pair used for decryption.
        """
        cfg = self._check_config(config)
        match cfg.family:
            case CipherFamily.SYMMETRIC:
                if not isinstance(key, SymmetricKey):
                    raise ConfigurationMismatch(
                        "Symmetric configuration requires a SymmetricKey"
                    )
                if key.bit_length != cfg.symmetric_key_bits:
                    raise ConfigurationMismatch(
                        f"Key is {key.bit_length} bits, configuration expects "
                        f"{cfg.symmetric_key_bits}"
                    )
            case CipherFamily.ASYMMETRIC:
                if not isinstance(key, RsaKeyPair):
                    raise ConfigurationMismatch(
                        "Asymmetric configuration requires an RsaKeyPair"
                    )
                if key.key_size != cfg.rsa_key_bits:
                    raise ConfigurationMismatch(
                        f"RSA key is {key.key_size} bits, configuration expects "
                        f"{cfg.rsa_key_bits}"
                    )
                if for_decrypt and not key.has_private_key:
                    raise ConfigurationMismatch("RSA decryption requires a private key")
            case _:
                raise ConfigurationMismatch(f"Unsupported cipher family: {cfg.family!r}")

    # ---- Key generation ----

    def generate_key(self, config: EncryptionConfig) -> KeyMaterial:
        """Generate key material matching ``config`` (RSA generation blocks)."""
        cfg = self._check_config(config)
        match cfg.family:
            case CipherFamily.SYMMETRIC:
                return generate_symmetric_key(cfg.symmetric_key_bits)
            case CipherFamily.ASYMMETRIC:
                return generate_rsa_key_pair(cfg.rsa_key_bits)
            case _:
                raise ConfigurationMismatch(f"Unsupported cipher family: {cfg.family!r}")

    # ---- Encryption façade ----

    def encrypt(
        self,
        config: EncryptionConfig,
        key: KeyMaterial,
        plaintext: BytesLike,
        *,
        associated_data: Optional[BytesLike] = None,
    ) -> Union[Envelope, bytes]:
        """
        Encrypt ``plaintext`` as described by ``config``.

        Returns:
            ``Envelope`` for the symmetric family, raw RSA ciphertext bytes
            for the asymmetric family.

        Raises:
            ConfigurationMismatch: if key and config disagree, or associated
                data is given for the asymmetric family.
            PlaintextTooLarge: RSA plaintext above the OAEP ceiling.
            EncryptionFailure: primitive failure.
            CryptoError: random source failure while drawing an AES-GCM nonce.
        """
        self.validate(config, key)
        LOGGER.debug("encrypt: family=%s", config.family.value)
        match config.family:
            case CipherFamily.SYMMETRIC:
                return self.symmetric.encrypt(
                    cast(SymmetricKey, key), plaintext, associated_data
                )
            case CipherFamily.ASYMMETRIC:
                if associated_data is not None:
                    raise ConfigurationMismatch(
                        "Associated data is not supported by RSA-OAEP"
                    )
                cipher = self.asymmetric[config.oaep_hash]
                return cipher.encrypt(cast(RsaKeyPair, key), plaintext)
            case _:
                raise ConfigurationMismatch(
                    f"Unsupported cipher family: {config.family!r}"
                )

    def decrypt(
        self,
        config: EncryptionConfig,
        key: KeyMaterial,
        envelope: Union[Envelope, BytesLike],
        *,
        associated_data: Optional[BytesLike] = None,
    ) -> bytes:
        """
        Decrypt data produced by ``encrypt`` under the same ``config``.

        Raises:
            ConfigurationMismatch: if key and config disagree.
            MalformedEnvelope: unparsable symmetric envelope.
            AuthenticationFailure: symmetric tag verification failed.
            DecryptionFailure: RSA decryption failed.
        """
        self.validate(config, key, for_decrypt=True)
        LOGGER.debug("decrypt: family=%s", config.family.value)
        match config.family:
            case CipherFamily.SYMMETRIC:
                return self.symmetric.decrypt(
                    cast(SymmetricKey, key), envelope, associated_data
                )
            case CipherFamily.ASYMMETRIC:
                if associated_data is not None:
                    raise ConfigurationMismatch(
                        "Associated data is not supported by RSA-OAEP"
                    )
                if isinstance(envelope, Envelope):
                    raise ConfigurationMismatch(
                        "AES-GCM envelope given to an asymmetric configuration"
                    )
                cipher = self.asymmetric[config.oaep_hash]
                return cipher.decrypt(cast(RsaKeyPair, key), envelope)
            case _:
                raise ConfigurationMismatch(
                    f"Unsupported cipher family: {config.family!r}"
                )

    # ---- Digest façade ----

    def digest(self, algorithm: Union[HashAlgorithm, str], data: bytes) -> bytes:
        return hash_bytes(algorithm, data)


__all__ = [
    "EncryptionFacade",
    "KeyMaterial",
]
