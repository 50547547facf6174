# -*- coding: utf-8 -*-
"""
Encryption configuration: cipher family selection, key sizes and OAEP hash.

Algorithm and key size are never embedded in ciphertext; the caller keeps an
``EncryptionConfig`` and passes it to both encrypt and decrypt.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Final, Mapping, Optional

from cliffcrypt.exceptions import ConfigurationMismatch

_LOGGER: Final = logging.getLogger(__name__)

SUPPORTED_SYMMETRIC_KEY_BITS: Final[tuple[int, ...]] = (128, 192, 256)
MIN_RSA_KEY_BITS: Final[int] = 2048
MAX_RSA_KEY_BITS: Final[int] = 16384


class CipherFamily(str, Enum):
    """Closed set of cipher families the facade dispatches over."""

    SYMMETRIC = "symmetric"
    ASYMMETRIC = "asymmetric"


class OaepHash(str, Enum):
    """Hash used for OAEP and its MGF1."""

    SHA256 = "sha256"
    SHA512 = "sha512"


class ConfigProfile(str, Enum):
    """Predefined configurations."""

    # AES-256-GCM (default)
    SYMMETRIC_DEFAULT = "symmetric-default"

    # AES-128-GCM for constrained peers
    SYMMETRIC_COMPACT = "symmetric-compact"

    # RSA-3072 with OAEP-SHA256
    ASYMMETRIC_DEFAULT = "asymmetric-default"

    # RSA-4096 with OAEP-SHA512
    ASYMMETRIC_HIGH = "asymmetric-high"


def validate_symmetric_key_bits(bits: int) -> bool:
    """True if ``bits`` is a supported AES key size (int, not bool)."""
    return (
        isinstance(bits, int)
        and not isinstance(bits, bool)
        and bits in SUPPORTED_SYMMETRIC_KEY_BITS
    )


def validate_rsa_key_bits(bits: int) -> bool:
    """True if ``bits`` is an acceptable RSA modulus size."""
    return (
        isinstance(bits, int)
        and not isinstance(bits, bool)
        and MIN_RSA_KEY_BITS <= bits <= MAX_RSA_KEY_BITS
        and bits % 256 == 0
    )


@dataclass(frozen=True)
class EncryptionConfig:
    """
    Out-of-band description of how a payload is (or was) encrypted.

    Attributes:
        family: symmetric (AES-GCM) or asymmetric (RSA-OAEP).
        symmetric_key_bits: AES key size, one of 128/192/256.
        rsa_key_bits: RSA modulus size (>= 2048, multiple of 256).
        oaep_hash: hash used by OAEP padding.

    Examples:
        >>> cfg = EncryptionConfig.from_profile(ConfigProfile.ASYMMETRIC_DEFAULT)
        >>> cfg.rsa_key_bits
        3072
        >>> EncryptionConfig(CipherFamily.SYMMETRIC, symmetric_key_bits=128).symmetric_key_bits
        128
    """

    family: CipherFamily = CipherFamily.SYMMETRIC
    symmetric_key_bits: int = 256
    rsa_key_bits: int = 3072
    oaep_hash: OaepHash = OaepHash.SHA256

    def __post_init__(self) -> None:
        """Validate and normalise enum-valued fields."""
        try:
            object.__setattr__(self, "family", CipherFamily(self.family))
            object.__setattr__(self, "oaep_hash", OaepHash(self.oaep_hash))
        except ValueError as exc:
            raise ConfigurationMismatch(f"Invalid configuration value: {exc}") from exc
        if not validate_symmetric_key_bits(self.symmetric_key_bits):
            raise ConfigurationMismatch("symmetric_key_bits must be 128, 192 or 256")
        if not validate_rsa_key_bits(self.rsa_key_bits):
            raise ConfigurationMismatch(
                "rsa_key_bits must be between 2048 and 16384 and divisible by 256"
            )

    @staticmethod
    def from_profile(profile: ConfigProfile) -> "EncryptionConfig":
        """Create configuration from a predefined profile."""
        return _PROFILE_PARAMS[ConfigProfile(profile)]

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "EncryptionConfig":
        """
        Build a config from a plain mapping (e.g. parsed JSON).

        Unknown keys are ignored. A ``profile`` key selects the base profile,
        explicit fields override it.

        Raises:
            ConfigurationMismatch: on invalid values.
        """
        base = EncryptionConfig()
        if "profile" in data:
            try:
                base = EncryptionConfig.from_profile(ConfigProfile(data["profile"]))
            except ValueError as exc:
                raise ConfigurationMismatch(f"Unknown profile: {data['profile']!r}") from exc
        fields: Dict[str, Any] = asdict(base)
        for name in ("family", "symmetric_key_bits", "rsa_key_bits", "oaep_hash"):
            if name in data:
                fields[name] = data[name]
        return EncryptionConfig(**fields)

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "family": self.family.value,
            "symmetric_key_bits": self.symmetric_key_bits,
            "rsa_key_bits": self.rsa_key_bits,
            "oaep_hash": self.oaep_hash.value,
        }


_PROFILE_PARAMS: Final[dict[ConfigProfile, EncryptionConfig]] = {
    ConfigProfile.SYMMETRIC_DEFAULT: EncryptionConfig(
        family=CipherFamily.SYMMETRIC,
        symmetric_key_bits=256,
    ),
    ConfigProfile.SYMMETRIC_COMPACT: EncryptionConfig(
        family=CipherFamily.SYMMETRIC,
        symmetric_key_bits=128,
    ),
    ConfigProfile.ASYMMETRIC_DEFAULT: EncryptionConfig(
        family=CipherFamily.ASYMMETRIC,
        rsa_key_bits=3072,
        oaep_hash=OaepHash.SHA256,
    ),
    ConfigProfile.ASYMMETRIC_HIGH: EncryptionConfig(
        family=CipherFamily.ASYMMETRIC,
        rsa_key_bits=4096,
        oaep_hash=OaepHash.SHA512,
    ),
}


def load_config(config_path: Optional[Path] = None) -> EncryptionConfig:
    """
    Load an ``EncryptionConfig`` from a JSON file, falling back to defaults.

    A missing file, invalid JSON or a non-object document yields the default
    configuration and a logged warning. Values that parse but are invalid
    (unknown family, bad key size) raise, since silently downgrading a
    cipher choice is worse than failing.

    Args:
        config_path: path to the JSON file. Defaults to ``cliffcrypt.json``
            in the current directory.

    Returns:
        Loaded configuration.

    Raises:
        ConfigurationMismatch: if the file holds invalid values.
    """
    if config_path is None:
        config_path = Path("cliffcrypt.json")

    if not config_path.exists():
        _LOGGER.info("Config file %s not found, using defaults", config_path)
        return EncryptionConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = json.load(f)
    except json.JSONDecodeError as e:
        _LOGGER.warning(
            "Could not parse %s: invalid JSON at line %d, column %d; using defaults",
            config_path,
            e.lineno,
            e.colno,
        )
        return EncryptionConfig()
    except UnicodeDecodeError as e:
        _LOGGER.warning(
            "Could not decode %s as UTF-8 at byte %d; using defaults", config_path, e.start
        )
        return EncryptionConfig()
    except OSError as e:
        _LOGGER.warning("Could not read %s: %s; using defaults", config_path, e)
        return EncryptionConfig()

    if not isinstance(user_config, dict):
        _LOGGER.warning(
            "Config file must contain a JSON object, got %s; using defaults",
            type(user_config).__name__,
        )
        return EncryptionConfig()

    config = EncryptionConfig.from_mapping(user_config)
    _LOGGER.info("Configuration loaded from %s", config_path)
    _LOGGER.debug("Configuration: %s", config.to_mapping())
    return config


__all__ = [
    "SUPPORTED_SYMMETRIC_KEY_BITS",
    "MIN_RSA_KEY_BITS",
    "MAX_RSA_KEY_BITS",
    "CipherFamily",
    "OaepHash",
    "ConfigProfile",
    "EncryptionConfig",
    "validate_symmetric_key_bits",
    "validate_rsa_key_bits",
    "load_config",
]
