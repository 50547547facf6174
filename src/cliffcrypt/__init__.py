"""
cliffcrypt
==========

Authenticated encryption (AES-GCM), RSA-OAEP encryption and SHA-256/512
digests composed behind a single façade.

Basic usage:
    >>> from cliffcrypt import EncryptionFacade, EncryptionConfig, CipherFamily
    >>>
    >>> facade = EncryptionFacade()
    >>> config = EncryptionConfig(CipherFamily.SYMMETRIC, symmetric_key_bits=256)
    >>> key = facade.generate_key(config)
    >>> envelope = facade.encrypt(config, key, b"secret", associated_data=b"v1")
    >>> facade.decrypt(config, key, envelope.to_bytes(), associated_data=b"v1")
    b'secret'

Logging:
    All modules log under the ``cliffcrypt`` logger. The level comes from the
    ``CLIFFCRYPT_LOG_LEVEL`` environment variable (DEBUG, INFO, WARNING, ERROR,
    CRITICAL; default WARNING). Setting ``CLIFFCRYPT_LOG_FILE`` adds a rotating
    file handler. Log records never contain key, nonce, tag or plaintext bytes.

Python: 3.11+
"""

import logging
import logging.handlers
import os
import sys

# =============================================================================
# VERSION METADATA
# =============================================================================

__version__ = "0.2.1"
__author__ = "cliffcrypt developers"
__description__ = "AES-GCM / RSA-OAEP / SHA-2 utility layer"
__license__ = "MIT"
__python_requires__ = ">=3.11"

VERSION_MAJOR = 0
VERSION_MINOR = 2
VERSION_PATCH = 1

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"cliffcrypt requires Python 3.11 or newer. "
        f"Current version: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# LOGGING
# =============================================================================

_LOGGER_NAME = "cliffcrypt"

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _setup_logging() -> None:
    """
    Configure the package logger.

    - stderr handler at WARNING and above
    - optional rotating file handler when CLIFFCRYPT_LOG_FILE is set
    - level from CLIFFCRYPT_LOG_LEVEL

    Idempotent: does nothing if the package logger already has handlers.
    """
    package_logger = logging.getLogger(_LOGGER_NAME)
    if package_logger.handlers:
        return

    log_level_str = os.environ.get("CLIFFCRYPT_LOG_LEVEL", "WARNING").upper()
    log_level = _LOG_LEVELS.get(log_level_str, logging.WARNING)
    package_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    log_file = os.environ.get("CLIFFCRYPT_LOG_FILE")
    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)
        except OSError as e:
            package_logger.warning(
                "Could not initialise file logging (%s); using console only", e
            )


def get_logger(module_name: str) -> logging.Logger:
    """
    Return a logger inside the ``cliffcrypt`` namespace.

    Args:
        module_name: usually ``__name__``. Names outside the package are
            prefixed with ``cliffcrypt.``; ``__main__`` maps to
            ``cliffcrypt.main``.

    Example:
        >>> get_logger("tools.rotate").name
        'cliffcrypt.tools.rotate'
    """
    if module_name == _LOGGER_NAME or module_name.startswith(_LOGGER_NAME + "."):
        return logging.getLogger(module_name)
    if module_name == "__main__":
        return logging.getLogger(f"{_LOGGER_NAME}.main")
    return logging.getLogger(f"{_LOGGER_NAME}.{module_name.lstrip('.')}")


_setup_logging()

# =============================================================================
# PUBLIC API
# =============================================================================

from cliffcrypt.config import (  # noqa: E402
    CipherFamily,
    ConfigProfile,
    EncryptionConfig,
    OaepHash,
    load_config,
)
from cliffcrypt.exceptions import (  # noqa: E402
    AuthenticationFailure,
    ConfigurationMismatch,
    CryptoError,
    DecryptionError,
    DecryptionFailure,
    EncryptionFailure,
    HashingError,
    InvalidKeyFormat,
    InvalidKeyLength,
    KdfError,
    KeyMaterialError,
    MalformedEnvelope,
    PlaintextTooLarge,
    UnsupportedAlgorithm,
    UnsupportedKeySize,
)
from cliffcrypt.hashing import (  # noqa: E402
    HashAlgorithm,
    Hasher,
    hash_bytes,
    hash_stream,
    salted_hash,
)
from cliffcrypt.kdf import (  # noqa: E402
    Argon2idParams,
    Pbkdf2Params,
    derive_symmetric_key,
    generate_salt,
)
from cliffcrypt.keys import (  # noqa: E402
    Nonce,
    RsaKeyPair,
    SymmetricKey,
    generate_rsa_key_pair,
    generate_symmetric_key,
    import_symmetric_key,
    load_rsa_private_key,
    load_rsa_public_key,
)
from cliffcrypt.service import EncryptionFacade  # noqa: E402
from cliffcrypt.symmetric import Envelope  # noqa: E402

__all__ = [
    "__version__",
    "get_logger",
    # Facade
    "EncryptionFacade",
    # Configuration
    "CipherFamily",
    "ConfigProfile",
    "EncryptionConfig",
    "OaepHash",
    "load_config",
    # Key material
    "SymmetricKey",
    "Nonce",
    "RsaKeyPair",
    "generate_symmetric_key",
    "import_symmetric_key",
    "generate_rsa_key_pair",
    "load_rsa_public_key",
    "load_rsa_private_key",
    "Envelope",
    # KDF
    "Argon2idParams",
    "Pbkdf2Params",
    "derive_symmetric_key",
    "generate_salt",
    # Digest
    "HashAlgorithm",
    "Hasher",
    "hash_bytes",
    "hash_stream",
    "salted_hash",
    # Errors
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
