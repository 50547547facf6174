# -*- coding: utf-8 -*-
from __future__ import annotations

import concurrent.futures

import pytest

import cliffcrypt.symmetric as sym_mod
from cliffcrypt.exceptions import (
    DECRYPTION_FAILED_MESSAGE,
    AuthenticationFailure,
    ConfigurationMismatch,
    CryptoError,
    EncryptionFailure,
    MalformedEnvelope,
)
from cliffcrypt.keys import Nonce, RsaKeyPair, SymmetricKey
from cliffcrypt.symmetric import (
    MIN_ENVELOPE_LEN,
    TAG_LEN,
    Envelope,
    SymmetricCipher,
    decrypt_aes_gcm,
    encrypt_aes_gcm,
)


@pytest.fixture
def cipher() -> SymmetricCipher:
    return SymmetricCipher()


@pytest.mark.parametrize("bits", [128, 192, 256])
@pytest.mark.parametrize("plaintext", [b"", b"x", b"hello world", b"\x00" * 1000])
def test_roundtrip(cipher: SymmetricCipher, bits: int, plaintext: bytes) -> None:
    key = SymmetricKey.generate(bits)
    env = cipher.encrypt(key, plaintext)
    assert len(env.ciphertext) == len(plaintext)
    assert len(env.tag) == TAG_LEN
    assert cipher.decrypt(key, env) == plaintext
    assert cipher.decrypt(key, env.to_bytes()) == plaintext


def test_roundtrip_one_mebibyte(cipher: SymmetricCipher) -> None:
    key = SymmetricKey.generate(256)
    data = bytes(range(256)) * 4096
    env = cipher.encrypt(key, data, b"large")
    assert cipher.decrypt(key, env, b"large") == data


def test_empty_plaintext_envelope_is_minimum_length(cipher: SymmetricCipher) -> None:
    env = cipher.encrypt(SymmetricKey.generate(128), b"")
    assert env.ciphertext == b""
    assert len(env) == MIN_ENVELOPE_LEN == 28
    assert len(env.to_bytes()) == 28


def test_wire_layout(monkeypatch: pytest.MonkeyPatch, cipher: SymmetricCipher) -> None:
    import cliffcrypt.keys as keys_mod

    nonce = bytes(range(12))
    monkeypatch.setattr(keys_mod, "random_bytes", lambda n: nonce[:n])
    key = SymmetricKey(b"\x11" * 32)
    blob = cipher.encrypt(key, b"abc").to_bytes()
    assert blob[:12] == nonce
    assert len(blob) == 12 + 3 + 16
    assert bytes(Envelope.from_bytes(blob)) == blob


def test_nonce_uniqueness_over_many_encryptions(cipher: SymmetricCipher) -> None:
    key = SymmetricKey.generate(256)
    nonces = {cipher.encrypt(key, b"m").nonce.value for _ in range(10_000)}
    assert len(nonces) == 10_000


def test_nonce_uniqueness_across_threads(cipher: SymmetricCipher) -> None:
    key = SymmetricKey.generate(256)
    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as ex:
        envs = list(ex.map(lambda _i: cipher.encrypt(key, b"m"), range(2_000)))
    assert len({e.nonce.value for e in envs}) == 2_000


def test_same_plaintext_gives_different_ciphertexts(cipher: SymmetricCipher) -> None:
    key = SymmetricKey.generate()
    assert cipher.encrypt(key, b"same").to_bytes() != cipher.encrypt(key, b"same").to_bytes()


def _flip(blob: bytes, index: int, bit: int = 0) -> bytes:
    b = bytearray(blob)
    b[index] ^= 1 << bit
    return bytes(b)


@pytest.mark.parametrize("where", ["nonce", "ciphertext", "tag"])
@pytest.mark.parametrize("bit", [0, 7])
def test_single_bit_tamper_is_rejected(
    cipher: SymmetricCipher, where: str, bit: int
) -> None:
    key = SymmetricKey.generate()
    blob = cipher.encrypt(key, b"attack at dawn").to_bytes()
    index = {"nonce": 0, "ciphertext": 12 + 3, "tag": len(blob) - 1}[where]
    with pytest.raises(AuthenticationFailure) as excinfo:
        cipher.decrypt(key, _flip(blob, index, bit))
    assert str(excinfo.value) == DECRYPTION_FAILED_MESSAGE
    assert excinfo.value.__cause__ is None


def test_every_ciphertext_byte_is_authenticated(cipher: SymmetricCipher) -> None:
    key = SymmetricKey.generate(128)
    blob = cipher.encrypt(key, b"0123456789", b"aad").to_bytes()
    for i in range(len(blob)):
        with pytest.raises(AuthenticationFailure):
            cipher.decrypt(key, _flip(blob, i), b"aad")


def test_associated_data_binding(cipher: SymmetricCipher) -> None:
    key = SymmetricKey.generate()
    env = cipher.encrypt(key, b"payload", b"header-v1")
    assert cipher.decrypt(key, env, b"header-v1") == b"payload"
    with pytest.raises(AuthenticationFailure):
        cipher.decrypt(key, env, b"header-v2")
    with pytest.raises(AuthenticationFailure):
        cipher.decrypt(key, env)


def test_empty_and_absent_associated_data_are_equivalent(cipher: SymmetricCipher) -> None:
    key = SymmetricKey.generate()
    assert cipher.decrypt(key, cipher.encrypt(key, b"p", b""), None) == b"p"
    assert cipher.decrypt(key, cipher.encrypt(key, b"p"), b"") == b"p"


def test_wrong_key_fails_like_tampering(cipher: SymmetricCipher) -> None:
    env = cipher.encrypt(SymmetricKey.generate(), b"secret")
    with pytest.raises(AuthenticationFailure) as wrong_key:
        cipher.decrypt(SymmetricKey.generate(), env)
    with pytest.raises(AuthenticationFailure) as tampered:
        cipher.decrypt(SymmetricKey.generate(), _flip(env.to_bytes(), 20))
    assert str(wrong_key.value) == str(tampered.value)


@pytest.mark.parametrize("length", [0, 1, 12, 27])
def test_short_envelope_is_malformed(cipher: SymmetricCipher, length: int) -> None:
    with pytest.raises(MalformedEnvelope):
        cipher.decrypt(SymmetricKey.generate(), b"\x00" * length)


def test_non_bytes_envelope_is_malformed(cipher: SymmetricCipher) -> None:
    with pytest.raises(MalformedEnvelope):
        cipher.decrypt(SymmetricKey.generate(), "not bytes")  # type: ignore[arg-type]


def test_envelope_validation() -> None:
    nonce = Nonce(b"\x00" * 12)
    with pytest.raises(MalformedEnvelope):
        Envelope(nonce=b"\x00" * 12, ciphertext=b"", tag=b"\x00" * 16)  # type: ignore[arg-type]
    with pytest.raises(MalformedEnvelope):
        Envelope(nonce=nonce, ciphertext=b"", tag=b"\x00" * 15)
    with pytest.raises(MalformedEnvelope):
        Envelope(nonce=nonce, ciphertext="x", tag=b"\x00" * 16)  # type: ignore[arg-type]
    env = Envelope(nonce=nonce, ciphertext=b"abc", tag=b"\x01" * 16)
    assert repr(env) == "Envelope(ciphertext_len=3)"


def test_key_type_mismatch(cipher: SymmetricCipher, rsa_pair: RsaKeyPair) -> None:
    with pytest.raises(ConfigurationMismatch):
        cipher.encrypt(b"\x00" * 32, b"x")  # type: ignore[arg-type]
    with pytest.raises(ConfigurationMismatch):
        cipher.decrypt(rsa_pair, b"\x00" * 40)  # type: ignore[arg-type]


def test_plaintext_type_checked(cipher: SymmetricCipher) -> None:
    with pytest.raises(TypeError):
        cipher.encrypt(SymmetricKey.generate(), "text")  # type: ignore[arg-type]


def test_primitive_failure_is_encryption_failure(
    monkeypatch: pytest.MonkeyPatch, cipher: SymmetricCipher
) -> None:
    class Broken:
        def __init__(self, _key: bytes) -> None:
            pass

        def encrypt(self, *_args: object) -> bytes:
            raise RuntimeError("primitive fault")

    monkeypatch.setattr(sym_mod, "AESGCM", Broken)
    with pytest.raises(EncryptionFailure) as excinfo:
        cipher.encrypt(SymmetricKey.generate(), b"x")
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_functional_helpers_roundtrip() -> None:
    key = SymmetricKey.generate(192)
    blob = encrypt_aes_gcm(key, b"hi", b"ctx")
    assert isinstance(blob, bytes) and len(blob) == 2 + MIN_ENVELOPE_LEN
    assert decrypt_aes_gcm(key, blob, b"ctx") == b"hi"
    with pytest.raises(AuthenticationFailure):
        decrypt_aes_gcm(key, blob)


def test_decrypt_failure_is_logged_without_secrets(
    caplog: pytest.LogCaptureFixture, cipher: SymmetricCipher
) -> None:
    key = SymmetricKey.generate()
    blob = cipher.encrypt(key, b"top secret").to_bytes()
    with caplog.at_level("WARNING", logger="cliffcrypt.symmetric"):
        with pytest.raises(AuthenticationFailure):
            cipher.decrypt(key, _flip(blob, 13))
    assert "AES-GCM decryption failed" in caplog.text
    assert "top secret" not in caplog.text
    assert key.raw().hex() not in caplog.text


def test_random_source_failure_propagates_from_encrypt(
    monkeypatch: pytest.MonkeyPatch, cipher: SymmetricCipher
) -> None:
    import cliffcrypt.utils as utils_mod

    key = SymmetricKey.generate()
    monkeypatch.setattr(utils_mod, "_RANDOM_SOURCE", lambda n: b"\x00" * n)
    with pytest.raises(CryptoError) as excinfo:
        cipher.encrypt(key, b"x")
    assert not isinstance(excinfo.value, EncryptionFailure)
