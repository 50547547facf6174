# -*- coding: utf-8 -*-
from __future__ import annotations

import hashlib

import pytest

from cliffcrypt.exceptions import KdfError, UnsupportedKeySize
from cliffcrypt.kdf import (
    Argon2idParams,
    Pbkdf2Params,
    derive_symmetric_key,
    generate_salt,
)
from cliffcrypt.keys import SymmetricKey

FAST_ARGON2 = Argon2idParams(time_cost=2, memory_cost=65_536, parallelism=1)
FAST_PBKDF2 = Pbkdf2Params(iterations=100_000)
SALT = b"\x5a" * 16


def test_pbkdf2_matches_hashlib() -> None:
    key = derive_symmetric_key("password", SALT, 256, params=FAST_PBKDF2)
    expected = hashlib.pbkdf2_hmac("sha256", b"password", SALT, 100_000, dklen=32)
    assert isinstance(key, SymmetricKey)
    assert key.raw() == expected


@pytest.mark.parametrize("bits", [128, 192, 256])
def test_pbkdf2_key_sizes(bits: int) -> None:
    assert derive_symmetric_key(b"pw", SALT, bits, params=FAST_PBKDF2).bit_length == bits


def test_argon2id_is_deterministic() -> None:
    k1 = derive_symmetric_key("hunter2", SALT, params=FAST_ARGON2)
    k2 = derive_symmetric_key(b"hunter2", SALT, params=FAST_ARGON2)
    assert k1 == k2
    assert k1.bit_length == 256


def test_argon2id_depends_on_inputs() -> None:
    base = derive_symmetric_key("hunter2", SALT, params=FAST_ARGON2)
    assert derive_symmetric_key("hunter3", SALT, params=FAST_ARGON2) != base
    assert derive_symmetric_key("hunter2", b"\x5b" * 16, params=FAST_ARGON2) != base
    assert (
        derive_symmetric_key(
            "hunter2", SALT, params=Argon2idParams(time_cost=3, memory_cost=65_536, parallelism=1)
        )
        != base
    )


def test_algorithms_give_different_keys() -> None:
    a = derive_symmetric_key("pw", SALT, params=FAST_ARGON2)
    p = derive_symmetric_key("pw", SALT, params=FAST_PBKDF2)
    assert a != p


def test_password_buffer_is_not_modified() -> None:
    pw = bytearray(b"secret")
    derive_symmetric_key(pw, SALT, params=FAST_PBKDF2)
    assert pw == bytearray(b"secret")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"time_cost": 1},
        {"memory_cost": 1024},
        {"parallelism": 0},
    ],
)
def test_argon2_params_validation(kwargs: dict) -> None:
    with pytest.raises(KdfError):
        Argon2idParams(**kwargs)


def test_pbkdf2_params_validation() -> None:
    with pytest.raises(KdfError):
        Pbkdf2Params(iterations=1000)
    assert Pbkdf2Params().iterations == 600_000


@pytest.mark.parametrize("salt", [b"", b"\x00" * 7, b"\x00" * 65, "saltsalt"])
def test_bad_salt(salt: object) -> None:
    with pytest.raises(KdfError):
        derive_symmetric_key("pw", salt, params=FAST_PBKDF2)  # type: ignore[arg-type]


@pytest.mark.parametrize("password", ["", b"", 12345, None])
def test_bad_password(password: object) -> None:
    with pytest.raises(KdfError):
        derive_symmetric_key(password, SALT, params=FAST_PBKDF2)  # type: ignore[arg-type]


def test_bad_key_size() -> None:
    with pytest.raises(UnsupportedKeySize):
        derive_symmetric_key("pw", SALT, 512, params=FAST_PBKDF2)


def test_unknown_params_type() -> None:
    with pytest.raises(KdfError):
        derive_symmetric_key("pw", SALT, params=object())  # type: ignore[arg-type]


def test_generate_salt() -> None:
    assert len(generate_salt()) == 16
    assert len(generate_salt(32)) == 32
    assert generate_salt() != generate_salt()
    for bad in (0, 7, 65):
        with pytest.raises(KdfError):
            generate_salt(bad)


@pytest.mark.parametrize("bits", [256.0, True, "128"])
def test_non_int_key_size(bits: object) -> None:
    with pytest.raises(UnsupportedKeySize):
        derive_symmetric_key("pw", SALT, bits, params=FAST_PBKDF2)  # type: ignore[arg-type]
