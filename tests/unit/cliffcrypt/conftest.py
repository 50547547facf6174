from __future__ import annotations

import pytest

from cliffcrypt.keys import RsaKeyPair, generate_rsa_key_pair


@pytest.fixture(scope="session")
def rsa_pair() -> RsaKeyPair:
    return generate_rsa_key_pair(2048)


@pytest.fixture(scope="session")
def other_rsa_pair() -> RsaKeyPair:
    return generate_rsa_key_pair(2048)
