"""Unit tests for PasswordHasher."""

import bcrypt

from common.auth import PasswordHasher


def test_hash_verifies(password_hasher):
    digest = password_hasher.hash("p@ss1")

    assert digest != "p@ss1"
    assert password_hasher.verify("p@ss1", digest)
    assert not password_hasher.verify("p@ss2", digest)


def test_hashes_are_salted(password_hasher):
    assert password_hasher.hash("p@ss1") != password_hasher.hash("p@ss1")


def test_long_passwords_are_not_truncated(password_hasher):
    base = "x" * 80
    digest = password_hasher.hash(base + "a")

    assert not password_hasher.verify(base + "b", digest)


def test_legacy_raw_bcrypt_hash():
    hasher = PasswordHasher(rounds=4)
    legacy = bcrypt.hashpw(b"p@ss1", bcrypt.gensalt(rounds=4)).decode("utf-8")

    assert hasher.verify("p@ss1", legacy)


def test_empty_or_malformed_never_match(password_hasher):
    assert not password_hasher.verify("", password_hasher.hash("p@ss1"))
    assert not password_hasher.verify("p@ss1", "")
    assert not password_hasher.verify("p@ss1", "not-a-bcrypt-hash")
