"""Tests for argon2id credential hashing."""

import pytest

from wls.auth.password import Argon2Hasher, HashMismatchError
from wls.config import Settings


class TestArgon2Hasher:
    def test_hash_and_compare(self, hasher: Argon2Hasher):
        digest = hasher.hash("SecureP@ss1")
        hasher.compare(digest, "SecureP@ss1")  # Should not raise

    def test_wrong_secret_rejected(self, hasher: Argon2Hasher):
        digest = hasher.hash("CorrectP@ss1")
        with pytest.raises(HashMismatchError):
            hasher.compare(digest, "WrongP@ss1")

    def test_invalid_digest_rejected(self, hasher: Argon2Hasher):
        with pytest.raises(HashMismatchError):
            hasher.compare("not-a-hash", "whatever")

    def test_hash_is_argon2id(self, hasher: Argon2Hasher):
        assert hasher.hash("TestP@ss1").startswith("$argon2id$")

    def test_hashes_are_salted(self, hasher: Argon2Hasher):
        assert hasher.hash("same") != hasher.hash("same")

    def test_from_settings(self):
        hasher = Argon2Hasher.from_settings(Settings(argon2_time_cost=1, argon2_memory_cost=16))
        assert "m=16,t=1" in hasher.hash("x")
