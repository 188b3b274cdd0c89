"""
Credential hashing using argon2id.

Used for both account passwords and refresh credentials. Digests are salted,
so a stored digest can only be checked against a candidate secret, never
looked up by one.
"""

from __future__ import annotations

from typing import Protocol

import argon2

from wls.config import Settings


class HashMismatchError(ValueError):
    """Raised when a secret does not match the stored digest."""


class Hasher(Protocol):
    def hash(self, secret: str) -> str: ...

    def compare(self, digest: str, secret: str) -> None: ...


class Argon2Hasher:
    """argon2id hasher with configurable cost parameters."""

    def __init__(self, time_cost: int = 2, memory_cost: int = 65536, parallelism: int = 1) -> None:
        self._hasher = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=32,
            salt_len=16,
            type=argon2.Type.ID,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Argon2Hasher:
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, secret: str) -> str:
        """Hash a secret. Returns the full encoded digest."""
        return self._hasher.hash(secret)

    def compare(self, digest: str, secret: str) -> None:
        """
        Check ``secret`` against ``digest``.

        Raises HashMismatchError on mismatch or when the digest is not a valid
        argon2 hash.
        """
        try:
            self._hasher.verify(digest, secret)
        except argon2.exceptions.VerifyMismatchError:
            msg = "secret does not match digest"
            raise HashMismatchError(msg) from None
        except argon2.exceptions.InvalidHashError:
            msg = "digest is not a valid argon2 hash"
            raise HashMismatchError(msg) from None
