"""Salted, cost-parameterised password hashing backed by bcrypt."""

import asyncio

import bcrypt

from auth_api.services.password.password_config import password_settings

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


class HashingError(Exception):
    """Raised when the hashing backend fails or a stored digest is malformed."""


class PasswordHasher:
    """Hash and verify passwords.

    The sync methods are CPU bound; request handlers should use the *_async
    variants, which run the work in a worker thread.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        # Fixed digest used to equalise timing for unknown accounts
        self._dummy_digest = self.hash("dummy-password-for-timing")

    @staticmethod
    def _encode(plaintext: str) -> bytes:
        return plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash(self, plaintext: str) -> str:
        try:
            digest = bcrypt.hashpw(self._encode(plaintext), bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError) as e:
            raise HashingError(f"Failed to hash password: {e}") from e
        return digest.decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(plaintext), digest.encode("utf-8"))
        except (ValueError, TypeError) as e:
            raise HashingError(f"Malformed password digest: {e}") from e

    async def hash_async(self, plaintext: str) -> str:
        return await asyncio.to_thread(self.hash, plaintext)

    async def verify_async(self, plaintext: str, digest: str) -> bool:
        return await asyncio.to_thread(self.verify, plaintext, digest)

    async def dummy_verify_async(self, plaintext: str) -> None:
        """Spend one verification on a throwaway digest."""
        await asyncio.to_thread(self.verify, plaintext, self._dummy_digest)


password_hasher = PasswordHasher(rounds=password_settings.HASH_ROUNDS)
