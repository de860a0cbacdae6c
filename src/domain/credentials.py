"""
Credential hashing - bcrypt password hashing and verification.

bcrypt runs at a fixed work factor (10 by default). Hashing is CPU
bound, so the async variants push the work to a thread and keep the
event loop free for other requests.
"""

import asyncio
from dataclasses import dataclass

import bcrypt

# bcrypt only consumes the first 72 bytes of input
_BCRYPT_MAX_BYTES = 72


def _encode(plaintext: str) -> bytes:
    return plaintext.encode()[:_BCRYPT_MAX_BYTES]


@dataclass(frozen=True)
class PasswordHasher:
    """Salted one-way hashing of user passwords."""

    rounds: int = 10

    def hash(self, plaintext: str) -> str:
        """Hash a plaintext password with a fresh salt."""
        return bcrypt.hashpw(_encode(plaintext), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Compare a plaintext password against a stored hash.

        Uses bcrypt's constant-time comparison. A malformed stored hash
        counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(_encode(plaintext), hashed.encode())
        except ValueError:
            return False

    async def hash_async(self, plaintext: str) -> str:
        return await asyncio.to_thread(self.hash, plaintext)

    async def verify_async(self, plaintext: str, hashed: str) -> bool:
        return await asyncio.to_thread(self.verify, plaintext, hashed)
