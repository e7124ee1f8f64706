"""Password and refresh-token hashing (bcrypt) plus input length limits."""

import base64
import hashlib

import bcrypt

# Default bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for name, email and password validation.
NAME_MIN_LEN = 1
NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """
    Salted one-way hashing for login passwords and refresh tokens at rest.

    Every call to hash() draws a fresh salt that bcrypt embeds in the digest,
    so equal inputs produce different digests.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds
        # Verified against when the account does not exist so an unknown email
        # costs the same bcrypt work as a wrong password.
        self._dummy_hash = self.hash("warehouse-timing-equalization")

    def hash(self, plaintext: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        # Validation already limits length; truncate so bcrypt never rejects input.
        pw_bytes = plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Verify a plain password against a stored hash."""
        pw_bytes = plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, digest.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, plaintext: str) -> bool:
        """Burn one verify against a throwaway hash; always False."""
        self.verify(plaintext, self._dummy_hash)
        return False

    def hash_token(self, token: str) -> str:
        """
        Hash a refresh token for storage.

        JWTs are far longer than 72 bytes and share their header, so the token
        is pre-digested with SHA-256 to keep every byte significant.
        """
        return self.hash(_token_digest(token))

    def verify_token(self, token: str, digest: str) -> bool:
        """Check a presented refresh token against its stored hash."""
        return self.verify(_token_digest(token), digest)


def _token_digest(token: str) -> str:
    return base64.b64encode(hashlib.sha256(token.encode("utf-8")).digest()).decode("ascii")
