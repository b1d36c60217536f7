"""Password hashing backed by passlib's bcrypt scheme."""

from passlib.context import CryptContext


class PasswordHasher:
    """Hash and verify user passwords; the cost factor comes from settings."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        # Unknown or corrupt hash formats count as a mismatch
        try:
            return self._context.verify(password, password_hash)
        except (ValueError, TypeError):
            return False
