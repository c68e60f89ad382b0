"""
Password hashing for user-table rows
"""

import bcrypt

from config.config import BCRYPT_ROUNDS
from src.core.exceptions import InvalidPasswordError

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def validate_password(password: str) -> None:
    """
    Check a new password before hashing

    Raises:
        InvalidPasswordError: If empty or longer than 72 bytes in UTF-8
    """
    if not password:
        raise InvalidPasswordError("Password is required for registration.")
    if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise InvalidPasswordError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes.")


class PasswordHasher:
    """Secure password hashing using bcrypt."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """Hash password with bcrypt."""
        validate_password(password)
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')

    def verify_password(self, password: str, hashed: str) -> bool:
        """Verify password against hash. Malformed hashes and over-long passwords never match."""
        if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
        except ValueError:
            return False
