"""
Password hashing with bcrypt.
"""
import bcrypt

DEFAULT_ROUNDS = 10


class PasswordHasher:
    """One-way, salted password hashing."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Generate a bcrypt hash; a fresh salt is drawn on every call."""
        return bcrypt.hashpw(
            password.encode("utf-8"),
            bcrypt.gensalt(rounds=self.rounds),
        ).decode("utf-8")

    def verify(self, password: str, hashed_password: str) -> bool:
        """Check if provided password matches the stored hash."""
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            # Not a bcrypt hash
            return False
