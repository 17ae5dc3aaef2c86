from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Map a stored or claimed role string onto the closed set of roles."""
        return cls((value or "").strip().lower())
