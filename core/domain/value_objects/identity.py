"""Caller identity value object."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthenticatedUser:
    """
    Identity of the caller, resolved from the bearer token.

    Passed explicitly into every use case; all order reads and writes
    are scoped by `user_id`.
    """
    user_id: str
    email: Optional[str] = None

    def __post_init__(self):
        if not self.user_id:
            raise ValueError("user_id cannot be empty")
