"""Port for user lookup and credential persistence used by operator services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


class UserStoreError(RuntimeError):
    """Raised when the backing user store fails for infrastructure reasons."""


class UserStoreIntegrityError(UserStoreError):
    """Raised when the store violates the one-account-per-email invariant."""

    def __init__(self, *, email: str, matches: int) -> None:
        super().__init__(f"expected at most one user for {email}, found {matches}")
        self.email = email
        self.matches = matches


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: UUID
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime


class UserRepositoryPort(Protocol):
    """User repository contract."""

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email or None."""

    async def save(self, user: UserRecord) -> bool:
        """Write the full user record back; return False when the row no longer exists."""
