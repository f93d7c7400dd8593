"""Application service for operator-invoked password resets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID

from credential_recovery.application.ports.password_hasher_port import PasswordHasherPort
from credential_recovery.application.ports.user_repository_port import (
    UserRecord,
    UserRepositoryPort,
    UserStoreError,
    UserStoreIntegrityError,
)
from credential_recovery.domain.auth.credentials import (
    InvalidInput,
    normalize_user_email,
    validate_password_reset_input,
)

logger = logging.getLogger(__name__)


class PasswordResetErrorKind(StrEnum):
    """Failure categories reported by one password reset attempt."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    STORE_FAILURE = "store_failure"
    UNEXPECTED = "unexpected"


class PasswordResetError(Exception):
    """Base error for password reset failures."""

    kind: PasswordResetErrorKind = PasswordResetErrorKind.UNEXPECTED


class InvalidPasswordResetInputError(PasswordResetError, ValueError):
    """Raised when reset input violates the credential policy."""

    kind = PasswordResetErrorKind.INVALID_INPUT

    def __init__(self, violation: InvalidInput) -> None:
        super().__init__(violation.reason)
        self.violation = violation


class UserNotFoundError(PasswordResetError, LookupError):
    """Raised when no user matches the normalized email."""

    kind = PasswordResetErrorKind.NOT_FOUND

    def __init__(self, *, email: str) -> None:
        super().__init__(f"user with email {email} not found")
        self.email = email


class PasswordResetStoreError(PasswordResetError):
    """Raised when the user store fails during lookup or persistence."""

    kind = PasswordResetErrorKind.STORE_FAILURE


class UserStoreIntegrityViolationError(PasswordResetError):
    """Raised when the user store holds more than one account for one email."""


class CredentialHashingError(PasswordResetError):
    """Raised when the password hasher fails to derive a credential hash."""


@dataclass(frozen=True)
class PasswordResetRequest:
    """Transient operator input for one password reset."""

    email: str
    password: str

    def __repr__(self) -> str:
        return f"PasswordResetRequest(email={self.email!r}, password='***')"


@dataclass(frozen=True)
class PasswordResetResult:
    """Outcome of one successful password reset."""

    user_id: UUID
    email: str


class PasswordResetService:
    """Replace one user's credential hash without requiring the old password."""

    def __init__(
        self,
        *,
        users: UserRepositoryPort,
        password_hasher: PasswordHasherPort,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    async def reset_password(self, request: PasswordResetRequest) -> PasswordResetResult:
        """Validate, look up, hash and persist one new password.

        Any failure aborts before the single store write. Concurrent resets of
        the same account are not serialized; the last successful write wins.
        """

        violation = validate_password_reset_input(email=request.email, password=request.password)
        if violation is not None:
            raise InvalidPasswordResetInputError(violation)

        email = normalize_user_email(email=request.email)
        user = await self._require_existing_user(email=email)

        try:
            password_hash = self._password_hasher.hash_password(request.password)
        except Exception as exc:
            raise CredentialHashingError(f"failed to hash password for {email}") from exc

        updated = replace(user, password_hash=password_hash, updated_at=datetime.now(tz=UTC))
        try:
            saved = await self._users.save(updated)
        except UserStoreError as exc:
            raise PasswordResetStoreError(str(exc)) from exc
        if not saved:
            raise UserNotFoundError(email=email)

        logger.info("password_reset_completed user_id=%s email=%s", user.user_id, email)
        return PasswordResetResult(user_id=user.user_id, email=email)

    async def _require_existing_user(self, *, email: str) -> UserRecord:
        """Return the user for one normalized email or raise a typed error."""

        try:
            user = await self._users.get_by_email(email=email)
        except UserStoreIntegrityError as exc:
            raise UserStoreIntegrityViolationError(str(exc)) from exc
        except UserStoreError as exc:
            raise PasswordResetStoreError(str(exc)) from exc
        if user is None:
            raise UserNotFoundError(email=email)
        return user
