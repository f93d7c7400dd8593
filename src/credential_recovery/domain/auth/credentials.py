"""Shared normalization and policy helpers for user credential inputs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72


class InvalidInputField(StrEnum):
    """Input fields subject to credential validation."""

    EMAIL = "email"
    PASSWORD = "password"


@dataclass(frozen=True)
class InvalidInput:
    """One unmet credential input constraint."""

    field: InvalidInputField
    reason: str


def normalize_user_email(*, email: str) -> str:
    """Normalize one user email and reject blank values."""

    normalized = email.strip().lower()
    if not normalized:
        raise ValueError("email cannot be blank")
    return normalized


def validate_password_reset_input(
    *,
    email: str | None,
    password: str | None,
) -> InvalidInput | None:
    """Return the first unmet constraint for one reset request, or None when valid."""

    if email is None or not email.strip():
        return InvalidInput(field=InvalidInputField.EMAIL, reason="email is required")
    if not password:
        return InvalidInput(field=InvalidInputField.PASSWORD, reason="password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        return InvalidInput(
            field=InvalidInputField.PASSWORD,
            reason=f"password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return InvalidInput(
            field=InvalidInputField.PASSWORD,
            reason=f"password must be at most {MAX_PASSWORD_BYTES} bytes long",
        )
    return None
