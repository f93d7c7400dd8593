"""set-password operator command entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from credential_recovery.application.services.password_reset_service import (
    PasswordResetError,
    PasswordResetErrorKind,
    PasswordResetRequest,
    PasswordResetResult,
    PasswordResetService,
)
from credential_recovery.config.settings import Settings, load_settings
from credential_recovery.infrastructure.db.session import session_factory_scope
from credential_recovery.infrastructure.db.user_repository import SqlAlchemyUserRepository
from credential_recovery.infrastructure.logging import configure_logging
from credential_recovery.infrastructure.security.password_hasher import BcryptPasswordHasher

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CODES: dict[PasswordResetErrorKind, int] = {
    PasswordResetErrorKind.INVALID_INPUT: 2,
    PasswordResetErrorKind.NOT_FOUND: 3,
    PasswordResetErrorKind.STORE_FAILURE: 4,
    PasswordResetErrorKind.UNEXPECTED: EXIT_UNEXPECTED,
}
logger = logging.getLogger(__name__)


class PasswordSourceError(ValueError):
    """Raised when the new password cannot be read from its configured source."""


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the set-password command."""

    parser = argparse.ArgumentParser(
        prog="credential-recovery-set-password",
        description=(
            "Set a new password for a user without requiring the old password "
            "(for forgotten passwords)."
        ),
        epilog="example: --email='owner@example.com' --password='newStrongP@ssw0rd'",
    )
    parser.add_argument(
        "--email",
        required=True,
        help="Email of the user whose password you want to set",
    )
    password_source = parser.add_mutually_exclusive_group(required=True)
    password_source.add_argument("--password", help="New password to set for the user")
    password_source.add_argument(
        "--password-file",
        help="Read the new password from this file instead of the command line",
    )
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy async database URL; overrides DATABASE_URL",
    )
    return parser


def resolve_password(*, password: str | None, password_file: str | None) -> str:
    """Return the new password from the inline flag or the password file."""

    if password_file is None:
        return password or ""
    try:
        contents = Path(password_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PasswordSourceError(f"failed to read password file {password_file}") from exc
    return contents.rstrip("\r\n")


def resolve_settings(*, database_url: str | None) -> Settings:
    """Load settings, letting an explicit database URL override the environment."""

    if database_url is not None:
        return Settings(DATABASE_URL=database_url)  # type: ignore[call-arg]
    return load_settings()


def build_password_reset_service(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    hash_rounds: int,
) -> PasswordResetService:
    """Build password reset service with SQLAlchemy-backed dependencies."""

    return PasswordResetService(
        users=SqlAlchemyUserRepository(session_factory),
        password_hasher=BcryptPasswordHasher(rounds=hash_rounds),
    )


async def run_set_password(
    *,
    settings: Settings,
    request: PasswordResetRequest,
) -> PasswordResetResult:
    """Run one password reset against the configured database."""

    async with session_factory_scope(settings.database_url) as session_factory:
        service = build_password_reset_service(
            session_factory,
            hash_rounds=settings.password_hash_rounds,
        )
        return await service.reset_password(request)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse operator flags, reset one password and return the process exit code."""

    args = build_parser().parse_args(argv)

    try:
        settings = resolve_settings(database_url=args.database_url)
    except ValidationError as exc:
        configure_logging(level="INFO")
        logger.error("Invalid configuration for set-password command.")
        logger.error(str(exc))
        return EXIT_UNEXPECTED
    configure_logging(level=settings.log_level)

    try:
        password = resolve_password(password=args.password, password_file=args.password_file)
    except PasswordSourceError as exc:
        logger.error("Error setting user password. See log messages for details.")
        logger.error(str(exc))
        return EXIT_CODES[PasswordResetErrorKind.INVALID_INPUT]

    request = PasswordResetRequest(email=args.email, password=password)
    try:
        result = asyncio.run(run_set_password(settings=settings, request=request))
    except PasswordResetError as exc:
        logger.error("Error setting user password. See log messages for details.")
        logger.error(str(exc))
        return EXIT_CODES[exc.kind]
    except Exception:
        logger.exception("Error setting user password. See log messages for details.")
        return EXIT_UNEXPECTED

    logger.info("Password successfully updated for %s.", result.email)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
