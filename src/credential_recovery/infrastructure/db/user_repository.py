"""SQLAlchemy adapter for user lookup and credential persistence."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from credential_recovery.application.ports.user_repository_port import (
    UserRecord,
    UserRepositoryPort,
    UserStoreError,
    UserStoreIntegrityError,
)
from credential_recovery.infrastructure.db.metadata import users


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by normalized email, rejecting duplicate matches."""

        statement = sa.select(
            users.c.id,
            users.c.email,
            users.c.password_hash,
            users.c.created_at,
            users.c.updated_at,
        ).where(users.c.email == email).limit(2)

        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                rows = result.mappings().all()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            raise UserStoreError(f"user lookup failed: {exc}") from exc

        if not rows:
            return None
        if len(rows) > 1:
            raise UserStoreIntegrityError(email=email, matches=len(rows))
        return _to_user_record(rows[0])

    async def save(self, user: UserRecord) -> bool:
        """Overwrite the stored row for one user in a single update statement."""

        statement = (
            sa.update(users)
            .where(users.c.id == user.user_id)
            .values(
                email=user.email,
                password_hash=user.password_hash,
                updated_at=user.updated_at,
            )
        )

        try:
            async with self._session_factory() as session:
                result = cast(CursorResult[Any], await session.execute(statement))
                await session.commit()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            raise UserStoreError(f"user update failed: {exc}") from exc

        return int(result.rowcount or 0) == 1


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )
