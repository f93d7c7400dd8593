"""Bcrypt password hasher adapter."""

from __future__ import annotations

import bcrypt

from credential_recovery.application.ports.password_hasher_port import PasswordHasherPort

DEFAULT_BCRYPT_ROUNDS = 12
_BCRYPT_PREFIXES = frozenset({"2a", "2b", "2y"})


class BcryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using bcrypt with a fixed cost factor."""

    def __init__(self, *, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash_password(self, password: str) -> str:
        encoded = password.encode("utf-8")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Return True when the hash is not bcrypt or uses a different cost factor."""

        parts = password_hash.split("$")
        if len(parts) != 4 or parts[0] or parts[1] not in _BCRYPT_PREFIXES:
            return True
        try:
            return int(parts[2]) != self._rounds
        except ValueError:
            return True
