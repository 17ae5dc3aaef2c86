"""Credential storage for registered users.

Two implementations share one contract: an in-memory store owned by the
process and a database store on the ``users`` table. Both treat
``normalize_email`` as the identity key and make ``create`` a single atomic
insert-if-absent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.auth.roles import Role
from backend.core.errors import DuplicateEmail
from backend.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().casefold()


@dataclass(frozen=True)
class UserRecord:
    id: int
    name: str
    email: str
    password_hash: str
    role: Role = Role.USER


class CredentialStore(Protocol):
    def find_by_email(self, email: str) -> Optional[UserRecord]: ...

    def find_by_id(self, user_id: int) -> Optional[UserRecord]: ...

    def create(self, name: str, email: str, password_hash: str, role: Role = Role.USER) -> int: ...


class InMemoryCredentialStore:
    def __init__(self) -> None:
        self._lock = Lock()
        self._by_id: dict[int, UserRecord] = {}
        self._id_by_email: dict[str, int] = {}
        self._next_id = 1

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        key = normalize_email(email)
        if not key:
            return None
        with self._lock:
            user_id = self._id_by_email.get(key)
            return self._by_id.get(user_id) if user_id is not None else None

    def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            return self._by_id.get(user_id)

    def create(self, name: str, email: str, password_hash: str, role: Role = Role.USER) -> int:
        key = normalize_email(email)
        if not key:
            raise ValueError("email_blank")

        with self._lock:
            if key in self._id_by_email:
                raise DuplicateEmail(email)
            user = UserRecord(
                id=self._next_id,
                name=name,
                email=email.strip(),
                password_hash=password_hash,
                role=Role(role),
            )
            self._by_id[user.id] = user
            self._id_by_email[key] = user.id
            self._next_id += 1

        logger.info("Registered user id=%s email=%s", user.id, user.email)
        return user.id


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.hashed_password,
        role=Role.parse(row.role),
    )


class DatabaseCredentialStore:
    """Credential store on the ``users`` table; the unique index closes the registration race."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        key = normalize_email(email)
        if not key:
            return None
        with self._session_factory() as db:
            row = db.scalars(select(User).where(User.email_normalized == key)).first()
            return _to_record(row) if row is not None else None

    def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        with self._session_factory() as db:
            row = db.get(User, user_id)
            return _to_record(row) if row is not None else None

    def create(self, name: str, email: str, password_hash: str, role: Role = Role.USER) -> int:
        key = normalize_email(email)
        if not key:
            raise ValueError("email_blank")

        with self._session_factory() as db:
            user = User(
                name=name,
                email=email.strip(),
                email_normalized=key,
                hashed_password=password_hash,
                role=Role(role).value,
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise DuplicateEmail(email) from exc
            user_id = user.id

        logger.info("Registered user id=%s email=%s", user_id, email.strip())
        return user_id
