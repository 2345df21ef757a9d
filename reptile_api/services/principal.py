"""
Principal resolution.

The authentication layer in front of the API identifies the caller; the
services only need the caller's identifier (for audit fields) and, for
owner-scoped data, the caller's user id.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from reptile_api.models import User
from shared.config.settings import settings
from shared.utils.exceptions import AccessDeniedError


class PrincipalProvider(Protocol):
    def current_identifier(self) -> str: ...

    def resolve_owner_id(self) -> int: ...


class StaticPrincipal:
    """Fixed principal, for jobs running without a request (e.g. imports)."""

    def __init__(self, identifier: str | None = None, owner_id: int | None = None):
        self._identifier = identifier or settings.system_principal
        self._owner_id = owner_id

    def current_identifier(self) -> str:
        return self._identifier

    def resolve_owner_id(self) -> int:
        if self._owner_id is None:
            raise AccessDeniedError(
                "Principal has no owner identity", principal=self._identifier
            )
        return self._owner_id


class SessionPrincipal:
    """
    Principal backed by the ``app_user`` table.

    The owner id is looked up once by username and cached for the lifetime
    of the object (one request).
    """

    def __init__(self, db: Session, identifier: str | None):
        self._db = db
        self._identifier = identifier
        self._owner_id: int | None = None

    def current_identifier(self) -> str:
        return self._identifier or settings.system_principal

    def resolve_owner_id(self) -> int:
        """
        Raises:
            AccessDeniedError: If no user matches the principal.
        """
        if self._owner_id is None:
            if not self._identifier:
                raise AccessDeniedError("Authentication required")
            user_id = self._db.scalar(select(User.id).where(User.username == self._identifier))
            if user_id is None:
                raise AccessDeniedError("Unknown principal", principal=self._identifier)
            self._owner_id = user_id
        return self._owner_id
