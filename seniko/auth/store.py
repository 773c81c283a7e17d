"""
User store adapter.

Wraps one request-scoped ``AsyncSession`` and exposes the only operations the
authentication flow needs: look a user up and persist a new one. Driver
errors are translated into the store errors from ``seniko.errors``.
"""
import asyncio
import uuid
from typing import Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from seniko.auth.models import User
from seniko.errors import DuplicateEmail, StoreError, StoreUnavailable, StoreWriteFailed

_CONNECTIVITY_ERRORS = (OperationalError, InterfaceError, OSError, asyncio.TimeoutError)


def _is_connectivity_error(exc: BaseException) -> bool:
    if isinstance(exc, _CONNECTIVITY_ERRORS):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class UserStore:
    """Credential store adapter over a SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        """
        Find a user by exact email match.

        Returns the earliest created record if duplicates exist.
        """
        stmt = select(User).where(User.email == email).order_by(User.created_at).limit(1)
        return await self._first(stmt, "find_by_email")

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self._first(stmt, "find_by_id")

    async def create(self, user: User) -> User:
        """
        Persist a new user record.

        Args:
            user: Unsaved user record

        Returns:
            The stored record, refreshed from the database

        Raises:
            StoreUnavailable: If the database cannot be reached
            DuplicateEmail: If the email is already taken
            StoreWriteFailed: For any other write error
        """
        try:
            self.session.add(user)
            await self.session.commit()
            await self.session.refresh(user)
            return user
        except IntegrityError as e:
            await self._rollback()
            raise DuplicateEmail("User record violates a uniqueness constraint", e) from e
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            await self._rollback()
            if _is_connectivity_error(e):
                raise StoreUnavailable("User store is unavailable", e) from e
            raise StoreWriteFailed("Failed to write user record", e) from e

    async def _first(self, stmt, operation: str) -> Optional[User]:
        try:
            result = await self.session.execute(stmt)
            return result.scalars().first()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            if _is_connectivity_error(e):
                raise StoreUnavailable("User store is unavailable", e) from e
            raise StoreError(f"User store query failed: {operation}", e) from e

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except (SQLAlchemyError, OSError):
            # the session is closed by its owner either way
            pass
