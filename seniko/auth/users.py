"""
User authentication service.

This module provides functionality for:
- User registration
- User authentication (login)
- Looking up the authenticated user's profile
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from seniko.base_microservice import BaseMicroservice, get_db_session
from seniko.auth.jwt import TokenIssuer
from seniko.auth.models import User
from seniko.auth.passwords import PasswordHasher
from seniko.auth.store import UserStore
from seniko.auth.validation import validate_login, validate_registration
from seniko.errors import AuthenticationFailed, DuplicateEmail, EmailAlreadyRegistered

# Request/response models. Field rules are enforced by seniko.auth.validation
class RegisterRequest(BaseModel):
    """Model for user registration."""
    username: str
    password: str
    email: str


class LoginRequest(BaseModel):
    """Model for user login."""
    email: str
    password: str


class UserOut(BaseModel):
    """Model for user information returned to clients. Never carries the password hash."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    created_at: Optional[datetime] = None


class TokenOut(BaseModel):
    """Login response model."""
    token: str


class AuthService(BaseMicroservice):
    """
    Service for registration and login.

    One instance per request: it wraps the request's user store and shares
    the application's password hasher and token issuer.
    """
    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        logger: Optional[logging.Logger] = None
    ):
        super().__init__(logger)
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    async def register(self, request: RegisterRequest) -> UserOut:
        """
        Register a new user.

        Args:
            request: Registration data

        Returns:
            Public view of the created user

        Raises:
            ValidationError: If a field is invalid or the email is taken
            StoreError: If the user could not be persisted
        """
        validate_registration(request)

        if await self.store.find_by_email(request.email) is not None:
            raise EmailAlreadyRegistered()

        password_hash = await run_in_threadpool(self.hasher.hash, request.password)
        user = User(
            id=uuid.uuid4(),
            username=request.username,
            email=request.email,
            password_hash=password_hash
        )

        try:
            created = await self.store.create(user)
        except DuplicateEmail:
            # Lost a race with a concurrent registration for the same email
            raise EmailAlreadyRegistered()

        self.log_event("user.registered", {"id": str(created.id)})
        return UserOut.model_validate(created)

    async def login(self, request: LoginRequest) -> str:
        """
        Authenticate a user and return an access token.

        Unknown email and wrong password fail identically.

        Args:
            request: Login credentials

        Returns:
            Signed JWT access token

        Raises:
            ValidationError: If the request is malformed
            AuthenticationFailed: If the credentials do not match
            StoreError: If the user store could not be queried
        """
        validate_login(request)

        user = await self.store.find_by_email(request.email)
        stored_hash = user.password_hash if user is not None else None
        verified = await run_in_threadpool(self.hasher.verify, request.password, stored_hash)

        if user is None or not verified:
            self.log_event("user.login.failed", {"known_email": user is not None})
            raise AuthenticationFailed()

        token = self.tokens.create_access_token(user.id)
        self.log_event("user.login", {"id": str(user.id)})
        return token

    async def get_user(self, user_id: str) -> Optional[UserOut]:
        """Get the public view of a user by ID, or None if unknown."""
        try:
            key = uuid.UUID(user_id)
        except ValueError:
            return None
        user = await self.store.find_by_id(key)
        if user is None:
            return None
        return UserOut.model_validate(user)


def get_auth_service(
    request: Request,
    db: AsyncSession = Depends(get_db_session)
) -> AuthService:
    """Dependency building a request-scoped AuthService."""
    state = request.app.state
    return AuthService(
        store=UserStore(db),
        hasher=state.password_hasher,
        tokens=state.token_issuer,
        logger=state.logger.getChild("auth")
    )
