"""
Authentication router.

This module provides FastAPI router for authentication endpoints:
- User registration and login
- Current user profile
- Liveness check

Every endpoint is rate limited by the application's limiter, so the router is
built per application by ``create_router``.
"""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter

from seniko.auth.jwt import TokenData, get_current_user
from seniko.auth.users import AuthService, LoginRequest, RegisterRequest, TokenOut, UserOut, get_auth_service
from seniko.errors import AuthenticationFailed, StoreError, StoreUnavailable, ValidationError


def _validation_failed(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=[e.as_detail()]
    )


def _store_failed(service: AuthService, e: StoreError, context: str) -> HTTPException:
    # Full detail goes to the log only
    service.log_error(e.cause or e, context=context)
    if isinstance(e, StoreUnavailable):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable"
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{context} failed"
    )


def create_router(limiter: Limiter, rate_limit: str) -> APIRouter:
    """
    Build the auth router with every endpoint limited by ``limiter``.

    Args:
        limiter: The application's rate limiter
        rate_limit: Limit string applied to each endpoint, e.g. "4 per 12 seconds"

    Returns:
        Router to mount under /auth
    """
    router = APIRouter(tags=["auth"])

    @router.post("/login", response_model=TokenOut)
    @limiter.limit(rate_limit)
    async def login(
        request: Request,
        credentials: LoginRequest,
        service: AuthService = Depends(get_auth_service)
    ):
        """
        Authenticate a user and return a token.

        Args:
            request: Incoming request, used for rate limiting
            credentials: Email and password
            service: Request-scoped authentication service

        Returns:
            Signed access token
        """
        try:
            token = await service.login(credentials)
            return TokenOut(token=token)
        except ValidationError as e:
            raise _validation_failed(e)
        except AuthenticationFailed as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(e),
                headers={"WWW-Authenticate": "Bearer"},
            )
        except StoreError as e:
            raise _store_failed(service, e, "Login")

    @router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
    @limiter.limit(rate_limit)
    async def register(
        request: Request,
        user_data: RegisterRequest,
        service: AuthService = Depends(get_auth_service)
    ):
        """
        Register a new user.

        Args:
            request: Incoming request, used for rate limiting
            user_data: User registration data
            service: Request-scoped authentication service

        Returns:
            Created user without credentials
        """
        try:
            return await service.register(user_data)
        except ValidationError as e:
            raise _validation_failed(e)
        except StoreError as e:
            raise _store_failed(service, e, "Registration")

    @router.get("/me", response_model=UserOut)
    @limiter.limit(rate_limit)
    async def get_current_user_info(
        request: Request,
        token_data: TokenData = Depends(get_current_user),
        service: AuthService = Depends(get_auth_service)
    ):
        """Get information about the current authenticated user."""
        try:
            user = await service.get_user(token_data.user_id)
        except StoreError as e:
            raise _store_failed(service, e, "User lookup")

        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return user

    @router.get("/ping", response_model=Dict[str, Any])
    @limiter.limit(rate_limit)
    async def ping(request: Request):
        """Health check endpoint for the auth service."""
        return {
            "status": "ok",
            "message": "Auth service is alive",
            "data": {"timestamp": datetime.now(timezone.utc).isoformat()}
        }

    return router
