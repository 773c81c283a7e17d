"""
JWT token handling for authentication.

This module provides functionality for:
- Creating signed access tokens carrying the user identifier
- Validating access tokens
- Resolving the bearer token of a request into token data
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
import uuid

import jwt
from jwt.exceptions import PyJWTError
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel

from seniko.config import JwtSettings
from seniko.errors import ConfigurationError, InvalidToken

USER_ID_CLAIM = "userId"

# Authentication scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


class TokenData(BaseModel):
    """Verified token payload."""
    user_id: str
    exp: Optional[int] = None  # Expiration time


class TokenIssuer:
    """
    Signs and verifies access tokens with a symmetric key.

    Issuer and audience are written into tokens and required on verification
    only when they are configured, so both paths apply the same policy.
    """

    def __init__(self, settings: JwtSettings):
        if not settings.secret_key:
            raise ConfigurationError("JWT secret key is not configured")
        self.settings = settings

    def create_access_token(
        self,
        user_id: Union[uuid.UUID, str],
        issued_at: Optional[datetime] = None
    ) -> str:
        """
        Create a JWT access token for a user.

        Args:
            user_id: Identifier of the authenticated user
            issued_at: Issuance time, defaults to now

        Returns:
            Encoded JWT token string
        """
        issued_at = issued_at or datetime.now(timezone.utc)
        to_encode: Dict[str, Any] = {
            USER_ID_CLAIM: str(user_id),
            "exp": issued_at + self.settings.token_lifetime,
        }
        if self.settings.issuer:
            to_encode["iss"] = self.settings.issuer
        if self.settings.audience:
            to_encode["aud"] = self.settings.audience

        return jwt.encode(to_encode, self.settings.secret_key, algorithm=self.settings.algorithm)

    def verify_token(self, token: str) -> TokenData:
        """
        Verify a JWT token and return its data.

        Args:
            token: JWT token string

        Returns:
            TokenData for a valid token

        Raises:
            InvalidToken: If the signature, expiration, issuer or audience check fails
        """
        required = ["exp", USER_ID_CLAIM]
        if self.settings.issuer:
            required.append("iss")
        if self.settings.audience:
            required.append("aud")

        try:
            payload = jwt.decode(
                token,
                self.settings.secret_key,
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                audience=self.settings.audience,
                leeway=0,
                options={"require": required},
            )
        except PyJWTError as e:
            raise InvalidToken(str(e)) from e

        # PyJWT only checks iss when an issuer is passed; aud is already rejected
        if self.settings.issuer is None and "iss" in payload:
            raise InvalidToken("Token carries an issuer but none is configured")

        user_id = payload.get(USER_ID_CLAIM)
        if not isinstance(user_id, str):
            raise InvalidToken("userId claim must be a string")
        return TokenData(user_id=user_id, exp=payload.get("exp"))


async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> TokenData:
    """
    FastAPI dependency to get the current authenticated user from token.

    Args:
        request: Incoming request, used to reach the application's token issuer
        token: JWT token from Authorization header

    Returns:
        TokenData object for the authenticated user

    Raises:
        HTTPException: If token is invalid or expired
    """
    issuer: TokenIssuer = request.app.state.token_issuer
    try:
        return issuer.verify_token(token)
    except InvalidToken:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
