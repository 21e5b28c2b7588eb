"""Authentication helpers and FastAPI security dependency.

This module provides utilities to decode JWT tokens and a FastAPI
dependency `get_current_user` that validates the bearer token and
attaches the decoded identity to the request.

Verification is stateless: the signed payload is trusted once its
signature and expiry check out, so no database lookup happens here.
Every failure surfaces as an HTTPException with status 401.
"""

import logging
from typing import Optional
from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from .config import settings

bearer_scheme = HTTPBearer(auto_error=False)
logger = logging.getLogger("school_api.auth")

UNAUTHORIZED_HEADERS = {"WWW-Authenticate": "Bearer"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers=UNAUTHORIZED_HEADERS)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Returns the decoded payload on success or raises an HTTPException
    with status 401 on failure.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized('Token expired')
    except jwt.InvalidTokenError:
        raise _unauthorized('Invalid token')


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> dict:
    """FastAPI dependency that returns the authenticated identity.

    The identity is `{id, email}` from the token payload and is also
    stored on `request.state.user` for downstream handlers.
    """
    if credentials is None:
        raise _unauthorized('Missing bearer token')
    payload = decode_token(credentials.credentials)
    user_id = payload.get('id')
    email = payload.get('email')
    if user_id is None or not email:
        logger.info("token rejected: incomplete payload")
        raise _unauthorized('Invalid token payload')
    identity = {'id': user_id, 'email': email}
    request.state.user = identity
    return identity
