"""
Request dependencies: the verified caller id and the negotiation engine handle.

Tokens are minted by the external identity service; we only verify the signature and read the user claim.
"""
import logging

import jwt
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from slotswap.config import settings
from slotswap.db.session import get_db
from slotswap.services.negotiation import NegotiationEngine
from slotswap.services.user_service import get_user

logger = logging.getLogger(__name__)

STATUS_UNAUTHORIZED = 401


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=STATUS_UNAUTHORIZED,
        detail={"error": "unauthorized", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_caller_token(token: str) -> int:
    """Verify token and return the caller id from settings.jwt_user_claim. Raises HTTPException(401)."""
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not configured; rejecting all tokens")
        raise _unauthorized("Token is not valid")
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise _unauthorized("Token is not valid") from e
    try:
        return int(claims[settings.jwt_user_claim])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Token has no user id") from None


def get_caller_id(
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
) -> int:
    """Caller id from 'Authorization: Bearer <token>'; the user must be known to us."""
    if not authorization:
        raise _unauthorized("No token, authorization denied")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Malformed token, authorization denied")
    caller_id = decode_caller_token(token.strip())
    if get_user(db, caller_id) is None:
        raise _unauthorized("Unknown user")
    return caller_id


def get_negotiation_engine(request: Request) -> NegotiationEngine:
    """Engine built once in the app lifespan."""
    return request.app.state.negotiation_engine
