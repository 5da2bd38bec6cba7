from typing import Optional
import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.commonUtils.exceptions import InvalidToken, Unauthenticated
from src.config.settings import settings

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches us and gets the service's own envelope
bearer_scheme = HTTPBearer(auto_error=False)


def decode_user_id(token: str, secret: Optional[str] = None, algorithm: Optional[str] = None) -> str:
    """Verify signature and expiry, return the user id the token was issued for.

    Tokens from the platform's auth service carry the user in an ``id`` claim;
    the registered ``sub`` claim is accepted as well.
    """
    try:
        payload = jwt.decode(
            token,
            secret or settings.JWT_SECRET_KEY,
            algorithms=[algorithm or settings.JWT_ALGORITHM],
        )
    except jwt.PyJWTError as e:
        logger.info(f"Rejected bearer token: {str(e)}")
        raise InvalidToken() from e

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise InvalidToken()

    return str(user_id)


async def current_user_id(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """FastAPI dependency guarding every cart and wishlist route"""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()

    return decode_user_id(credentials.credentials)
