"""
Bearer-token authentication.

Token issuance lives with the account service; here we only verify HS256
JWTs and turn their claims into an explicit Caller that handlers receive
as a dependency.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from admin_api.config import settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    user_id: int
    username: Optional[str] = None


def decode_token(token: str) -> Caller:
    """Verify a token and build the Caller. Raises 401 on any failure."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from exc

    user_id = payload.get("id", payload.get("sub"))
    try:
        user_id = int(user_id)
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from exc
    return Caller(user_id=user_id, username=payload.get("username"))


async def get_optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Caller]:
    """Anonymous access allowed; a token, if sent, must still be valid."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials)


async def require_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Caller:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token"
        )
    return decode_token(credentials.credentials)
