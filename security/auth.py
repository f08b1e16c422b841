import logging
from typing import Optional

from bson import ObjectId
from fastapi import Header, HTTPException, Request, status

from core.config import get_settings
from core.database import get_collection
from schemas.tokens_schema import accessTokenOut
from services.portfolio_normalization import normalize_datetime, utcnow


logger = logging.getLogger(__name__)

# Cookie names the identity provider sets for database-backed sessions.
SESSION_COOKIE_NAMES = ("__Secure-next-auth.session-token", "next-auth.session-token")


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": message, "code": "UNAUTHORIZED"},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_session_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization:
        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise _unauthorized("Authorization header must be Bearer token")
        return parts[1].strip() or None
    for name in SESSION_COOKIE_NAMES:
        token = request.cookies.get(name)
        if token:
            return token
    return None


async def verify_token(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> accessTokenOut:
    """Resolves the caller's session token to a user id via the session store."""
    token = _extract_session_token(request, authorization)
    if not token:
        raise _unauthorized("Unauthorized")

    sessions = get_collection(get_settings().sessions_collection)
    session = await sessions.find_one({"sessionToken": token})
    if not session:
        raise _unauthorized("Unauthorized")

    expires = normalize_datetime(session.get("expires"))
    if expires is not None and expires <= utcnow():
        logger.info("Rejected expired session for user %s", session.get("userId"))
        raise _unauthorized("Session expired")

    user_id = session.get("userId")
    if isinstance(user_id, ObjectId):
        user_id = str(user_id)
    if not user_id:
        raise _unauthorized("Session has no user")

    return accessTokenOut(userId=user_id, sessionToken=token, expires=expires)
