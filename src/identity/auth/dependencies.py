"""FastAPI dependencies resolving the caller from a bearer token.

Only the token is inspected, so these work under any domain's context.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from identity.auth.tokens import InvalidTokenError, TokenClaims, decode_access_token

_bearer = HTTPBearer(auto_error=False)


def optional_user(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> TokenClaims | None:
    """The caller's claims, or None for guests. A bad token is treated as a guest."""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError:
        return None


def current_user(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> TokenClaims:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None


def require_admin(user: TokenClaims = Depends(current_user)) -> TokenClaims:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
