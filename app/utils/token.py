from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from sqlmodel import Session
from app.config import settings
from app.constants.order_status import ActorRole
from app.database import get_session
from app.models.user import User

# tokens are minted by the marketplace's auth service; this side only verifies
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def read_claims(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        raise _unauthorized("Could not validate credentials")


def claimed_role(claims: dict) -> Optional[ActorRole]:
    """Role carried by the token, if any. Unknown roles reject the token."""
    raw = claims.get("role")
    if raw is None:
        return None
    try:
        return ActorRole(str(raw).strip().lower())
    except ValueError:
        raise _unauthorized(f"Unknown role '{raw}' in token")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session)
) -> User:
    if credentials is None:
        raise _unauthorized("Not authenticated")

    claims = read_claims(credentials.credentials)

    user_id = claims.get("user_id") or claims.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    try:
        user = session.get(User, int(user_id))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")

    if user is None:
        raise _unauthorized("User not found")

    # a role change revokes tokens issued under the old role
    role = claimed_role(claims)
    if role is not None and role != user.role:
        raise _unauthorized("Token role does not match this account")

    if not user.can_login:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    return user
