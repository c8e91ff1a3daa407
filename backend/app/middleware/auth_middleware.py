"""Bearer-token authentication dependencies.

``get_current_user`` turns the ``Authorization: Bearer <jwt>`` header into an
active ``User``; every failure along the way is a 401. ``require_roles``
layers a global-role gate on top of it and answers 403.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.user import User, UserRole

security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise _unauthorized("Invalid or expired token")


def token_subject(credentials: Optional[HTTPAuthorizationCredentials]) -> int:
    if credentials is None:
        raise _unauthorized("Not authenticated")
    subject = decode_token(credentials.credentials).get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    user_id = token_subject(credentials)
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("Account is deactivated")
    return user


def require_roles(*roles: str):
    allowed = {UserRole(role).value for role in roles}

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            detail = "Admin access required" if allowed == {UserRole.ADMIN.value} else (
                f"Requires role: {', '.join(sorted(allowed))}"
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return current_user

    return checker


require_admin = require_roles(UserRole.ADMIN.value)
