from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from hotel_booking.db.session import get_db
from hotel_booking.core.security import decode_token
from hotel_booking.models.enums import UserRole
from hotel_booking.models.user import User

bearer = HTTPBearer(auto_error=False)


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    user = db.get(User, user_id)
    if not user or not user.is_active or user.deleted_at is not None:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    # refresh bumps the version, retiring older access tokens
    if payload.get("tokenVersion") != user.token_version:
        raise HTTPException(status_code=401, detail="Token has been revoked")
    return user


def require_roles(*roles: str):
    def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _guard


require_admin = require_roles(UserRole.ADMIN.value)


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN.value


def ensure_owner_or_admin(user: User, owner_id: int) -> None:
    if owner_id != user.id and not is_admin(user):
        raise HTTPException(status_code=403, detail="Forbidden")
