"""Login, registration and refresh-token rotation.

Access tokens are short-lived JWTs that carry the user's ``token_version``. Refresh tokens
are opaque random strings persisted in ``refresh_tokens``; using one revokes it, bumps the
user's ``token_version`` (which invalidates every outstanding access token) and issues a new
pair.
"""
import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from hotel_booking.core.config import settings
from hotel_booking.core.dates import as_utc
from hotel_booking.core.security import create_access_token, new_refresh_token_value, verify_password
from hotel_booking.models.enums import UserRole
from hotel_booking.models.refresh_token import RefreshToken
from hotel_booking.models.user import User
from hotel_booking.schemas.auth import RegisterRequest, TokenPair
from hotel_booking.services import user_service

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("firstName", "lastName", "phoneNumber", "address")


class InvalidCredentials(Exception):
    pass


def _issue_refresh_token(db: Session, user: User) -> RefreshToken:
    rt = RefreshToken(
        token=new_refresh_token_value(),
        user_id=user.id,
        is_active=True,
        expires_at=datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )
    db.add(rt)
    return rt


def issue_tokens(db: Session, user: User) -> TokenPair:
    access = create_access_token(user.id, user.email, user.role, user.token_version)
    rt = _issue_refresh_token(db, user)
    db.commit()
    return TokenPair(access_token=access, refresh_token=rt.token)


def register(db: Session, body: RegisterRequest, role: UserRole = UserRole.USER,
             actor_id: int | None = None) -> User:
    return user_service.create_user(
        db,
        first_name=body.firstName.strip(),
        last_name=body.lastName.strip(),
        email=body.email,
        password=body.password,
        role=role,
        phone_number=body.phoneNumber,
        address=body.address,
        actor_id=actor_id,
    )


def authenticate(db: Session, email: str, password: str) -> User:
    u = user_service.get_user_by_email(db, email)
    if not u or not u.is_active or u.deleted_at is not None:
        raise InvalidCredentials()
    if not verify_password(password, u.password_hash):
        raise InvalidCredentials()
    return u


def login(db: Session, email: str, password: str) -> TokenPair:
    u = authenticate(db, email, password)
    logger.info("user %s logged in", u.id)
    return issue_tokens(db, u)


def find_refresh_token(db: Session, token: str) -> RefreshToken | None:
    """Active and unexpired token row, or None."""
    rt = db.execute(
        select(RefreshToken).where(RefreshToken.token == token, RefreshToken.is_active == True)  # noqa: E712
    ).scalar_one_or_none()
    if not rt:
        return None
    if as_utc(rt.expires_at) <= datetime.now(timezone.utc):
        return None
    return rt


def refresh(db: Session, token: str) -> TokenPair:
    rt = find_refresh_token(db, token)
    if not rt:
        raise InvalidCredentials()
    u = db.get(User, rt.user_id)
    if not u or not u.is_active or u.deleted_at is not None:
        raise InvalidCredentials()
    rt.is_active = False
    u.token_version = (u.token_version or 0) + 1
    db.flush()
    return issue_tokens(db, u)


def revoke_all(db: Session, user_id: int) -> int:
    res = db.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == user_id, RefreshToken.is_active == True)  # noqa: E712
        .values(is_active=False)
    )
    return res.rowcount or 0


def logout(db: Session, user: User, refresh_token: str | None = None) -> None:
    """Revoke the given refresh token, or all of the user's tokens when none is given."""
    if refresh_token:
        res = db.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user.id, RefreshToken.token == refresh_token)
            .values(is_active=False)
        )
        n = res.rowcount or 0
    else:
        n = revoke_all(db, user.id)
    db.commit()
    logger.info("user %s logged out, %s refresh tokens revoked", user.id, n)


def update_profile(db: Session, user: User, changes: dict) -> User:
    allowed = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
    if not allowed:
        return user
    return user_service.update_user(db, user.id, allowed)
