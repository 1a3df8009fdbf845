import logging
from datetime import datetime, timezone
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from hotel_booking.core.errors import ConflictError, ResourceNotFoundError
from hotel_booking.core.security import hash_password
from hotel_booking.models.enums import UserRole
from hotel_booking.models.refresh_token import RefreshToken
from hotel_booking.models.user import User
from hotel_booking.services.audit_service import log_audit

logger = logging.getLogger(__name__)

_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phoneNumber": "phone_number",
    "address": "address",
    "role": "role",
}


def list_users(db: Session) -> list[User]:
    stmt = select(User).where(User.deleted_at.is_(None)).order_by(User.id.asc())
    return list(db.execute(stmt).scalars().all())


def get_user(db: Session, user_id: int) -> User:
    u = db.get(User, user_id)
    if not u or u.deleted_at is not None:
        raise ResourceNotFoundError("User", user_id)
    return u


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()


def create_user(db: Session, first_name: str, last_name: str, email: str, password: str,
                role: UserRole | str = UserRole.USER, phone_number: str | None = None,
                address: str | None = None, actor_id: int | None = None) -> User:
    email_l = email.strip().lower()
    if get_user_by_email(db, email_l):
        raise ConflictError(f"User with email {email_l} already exists")
    u = User(
        email=email_l,
        first_name=first_name,
        last_name=last_name,
        password_hash=hash_password(password),
        role=UserRole(role).value,
        phone_number=phone_number,
        address=address,
        token_version=0,
        is_active=True,
    )
    db.add(u)
    db.flush()
    log_audit(db, actor_id, "user.create", "user", u.id, {"email": u.email, "role": u.role})
    db.commit()
    db.refresh(u)
    logger.info("user %s created with role %s", u.id, u.role)
    return u


def update_user(db: Session, user_id: int, changes: dict, actor_id: int | None = None) -> User:
    """Apply request-shaped ``changes`` (camelCase keys, ``password`` in clear)."""
    u = get_user(db, user_id)
    email = changes.get("email")
    if email:
        email = email.strip().lower()
        if email != u.email and get_user_by_email(db, email):
            raise ConflictError(f"User with email {email} already exists")
        changes = {**changes, "email": email}
    for k, v in changes.items():
        if v is None:
            continue
        if k == "password":
            u.password_hash = hash_password(v)
        elif k == "role":
            u.role = UserRole(v).value
        elif k in _FIELDS:
            setattr(u, _FIELDS[k], v)
    if changes.get("role") is not None:
        log_audit(db, actor_id, "user.role", "user", u.id, {"role": u.role})
    db.commit()
    db.refresh(u)
    return u


def delete_user(db: Session, user_id: int, actor_id: int | None = None) -> None:
    """Deactivate and hide the account; bookings keep pointing at it."""
    u = get_user(db, user_id)
    u.is_active = False
    u.deleted_at = datetime.now(timezone.utc)
    db.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == u.id, RefreshToken.is_active == True)  # noqa: E712
        .values(is_active=False)
    )
    log_audit(db, actor_id, "user.delete", "user", u.id, {"email": u.email})
    db.commit()
