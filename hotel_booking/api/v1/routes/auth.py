from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from hotel_booking.api.deps import get_current_user, require_admin
from hotel_booking.db.session import get_db
from hotel_booking.models.enums import UserRole
from hotel_booking.models.user import User
from hotel_booking.schemas.auth import LoginRequest, LogoutRequest, RefreshRequest, RegisterRequest, TokenPair
from hotel_booking.schemas.user import ProfileUpdate, UserOut
from hotel_booking.services import auth_service
from hotel_booking.services.auth_service import InvalidCredentials

router = APIRouter(tags=["auth"])


@router.post("/auth/register", response_model=UserOut, status_code=201)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    return UserOut.of(auth_service.register(db, body))


@router.post("/auth/create-admin", response_model=UserOut, status_code=201)
def create_admin(body: RegisterRequest, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return UserOut.of(auth_service.register(db, body, role=UserRole.ADMIN, actor_id=me.id))


@router.post("/auth/login", response_model=TokenPair)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    try:
        return auth_service.login(db, body.email, body.password)
    except InvalidCredentials:
        raise HTTPException(status_code=401, detail="Invalid credentials")


@router.post("/auth/refresh", response_model=TokenPair)
def refresh(body: RefreshRequest, db: Session = Depends(get_db)):
    try:
        return auth_service.refresh(db, body.refresh_token)
    except InvalidCredentials:
        raise HTTPException(status_code=401, detail="Invalid refresh token")


@router.post("/auth/logout", status_code=204)
def logout(body: LogoutRequest | None = None, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    auth_service.logout(db, me, body.refresh_token if body else None)


@router.get("/auth/profile", response_model=UserOut)
def profile(me: User = Depends(get_current_user)):
    return UserOut.of(me)


@router.patch("/auth/profile", response_model=UserOut)
def update_profile(body: ProfileUpdate, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    return UserOut.of(auth_service.update_profile(db, me, body.model_dump(exclude_unset=True)))
