from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from hotel_booking.api.deps import ensure_owner_or_admin, get_current_user, is_admin, require_admin
from hotel_booking.db.session import get_db
from hotel_booking.models.user import User
from hotel_booking.schemas.user import UserCreate, UserOut, UserUpdate
from hotel_booking.services import user_service

router = APIRouter(tags=["users"])


@router.get("/users", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return [UserOut.of(u) for u in user_service.list_users(db)]


@router.get("/users/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_owner_or_admin(me, user_id)
    return UserOut.of(user_service.get_user(db, user_id))


@router.post("/users", response_model=UserOut, status_code=201)
def create_user(body: UserCreate, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    return UserOut.of(user_service.create_user(
        db,
        first_name=body.firstName,
        last_name=body.lastName,
        email=body.email,
        password=body.password,
        role=body.role,
        phone_number=body.phoneNumber,
        address=body.address,
        actor_id=me.id,
    ))


@router.patch("/users/{user_id}", response_model=UserOut)
def update_user(user_id: int, body: UserUpdate, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_owner_or_admin(me, user_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("role") is not None and not is_admin(me):
        raise HTTPException(status_code=403, detail="Only admins can change roles")
    return UserOut.of(user_service.update_user(db, user_id, changes, actor_id=me.id))


@router.delete("/users/{user_id}", status_code=204)
def delete_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(require_admin)):
    if user_id == me.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    user_service.delete_user(db, user_id, actor_id=me.id)
    return Response(status_code=204)
