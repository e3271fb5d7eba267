# fintech_index/routers/users.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from fintech_index.db import get_db
from fintech_index.mailer import send_verification_notice
from fintech_index.models.user import Role, User
from fintech_index.schemas import UserMessageOut, UserOut, UserUpdate
from fintech_index.security import TokenClaims, get_current_user, require_role

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Usuarios"])

admin_only = require_role(Role.ADMIN)


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=list[UserOut])
def list_users(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


@router.get("/unverified", response_model=list[UserOut])
def list_unverified(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    return (
        db.query(User)
        .filter(User.is_verified.is_(False))
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


# Antes de /{user_id} para que "me" no se interprete como id
@router.get("/me", response_model=UserOut)
def get_me(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return _get_user_or_404(db, current_user.id)


@router.patch("/{user_id}/verify", response_model=UserMessageOut)
def verify_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    user = _get_user_or_404(db, user_id)
    user.is_verified = True
    db.commit()
    db.refresh(user)
    log.info("%s verified %s", current_user.email, user.email)

    send_verification_notice(user.email)
    return {"message": "User verified", "user": UserOut.model_validate(user)}


@router.patch("/{user_id}", response_model=UserMessageOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    user = _get_user_or_404(db, user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        user.name = changes["name"].strip()
    if "role" in changes:
        user.role = Role(changes["role"]).value
    if "is_verified" in changes:
        user.is_verified = changes["is_verified"]
    db.commit()
    db.refresh(user)
    return {"message": "User updated", "user": UserOut.model_validate(user)}


@router.delete("/{user_id}", response_model=UserMessageOut)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(admin_only),
):
    user = _get_user_or_404(db, user_id)
    deleted = UserOut.model_validate(user)
    db.delete(user)
    db.commit()
    log.info("%s deleted user %s", current_user.email, deleted.email)
    return {"message": "User deleted", "user": deleted}
