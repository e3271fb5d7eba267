# fintech_index/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fintech_index.db import get_db
from fintech_index.models.user import Role, SELF_SERVICE_ROLES, User
from fintech_index.schemas import LoginIn, MessageOut, RegisterIn, TokenOut, UserOut
from fintech_index.security import (
    TokenClaims,
    authenticate,
    create_access_token,
    get_current_user,
    get_user_by_email,
    hash_password,
    normalize_email,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# -----------------------------
#   REGISTRO
# -----------------------------
@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    role = (payload.role or "").strip().lower()
    if role == Role.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot register as admin via the app")
    if role not in {r.value for r in SELF_SERVICE_ROLES}:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")

    email = normalize_email(payload.email)
    if get_user_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")

    user = User(
        email=email,
        name=payload.name.strip(),
        password_hash=hash_password(payload.password),
        role=role,
        is_verified=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # otro registro con el mismo email entró entre la consulta y el commit
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")

    log.info("Registered %s as %s, awaiting verification", email, role)
    return {"message": "User registered. Awaiting admin verification."}


# -----------------------------
#   LOGIN
# -----------------------------
@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    return TokenOut(token=create_access_token(user), user=UserOut.model_validate(user))


# -----------------------------
#   USUARIO ACTUAL
# -----------------------------
@router.get("/me", response_model=UserOut)
def me(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    user = db.get(User, current_user.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
