# fintech_index/models/user.py
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from fintech_index.db import Base


class Role(str, enum.Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"


# Roles que se pueden elegir al registrarse desde la app
SELF_SERVICE_ROLES = (Role.EDITOR, Role.VIEWER)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(20), nullable=False, default=Role.VIEWER.value)   # admin, editor, viewer
    is_verified = Column(Boolean, nullable=False, default=False)           # lo activa un admin
    created_at = Column(DateTime, default=datetime.utcnow)
