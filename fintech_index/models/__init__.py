# fintech_index/models/__init__.py

# 👤 Usuarios y roles
from .user import User, Role, SELF_SERVICE_ROLES

# 🌍 Índice por país y año
from .country_data import CountryData

# 🚀 Directorio de startups
from .startup import Startup


__all__ = [
    # Users
    "User",
    "Role",
    "SELF_SERVICE_ROLES",

    # Country data
    "CountryData",

    # Startups
    "Startup",
]
