# Database Package - Centralized imports
# Allows easy importing of models, connection utilities, and ORM objects

from .connection import (
    engine,
    Base,
    SessionLocal,
    get_db,
)

from .models import (
    Role,

    # Accounts
    User,
    Hospital,
    Pharmacy,

    # Owned resources
    Doctor,
    Medicine,
)

__all__ = [
    # Connection
    "engine",
    "Base",
    "SessionLocal",
    "get_db",

    "Role",

    # Accounts
    "User",
    "Hospital",
    "Pharmacy",

    # Owned resources
    "Doctor",
    "Medicine",
]
