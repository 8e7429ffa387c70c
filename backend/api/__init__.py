# API Package - Centralized imports
# Allows easy importing of all routers and the auth helpers

from .auth import (
    Principal,
    TokenService,
    InvalidToken,
    get_token_service,
    require_role,
)
from .users import router as users_router
from .hospitals import router as hospitals_router
from .pharmacies import router as pharmacies_router

__all__ = [
    # Auth
    "Principal",
    "TokenService",
    "InvalidToken",
    "get_token_service",
    "require_role",

    # Routers
    "users_router",
    "hospitals_router",
    "pharmacies_router",
]
