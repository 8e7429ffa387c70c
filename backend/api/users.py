from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional
from datetime import date

from config import Settings, get_settings
from database.connection import get_db
from database.models import Role
from database import repositories
from . import accounts
from .auth import MAX_PASSWORD_BYTES, Principal, TokenService, get_token_service, require_role

router = APIRouter(prefix="/api/users", tags=["Users"])

# ==================== PYDANTIC MODELS ====================

class Credentials(BaseModel):
    """Email and password; base of every register and login body"""
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        # the limit counts UTF-8 bytes, not characters
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(Credentials):
    pass


class UserRegisterRequest(Credentials):
    full_name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=15)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=10)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=10)

# ==================== API ENDPOINTS ====================

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=dict)
def register_user(
    request: UserRegisterRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
):
    profile = request.model_dump(exclude={"password"})
    data = accounts.register(
        db, accounts.USER_ACCOUNT, profile, request.password, tokens, rounds=settings.bcrypt_rounds
    )
    return {"success": True, "message": "User registered successfully", "data": data}


@router.post("/login", response_model=dict)
def login_user(
    request: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    data = accounts.login(db, accounts.USER_ACCOUNT, request.email, request.password, tokens)
    return {"success": True, "message": "Login successful", "data": data}


@router.get("/search/doctors", response_model=dict)
def search_doctors(
    specialization: Optional[str] = Query(None, description="e.g. cardio"),
    city: Optional[str] = Query(None),
    hospital_name: Optional[str] = Query(None),
    principal: Principal = Depends(require_role(Role.USER)),
    db: Session = Depends(get_db),
):
    """
    🔍 Find available doctors at active hospitals.
    Filters are case-insensitive substring matches, combined with AND.
    """
    rows = repositories.search_doctors(
        db, specialization=specialization, city=city, hospital_name=hospital_name
    )
    return {"success": True, "count": len(rows), "data": rows}


@router.get("/search/medicines", response_model=dict)
def search_medicines(
    medicine_name: Optional[str] = Query(None, description="Brand or generic name"),
    city: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    principal: Principal = Depends(require_role(Role.USER)),
    db: Session = Depends(get_db),
):
    """
    💊 Find in-stock medicines at active pharmacies.
    """
    rows = repositories.search_medicines(
        db, medicine_name=medicine_name, city=city, category=category
    )
    return {"success": True, "count": len(rows), "data": rows}
