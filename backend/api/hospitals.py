from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import List, Optional
from datetime import time

from config import Settings, get_settings
from database.connection import get_db
from database.models import Role
from database.repositories import doctors
from . import accounts
from .auth import Principal, TokenService, get_token_service, require_role
from .users import Credentials, LoginRequest

router = APIRouter(prefix="/api/hospitals", tags=["Hospitals"])

hospital_only = require_role(Role.HOSPITAL)

# ==================== PYDANTIC MODELS ====================

class HospitalRegisterRequest(Credentials):
    hospital_name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr = Field(..., description="official email of the hospital")
    phone: Optional[str] = Field(None, max_length=15)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=10)
    registration_number: Optional[str] = Field(None, max_length=100)
    hospital_type: Optional[str] = Field(None, max_length=50)


class AddDoctorRequest(BaseModel):
    """Doctor on the hospital's roster"""
    full_name: str = Field(..., min_length=2, max_length=100)
    specialization: str = Field(..., min_length=2, max_length=100)
    qualification: Optional[str] = Field(None, max_length=200)
    experience_years: Optional[int] = Field(None, ge=0, le=70)
    phone: Optional[str] = Field(None, max_length=15)
    email: Optional[EmailStr] = None
    consultation_fee: Optional[float] = Field(None, ge=0)

    # Working hours
    available_days: Optional[List[str]] = Field(None, description="['monday', 'tuesday', ...]")
    available_time_from: Optional[time] = None
    available_time_to: Optional[time] = None
    room_number: Optional[str] = Field(None, max_length=20)
    is_available: bool = True


class UpdateDoctorRequest(BaseModel):
    """Only the fields sent are changed"""
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    specialization: Optional[str] = Field(None, min_length=2, max_length=100)
    qualification: Optional[str] = Field(None, max_length=200)
    experience_years: Optional[int] = Field(None, ge=0, le=70)
    phone: Optional[str] = Field(None, max_length=15)
    email: Optional[EmailStr] = None
    consultation_fee: Optional[float] = Field(None, ge=0)
    available_days: Optional[List[str]] = None
    available_time_from: Optional[time] = None
    available_time_to: Optional[time] = None
    room_number: Optional[str] = Field(None, max_length=20)
    is_available: Optional[bool] = None

# ==================== AUTH ENDPOINTS ====================

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=dict)
def register_hospital(
    request: HospitalRegisterRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
):
    profile = request.model_dump(exclude={"password"})
    data = accounts.register(
        db, accounts.HOSPITAL_ACCOUNT, profile, request.password, tokens, rounds=settings.bcrypt_rounds
    )
    return {"success": True, "message": "Hospital registered successfully", "data": data}


@router.post("/login", response_model=dict)
def hospital_login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    data = accounts.login(db, accounts.HOSPITAL_ACCOUNT, request.email, request.password, tokens)
    return {"success": True, "message": "Login successful", "data": data}

# ==================== DOCTOR MANAGEMENT ====================

@router.post("/doctors", status_code=status.HTTP_201_CREATED, response_model=dict)
def add_doctor(
    request: AddDoctorRequest,
    principal: Principal = Depends(hospital_only),
    db: Session = Depends(get_db),
):
    doctor = doctors.create(db, principal.subject_id, request.model_dump())
    return {"success": True, "message": "Doctor added successfully", "data": doctor.as_dict()}


@router.get("/doctors", response_model=dict)
def list_doctors(
    principal: Principal = Depends(hospital_only),
    db: Session = Depends(get_db),
):
    rows = [doctor.as_dict() for doctor in doctors.list_by_owner(db, principal.subject_id)]
    return {"success": True, "count": len(rows), "data": rows}


@router.put("/doctors/{doctor_id}", response_model=dict)
def update_doctor(
    doctor_id: int,
    request: UpdateDoctorRequest,
    principal: Principal = Depends(hospital_only),
    db: Session = Depends(get_db),
):
    doctor = doctors.update(db, principal.subject_id, doctor_id, request.model_dump(exclude_unset=True))
    return {"success": True, "message": "Doctor updated successfully", "data": doctor.as_dict()}


@router.delete("/doctors/{doctor_id}", response_model=dict)
def delete_doctor(
    doctor_id: int,
    principal: Principal = Depends(hospital_only),
    db: Session = Depends(get_db),
):
    doctors.delete(db, principal.subject_id, doctor_id)
    return {"success": True, "message": "Doctor deleted successfully"}
