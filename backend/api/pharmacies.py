from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Optional
from datetime import date

from config import Settings, get_settings
from database.connection import get_db
from database.models import Role
from database.repositories import medicines
from . import accounts
from .auth import Principal, TokenService, get_token_service, require_role
from .users import Credentials, LoginRequest

router = APIRouter(prefix="/api/pharmacies", tags=["Pharmacies"])

pharmacy_only = require_role(Role.PHARMACY)

#============================== Pharmacy Models ========================#

class PharmacyRegisterRequest(Credentials):
    pharmacy_name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr = Field(..., description="official email of the pharmacy")
    phone: Optional[str] = Field(None, max_length=15)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=10)
    license_number: Optional[str] = Field(None, max_length=100)
    operating_hours: Optional[str] = Field(None, max_length=200, description="e.g. 9:00-21:00")


class AddMedicineRequest(BaseModel):
    """Model for adding a new medicine"""
    medicine_name: str = Field(..., min_length=2, max_length=200)
    generic_name: Optional[str] = Field(None, max_length=200)
    manufacturer: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, description="Pain relief, Antibiotics, Vitamins, etc.", max_length=50)
    dosage_form: Optional[str] = Field(None, description="tablet, syrup, injection, etc.", max_length=50)
    strength: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None

    price: float = Field(..., ge=0.0)
    stock_quantity: int = Field(0, ge=0)
    expiry_date: Optional[date] = None
    requires_prescription: bool = False
    is_available: bool = True


class UpdateMedicineRequest(BaseModel):
    """Model for updating an existing medicine"""
    model_config = ConfigDict(extra="forbid")

    medicine_name: Optional[str] = Field(None, min_length=2, max_length=200)
    generic_name: Optional[str] = Field(None, max_length=200)
    manufacturer: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    dosage_form: Optional[str] = Field(None, max_length=50)
    strength: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None

    price: Optional[float] = Field(None, ge=0.0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    expiry_date: Optional[date] = None
    requires_prescription: Optional[bool] = None
    is_available: Optional[bool] = None

# ==================== AUTH ENDPOINTS ====================

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=dict)
def register_pharmacy(
    request: PharmacyRegisterRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
):
    profile = request.model_dump(exclude={"password"})
    data = accounts.register(
        db, accounts.PHARMACY_ACCOUNT, profile, request.password, tokens, rounds=settings.bcrypt_rounds
    )
    return {"success": True, "message": "Pharmacy registered successfully", "data": data}


@router.post("/login", response_model=dict)
def pharmacy_login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """
    🔐 PHARMACY LOGIN

    Returns JWT token for pharmacy authentication
    """
    data = accounts.login(db, accounts.PHARMACY_ACCOUNT, request.email, request.password, tokens)
    return {"success": True, "message": "Login successful", "data": data}

# ==================== INVENTORY ====================

@router.post("/medicines", status_code=status.HTTP_201_CREATED, response_model=dict)
def add_medicine(
    request: AddMedicineRequest,
    principal: Principal = Depends(pharmacy_only),
    db: Session = Depends(get_db),
):
    medicine = medicines.create(db, principal.subject_id, request.model_dump())
    return {"success": True, "message": "Medicine added successfully", "data": medicine.as_dict()}


@router.get("/medicines", response_model=dict)
def list_medicines(
    principal: Principal = Depends(pharmacy_only),
    db: Session = Depends(get_db),
):
    rows = [medicine.as_dict() for medicine in medicines.list_by_owner(db, principal.subject_id)]
    return {"success": True, "count": len(rows), "data": rows}


@router.put("/medicines/{medicine_id}", response_model=dict)
def update_medicine(
    medicine_id: int,
    request: UpdateMedicineRequest,
    principal: Principal = Depends(pharmacy_only),
    db: Session = Depends(get_db),
):
    """
    ✏️ UPDATE MEDICINE (stock, price, availability ...)
    """
    medicine = medicines.update(db, principal.subject_id, medicine_id, request.model_dump(exclude_unset=True))
    return {"success": True, "message": "Medicine updated successfully", "data": medicine.as_dict()}


@router.delete("/medicines/{medicine_id}", response_model=dict)
def delete_medicine(
    medicine_id: int,
    principal: Principal = Depends(pharmacy_only),
    db: Session = Depends(get_db),
):
    """
    🗑️ DELETE MEDICINE
    """
    medicines.delete(db, principal.subject_id, medicine_id)
    return {"success": True, "message": "Medicine deleted successfully"}
