"""
MediConnect Platform - Database Models
Patients (users), hospitals with their doctors, pharmacies with their medicines
"""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Boolean, Float, Time, Date, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from .connection import Base
import enum


# ============================================
# ENUMS
# ============================================

class Role(str, enum.Enum):
    USER = "user"
    HOSPITAL = "hospital"
    PHARMACY = "pharmacy"


class SerializerMixin:
    """Column values as a plain dict; the password hash never leaves the model."""

    hidden_fields = ("password_hash",)

    def as_dict(self) -> dict:
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in self.hidden_fields
        }


# ============================================
# ACCOUNTS
# ============================================

class User(SerializerMixin, Base):
    """Patient account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    phone = Column(String(15))
    address = Column(Text)
    city = Column(String(100))
    state = Column(String(100))
    pincode = Column(String(10))
    date_of_birth = Column(Date)
    gender = Column(String(10))

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Hospital(SerializerMixin, Base):
    __tablename__ = "hospitals"

    id = Column(Integer, primary_key=True, index=True)
    hospital_name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    phone = Column(String(15))
    address = Column(Text)
    city = Column(String(100))
    state = Column(String(100))
    pincode = Column(String(10))
    registration_number = Column(String(100))
    hospital_type = Column(String(50))  # government | private | trust ...
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    doctors = relationship("Doctor", back_populates="hospital", cascade="all, delete-orphan")


class Pharmacy(SerializerMixin, Base):
    __tablename__ = "pharmacies"

    id = Column(Integer, primary_key=True, index=True)
    pharmacy_name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    phone = Column(String(15))
    address = Column(Text)
    city = Column(String(100))
    state = Column(String(100))
    pincode = Column(String(10))
    license_number = Column(String(100))
    operating_hours = Column(String(200))  # "9:00-21:00"
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    medicines = relationship("Medicine", back_populates="pharmacy", cascade="all, delete-orphan")


# ============================================
# OWNED RESOURCES
# ============================================

class Doctor(SerializerMixin, Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    hospital_id = Column(Integer, ForeignKey("hospitals.id", ondelete="CASCADE"), index=True, nullable=False)

    full_name = Column(String(100), nullable=False)
    specialization = Column(String(100), nullable=False)
    qualification = Column(String(200))
    experience_years = Column(Integer, default=0)
    phone = Column(String(15))
    email = Column(String(255))
    consultation_fee = Column(Float)

    available_days = Column(JSON)  # ["monday", "tuesday", ...]
    available_time_from = Column(Time)
    available_time_to = Column(Time)
    room_number = Column(String(20))
    is_available = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    hospital = relationship("Hospital", back_populates="doctors")


class Medicine(SerializerMixin, Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id", ondelete="CASCADE"), index=True, nullable=False)

    medicine_name = Column(String(200), nullable=False)
    generic_name = Column(String(200))
    manufacturer = Column(String(100))
    category = Column(String(50))  # tablet, syrup, injection, etc.
    dosage_form = Column(String(50))
    strength = Column(String(50))
    description = Column(Text)

    price = Column(Float, nullable=False, default=0.0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    expiry_date = Column(Date)
    requires_prescription = Column(Boolean, default=False, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    pharmacy = relationship("Pharmacy", back_populates="medicines")
