"""
Database setup - creates tables, optionally resets them and seeds demo data

    python setup_database.py            # create missing tables
    python setup_database.py --seed     # ... and insert demo accounts
    python setup_database.py --reset --seed
"""
import argparse
from datetime import date, time

from sqlalchemy import inspect

from config import get_settings
from database.connection import engine, Base, SessionLocal
from database.models import User, Hospital, Pharmacy, Doctor, Medicine
from api.auth import hash_password

DEMO_PASSWORD = "demo12345"


def seed_demo_data(db, rounds: int) -> bool:
    """Insert a demo patient, hospital and pharmacy. Idempotent: skips if the demo hospital exists."""
    if db.query(Hospital).filter(Hospital.email == "city.hospital@example.com").first():
        print("⚠️ Demo data already present. Skipping seeding.")
        return False

    password_hash = hash_password(DEMO_PASSWORD, rounds=rounds)

    # ==================== USERS ====================
    print("   → Creating patient...")
    db.add(User(
        full_name="Rahul Kumar",
        email="rahul@example.com",
        password_hash=password_hash,
        phone="9876543210",
        city="Mumbai",
        state="Maharashtra",
        pincode="400001",
        date_of_birth=date(1996, 4, 12),
        gender="male",
    ))

    # ==================== HOSPITALS ====================
    print("   → Creating hospital and doctors...")
    hospital = Hospital(
        hospital_name="City Hospital",
        email="city.hospital@example.com",
        password_hash=password_hash,
        phone="02212345678",
        address="12 Marine Drive",
        city="Mumbai",
        state="Maharashtra",
        pincode="400002",
        registration_number="MH-HOSP-0001",
        hospital_type="private",
    )
    hospital.doctors = [
        Doctor(
            full_name="Dr. Anjali Mehta",
            specialization="Cardiology",
            qualification="MBBS, MD, DM (Cardiology)",
            experience_years=14,
            consultation_fee=800,
            available_days=["monday", "wednesday", "friday"],
            available_time_from=time(10, 0),
            available_time_to=time(14, 0),
            room_number="204",
        ),
        Doctor(
            full_name="Dr. Vikram Singh",
            specialization="Orthopedics",
            qualification="MBBS, MS (Ortho)",
            experience_years=9,
            consultation_fee=600,
            available_days=["tuesday", "thursday", "saturday"],
            available_time_from=time(9, 30),
            available_time_to=time(13, 30),
            room_number="118",
        ),
    ]
    db.add(hospital)

    # ==================== PHARMACIES ====================
    print("   → Creating pharmacy and medicines...")
    pharmacy = Pharmacy(
        pharmacy_name="HealthPlus Pharmacy",
        email="healthplus@example.com",
        password_hash=password_hash,
        phone="02287654321",
        address="5 Linking Road",
        city="Mumbai",
        state="Maharashtra",
        pincode="400050",
        license_number="MH-PH-2024-117",
        operating_hours="9:00-21:00",
    )
    pharmacy.medicines = [
        Medicine(
            medicine_name="Crocin Advance",
            generic_name="Paracetamol",
            manufacturer="GSK",
            category="Pain relief",
            dosage_form="tablet",
            strength="500mg",
            price=30.0,
            stock_quantity=200,
            expiry_date=date(2027, 12, 31),
        ),
        Medicine(
            medicine_name="Azithral 500",
            generic_name="Azithromycin",
            manufacturer="Alembic",
            category="Antibiotics",
            dosage_form="tablet",
            strength="500mg",
            price=120.0,
            stock_quantity=50,
            expiry_date=date(2027, 6, 30),
            requires_prescription=True,
        ),
    ]
    db.add(pharmacy)

    db.commit()
    return True


def setup_database(reset: bool = False, seed: bool = False) -> bool:
    print("🚀 Starting database setup...")
    print("=" * 60)

    if reset:
        print("\n🗑️ Dropping existing tables...")
        Base.metadata.drop_all(bind=engine)

    print("\n📦 Creating tables...")
    Base.metadata.create_all(bind=engine)
    tables = inspect(engine).get_table_names()
    print(f"✅ {len(tables)} tables ready")

    if not seed:
        return True

    print("\n🌱 Inserting demo data...")
    db = SessionLocal()
    try:
        if seed_demo_data(db, rounds=get_settings().bcrypt_rounds):
            print(f"✅ Demo data inserted (password for every account: {DEMO_PASSWORD})")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create MediConnect tables and demo data")
    parser.add_argument("--reset", action="store_true", help="drop all tables first")
    parser.add_argument("--seed", action="store_true", help="insert demo accounts")
    args = parser.parse_args(argv)
    setup_database(reset=args.reset, seed=args.seed)


if __name__ == "__main__":
    main()
