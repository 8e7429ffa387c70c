"""
Data access for accounts, search and owner-scoped resources.

Every operation runs inside ``db_errors``: a SQLAlchemy failure rolls the
session back, is logged with its stack trace and surfaces as ServerError.
"""
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Type
import logging

from sqlalchemy import and_, delete, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from exceptions import BadRequest, NotFound, ServerError
from .models import Doctor, Hospital, Medicine, Pharmacy
from .patch import build_patch, check_fields, EmptyPatch, PatchError

logger = logging.getLogger(__name__)


@contextmanager
def db_errors(db: Session, action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while %s", action)
        raise ServerError(detail=str(exc)) from exc


def _like(value: str) -> str:
    return f"%{value}%"

# ==================== ACCOUNTS ====================

def find_by_email(db: Session, model: Type, email: str):
    with db_errors(db, f"looking up {model.__tablename__} by email"):
        return db.query(model).filter(model.email == email).first()


def create_account(db: Session, model: Type, fields: Mapping[str, Any]):
    """Insert an account row. IntegrityError is left to the caller (duplicate email)."""
    account = model(**fields)
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while creating %s", model.__tablename__)
        raise ServerError(detail=str(exc)) from exc
    db.refresh(account)
    return account

# ==================== SEARCH ====================

def search_doctors(
    db: Session,
    specialization: Optional[str] = None,
    city: Optional[str] = None,
    hospital_name: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Available doctors of active hospitals; every given filter is a case-insensitive substring match."""
    with db_errors(db, "searching doctors"):
        query = (
            db.query(Doctor, Hospital)
            .join(Hospital, Doctor.hospital_id == Hospital.id)
            .filter(Doctor.is_available.is_(True), Hospital.is_active.is_(True))
        )
        if specialization:
            query = query.filter(Doctor.specialization.ilike(_like(specialization)))
        if city:
            query = query.filter(Hospital.city.ilike(_like(city)))
        if hospital_name:
            query = query.filter(Hospital.hospital_name.ilike(_like(hospital_name)))

        rows = query.order_by(Doctor.full_name, Doctor.id).all()

    return [
        {
            **doctor.as_dict(),
            "hospital_name": hospital.hospital_name,
            "address": hospital.address,
            "city": hospital.city,
            "hospital_phone": hospital.phone,
        }
        for doctor, hospital in rows
    ]


def search_medicines(
    db: Session,
    medicine_name: Optional[str] = None,
    city: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """In-stock, available medicines of active pharmacies. The name filter also matches the generic name."""
    with db_errors(db, "searching medicines"):
        query = (
            db.query(Medicine, Pharmacy)
            .join(Pharmacy, Medicine.pharmacy_id == Pharmacy.id)
            .filter(
                Medicine.is_available.is_(True),
                Medicine.stock_quantity > 0,
                Pharmacy.is_active.is_(True),
            )
        )
        if medicine_name:
            pattern = _like(medicine_name)
            query = query.filter(
                or_(Medicine.medicine_name.ilike(pattern), Medicine.generic_name.ilike(pattern))
            )
        if city:
            query = query.filter(Pharmacy.city.ilike(_like(city)))
        if category:
            query = query.filter(Medicine.category.ilike(_like(category)))

        rows = query.order_by(Medicine.medicine_name, Medicine.id).all()

    return [
        {
            **medicine.as_dict(),
            "pharmacy_name": pharmacy.pharmacy_name,
            "address": pharmacy.address,
            "city": pharmacy.city,
            "pharmacy_phone": pharmacy.phone,
        }
        for medicine, pharmacy in rows
    ]

# ==================== OWNED RESOURCES ====================

class OwnedRepository:
    """
    CRUD for rows that belong to exactly one owner (doctors of a hospital,
    medicines of a pharmacy).

    A row of another owner is indistinguishable from a missing row: every
    lookup, update and delete is keyed on (id, owner id) and a miss is
    reported as NotFound.
    """

    def __init__(self, model: Type, owner_field: str, order_field: str, label: str):
        self.model = model
        self.owner_field = owner_field
        self.order_field = order_field
        self.label = label
        protected = {"id", owner_field, "created_at", "updated_at"}
        self.mutable_fields = frozenset(
            column.name for column in model.__table__.columns if column.name not in protected
        )

    def _not_found(self) -> NotFound:
        return NotFound(f"{self.label} not found")

    def _owned(self, db: Session, owner_id: int, entity_id: int):
        return db.query(self.model).filter(
            and_(
                self.model.id == entity_id,
                getattr(self.model, self.owner_field) == owner_id,
            )
        )

    def create(self, db: Session, owner_id: int, fields: Mapping[str, Any]):
        try:
            check_fields(fields, self.mutable_fields)
        except PatchError as exc:
            raise BadRequest(str(exc)) from exc

        row = self.model(**dict(fields), **{self.owner_field: owner_id})
        with db_errors(db, f"creating {self.label.lower()}"):
            db.add(row)
            db.commit()
            db.refresh(row)
        return row

    def list_by_owner(self, db: Session, owner_id: int) -> list:
        with db_errors(db, f"listing {self.label.lower()}s"):
            return (
                db.query(self.model)
                .filter(getattr(self.model, self.owner_field) == owner_id)
                .order_by(getattr(self.model, self.order_field), self.model.id)
                .all()
            )

    def update(self, db: Session, owner_id: int, entity_id: int, changes: Mapping[str, Any]):
        """
        Ownership check and UPDATE share one transaction; the row is locked
        by the check so it cannot be deleted in between.
        """
        try:
            check_fields(changes, self.mutable_fields)
        except PatchError as exc:
            raise BadRequest(str(exc)) from exc

        with db_errors(db, f"updating {self.label.lower()}"):
            row = self._owned(db, owner_id, entity_id).with_for_update().first()
            if row is None:
                db.rollback()
                raise self._not_found()

            try:
                statement = build_patch(
                    self.model.__table__,
                    changes,
                    self.mutable_fields,
                    key_column="id",
                    entity_id=entity_id,
                    owner_column=self.owner_field,
                    owner_id=owner_id,
                )
            except EmptyPatch:
                db.rollback()
                return row

            try:
                db.execute(statement)
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                logger.info("Rejected %s update: %s", self.label.lower(), exc.orig)
                raise BadRequest("Update violates a data constraint") from exc

            db.refresh(row)
        return row

    def delete(self, db: Session, owner_id: int, entity_id: int) -> None:
        table = self.model.__table__
        with db_errors(db, f"deleting {self.label.lower()}"):
            result = db.execute(
                delete(table).where(
                    and_(table.c.id == entity_id, table.c[self.owner_field] == owner_id)
                )
            )
            if result.rowcount == 0:
                db.rollback()
                raise self._not_found()
            db.commit()


doctors = OwnedRepository(Doctor, owner_field="hospital_id", order_field="full_name", label="Doctor")
medicines = OwnedRepository(Medicine, owner_field="pharmacy_id", order_field="medicine_name", label="Medicine")
