"""
Registration and login, shared by the three account types.

Each role has its own table; an email is unique inside a table only, so the
same address may hold a user, a hospital and a pharmacy account at once.
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Type
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import Role, User, Hospital, Pharmacy
from database.repositories import create_account, find_by_email
from exceptions import Conflict, InvalidCredentials, ServerError
from .auth import TokenService, hash_password, verify_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountType:
    role: Role
    model: Type
    name_field: str
    label: str

    def public_fields(self, account) -> Dict[str, Any]:
        """The only account fields ever returned to clients"""
        return {
            "id": account.id,
            self.name_field: getattr(account, self.name_field),
            "email": account.email,
        }


USER_ACCOUNT = AccountType(Role.USER, User, "full_name", "User")
HOSPITAL_ACCOUNT = AccountType(Role.HOSPITAL, Hospital, "hospital_name", "Hospital")
PHARMACY_ACCOUNT = AccountType(Role.PHARMACY, Pharmacy, "pharmacy_name", "Pharmacy")


def register(
    db: Session,
    account_type: AccountType,
    profile: Mapping[str, Any],
    password: str,
    tokens: TokenService,
    rounds: int = 10,
) -> Dict[str, Any]:
    """
    Create the account and sign the caller in. Raises Conflict on a taken
    email; any other constraint failure is a ServerError.
    """
    conflict = Conflict(f"{account_type.label} already exists")

    if find_by_email(db, account_type.model, profile["email"]) is not None:
        logger.info("Duplicate %s registration for %s", account_type.role.value, profile["email"])
        raise conflict

    fields = dict(profile)
    fields["password_hash"] = hash_password(password, rounds=rounds)

    try:
        account = create_account(db, account_type.model, fields)
    except IntegrityError as exc:
        # Only a row that now holds the email means a lost registration race
        if find_by_email(db, account_type.model, profile["email"]) is not None:
            logger.info("Duplicate %s registration for %s", account_type.role.value, profile["email"])
            raise conflict from exc
        logger.error("Could not store %s account: %s", account_type.role.value, exc.orig)
        raise ServerError(detail=str(exc.orig)) from exc

    logger.info("Registered %s %s", account_type.role.value, account.id)
    return {
        account_type.role.value: account_type.public_fields(account),
        "token": tokens.issue(account.id, account_type.role),
    }


def login(
    db: Session,
    account_type: AccountType,
    email: str,
    password: str,
    tokens: TokenService,
) -> Dict[str, Any]:
    """Unknown email and wrong password fail the same way."""
    account = find_by_email(db, account_type.model, email)
    if account is None or not verify_password(password, account.password_hash):
        logger.info("Failed %s login", account_type.role.value)
        raise InvalidCredentials()

    logger.info("%s %s logged in", account_type.label, account.id)
    return {
        account_type.role.value: account_type.public_fields(account),
        "token": tokens.issue(account.id, account_type.role),
    }
