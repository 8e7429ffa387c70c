from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
import logging

import bcrypt
import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config import get_settings
from database.models import Role
from exceptions import Unauthenticated, Forbidden

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches the guard and gets our envelope
security = HTTPBearer(auto_error=False)

# ==================== CONFIG ====================

ALGORITHM = "HS256"

# bcrypt refuses passwords longer than this many bytes
MAX_PASSWORD_BYTES = 72

# ==================== PASSWORDS ====================

def hash_password(password: str, rounds: int = 10) -> str:
    """Salted bcrypt hash, stored instead of the password"""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify password against hash"""
    try:
        return bcrypt.checkpw(plain_password.encode(), password_hash.encode())
    except ValueError:
        # malformed stored hash
        return False

# ==================== TOKENS ====================

class InvalidToken(Exception):
    pass


@dataclass(frozen=True)
class Principal:
    """Identity proven by a verified token"""
    subject_id: int
    role: Role


class TokenService:
    """Issues and verifies signed, time-limited identity tokens."""

    def __init__(self, secret: str, expires_in: timedelta = timedelta(days=7), algorithm: str = ALGORITHM):
        if not secret:
            raise ValueError("JWT secret is not configured")
        self._secret = secret
        self.expires_in = expires_in
        self.algorithm = algorithm

    def issue(self, subject_id: int, role: Role) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "id": subject_id,
            "role": Role(role).value,
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        """Signature and expiry only; no issuer or audience checks."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidToken("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidToken("Invalid token") from exc

        subject_id = payload.get("id")
        if not isinstance(subject_id, int) or isinstance(subject_id, bool):
            raise InvalidToken("Invalid token payload")
        try:
            role = Role(payload.get("role"))
        except ValueError as exc:
            raise InvalidToken("Invalid token payload") from exc

        return Principal(subject_id=subject_id, role=role)


@lru_cache()
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(settings.jwt_secret, settings.jwt_expire)

# ==================== DEPENDENCY: Access Guard ====================

def require_role(role: Optional[Role] = None):
    """
    Build a dependency that only lets a request through with a valid
    bearer token, and, if ``role`` is given, only for that role.

    Use this in protected routes:
        principal: Principal = Depends(require_role(Role.HOSPITAL))
    """

    async def guard(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        tokens: TokenService = Depends(get_token_service),
    ) -> Principal:
        if credentials is None:
            raise Unauthenticated()

        try:
            principal = tokens.verify(credentials.credentials)
        except InvalidToken as exc:
            logger.info("Rejected token on %s: %s", request.url.path, exc)
            raise Unauthenticated("Invalid token.") from exc

        if role is not None and principal.role != role:
            logger.warning(
                "Role %s denied on %s (requires %s)",
                principal.role.value, request.url.path, role.value,
            )
            raise Forbidden()

        request.state.principal = principal
        return principal

    return guard
