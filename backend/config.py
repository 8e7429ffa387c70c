"""
MediConnect - runtime configuration

Everything is read once from the environment (a local .env is read too)
and frozen. Services get the values they need handed to them.
"""
import re
from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Optional, Tuple
from urllib.parse import quote_plus

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: str) -> timedelta:
    """Parse '7d', '12h', '30m', '45s' or a bare number of seconds."""
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})


def build_database_url(
    user: str, password: str, host: str, port: str, name: str
) -> str:
    # URL ENCODE PASSWORD
    encoded_pass = quote_plus(password)
    return f"postgresql://{user}:{encoded_pass}@{host}:{port}/{name}"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    # Field names match the upper-case environment variables
    port: int = Field(default=5000)

    # Database: DATABASE_URL wins over the DB_* parts
    database_url: Optional[str] = Field(default=None)
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="")
    db_host: str = Field(default="localhost")
    db_port: str = Field(default="5432")
    db_name: str = Field(default="mediconnect")

    # Auth
    jwt_secret: str = Field(default="")
    jwt_expire: timedelta = Field(default=timedelta(days=7))
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
    )
    cors_origins: Annotated[Tuple[str, ...], NoDecode] = Field(default=("*",))
    log_level: str = Field(default="INFO")

    @field_validator("jwt_expire", mode="before")
    @classmethod
    def _parse_jwt_expire(cls, value):
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            value = [origin.strip() for origin in value.split(",") if origin.strip()]
        return tuple(value) or ("*",)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return build_database_url(
            user=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            name=self.db_name,
        )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
