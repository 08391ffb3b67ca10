"""
Database connection domain model.

This module defines the DbConfig domain entity describing one Postgres
server/database pair that the refresh workflow talks to.
"""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class DbConfig(BaseModel):
    """
    Domain model for a Postgres connection.

    The password is held as a SecretStr so it never shows up in reprs or logs.
    """

    model_config = ConfigDict(extra="ignore")

    host: str = Field(..., description="Database host name or IP")
    port: str = Field("5432", description="Database port")
    database: str = Field(..., description="Database name")
    username: str = Field(..., description="Login role")
    password: SecretStr = Field(SecretStr(""), description="Login password")

    @field_validator("host", "database", "username")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank connection fields."""
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()

    @field_validator("port", mode="before")
    @classmethod
    def validate_port(cls, v: Union[str, int]) -> str:
        """Accept ints or numeric strings, normalised to a string."""
        text = str(v).strip()
        if not text.isdigit() or not 1 <= int(text) <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return text

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, v):
        """YAML reads unquoted numeric passwords as numbers; keep them as text."""
        if v is None:
            return ""
        if isinstance(v, (int, float)):
            return str(v)
        return v

    def get_password(self) -> str:
        """Get the plain text password."""
        return self.password.get_secret_value()  # pylint: disable=no-member

    def summary(self) -> dict:
        """Log-safe view of the connection."""
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "username": self.username,
        }
