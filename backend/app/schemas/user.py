"""
Kavin's Catalog Backend — User & Auth Schemas
===============================================

What:  Pydantic models for users, roles and the login/session contract.
Who:   Used by AuthService, UserService and the auth/users routes.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator


class UserRole(str, Enum):
    """
    Commercial role of an account.

    ADMIN:          manages products and users, sees every price
    REPRESENTANTE:  sales representative, sees the representative price
    SACOLEIRA:      reseller, sees the sacoleira price
    GUEST:          signed in without a profile, sees no prices
    """
    ADMIN = "ADMIN"
    REPRESENTANTE = "REPRESENTANTE"
    SACOLEIRA = "SACOLEIRA"
    GUEST = "GUEST"

    @classmethod
    def from_stored(cls, value: str) -> "UserRole":
        """Role of a `profiles` row; a value outside the enum reads as GUEST."""
        try:
            return cls(value)
        except ValueError:
            return cls.GUEST


class User(BaseModel):
    """Public view of an account. Passwords never leave the server."""
    id: str
    name: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class SeedUser(User):
    """Built-in account used for offline mode only."""
    password: str


class SessionUser(User):
    """The user attached to the current request."""
    offline: bool = Field(default=False, description="True when signed in through offline mode (view only)")


# ══════════════════════════════════════════════════════════════════════════
# Auth
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    allow_offline: bool = Field(
        default=False,
        description=(
            "Set after the user agreed to enter offline mode "
            "(the previous attempt answered 409 with offline_available)."
        ),
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip()


class LoginResponse(BaseModel):
    user: User
    access_token: str = Field(description="Bearer token for subsequent requests")
    offline: bool = Field(default=False, description="Offline sessions are view only")


# ══════════════════════════════════════════════════════════════════════════
# User management
# ══════════════════════════════════════════════════════════════════════════


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=255)
    role: UserRole = Field(default=UserRole.REPRESENTANTE)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class UserListResponse(BaseModel):
    users: List[User]
    offline: bool = False


class MessageResponse(BaseModel):
    message: str
