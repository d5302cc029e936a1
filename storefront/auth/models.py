"""Pydantic models for authentication domain."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_email(value: str) -> str:
    return value.strip().lower()


class User(BaseModel):
    """Persisted user record."""

    user_id: str
    name: str
    email: str
    password_hash: str
    refresh_token_hash: str | None = None
    cart: list[str] = Field(default_factory=list)
    wishlist: list[str] = Field(default_factory=list)
    address: str | None = None
    phone: str | None = None
    pincode: str | None = None
    city: str | None = None
    state: str | None = None

    def public_profile(self) -> dict[str, object]:
        """Profile fields that are safe to return to the client."""
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "cart": list(self.cart),
            "wishlist": list(self.wishlist),
            "address": self.address,
            "phone": self.phone,
            "pincode": self.pincode,
            "city": self.city,
            "state": self.state,
        }


class SignupRequest(BaseModel):
    """Signup request payload."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("must be an email address")
        return normalize_email(value)


class LoginRequest(BaseModel):
    """Login request payload."""

    email: str
    password: str


class ContactDetails(BaseModel):
    """Contact update payload; every field is mandatory and non-blank."""

    model_config = ConfigDict(str_strip_whitespace=True, coerce_numbers_to_str=True)

    address: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    pincode: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)


class TokenPair(BaseModel):
    """Freshly minted access/refresh token pair."""

    access_token: str
    refresh_token: str


class LoginResult(BaseModel):
    """Outcome of a successful login."""

    tokens: TokenPair
    user: User
