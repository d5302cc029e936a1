"""Pydantic API response models used in OpenAPI contracts."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response payload."""

    status: Literal["ok"]


class MessageResponse(BaseModel):
    """Plain acknowledgement payload."""

    message: str


class UserProfileResponse(BaseModel):
    """Public view of a user record; never includes credentials."""

    id: str
    name: str
    email: str
    cart: list[str] = Field(default_factory=list)
    wishlist: list[str] = Field(default_factory=list)
    address: str | None = None
    phone: str | None = None
    pincode: str | None = None
    city: str | None = None
    state: str | None = None


class LoginResponse(BaseModel):
    """Login payload; the refresh token travels only in the cookie."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Logged in successfully"
    access_token: str = Field(alias="accessToken")
    user: UserProfileResponse


class RefreshResponse(BaseModel):
    """Refresh payload with the newly minted access token only."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")


class ProductResponse(BaseModel):
    """Catalog product payload."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    image: str
    name: str
    category: str
    brand: str
    description: str
    year_added: int = Field(alias="yearAdded")
    rating: float
    original_price: float = Field(alias="originalPrice")
    discount_percentage: float = Field(alias="discountPercentage")


class ShoppingListResponse(BaseModel):
    """Product ids currently held in a cart or wishlist."""

    items: list[str]
