"""Public API response contracts."""

from storefront.api.contracts.models import (
    ApiErrorResponse,
    HealthResponse,
    LoginResponse,
    MessageResponse,
    ProductResponse,
    RefreshResponse,
    ShoppingListResponse,
    UserProfileResponse,
)

__all__ = [
    "ApiErrorResponse",
    "HealthResponse",
    "LoginResponse",
    "MessageResponse",
    "ProductResponse",
    "RefreshResponse",
    "ShoppingListResponse",
    "UserProfileResponse",
]
