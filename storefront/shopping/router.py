"""FastAPI routers for cart and wishlist endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

from storefront.api.contracts import ApiErrorResponse, ShoppingListResponse
from storefront.auth.middleware import current_user_id
from storefront.shopping.service import ShoppingListService

_ERRORS = {401: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}}


def create_shopping_list_router(
    service: ShoppingListService, list_name: str
) -> APIRouter:
    """Build GET/POST/DELETE routes for one list, mounted at ``/{list_name}``."""
    router = APIRouter(prefix=f"/{list_name}", tags=[list_name])

    @router.get("", response_model=ShoppingListResponse, responses=_ERRORS)
    def list_items(request: Request) -> ShoppingListResponse:
        return ShoppingListResponse(
            items=service.items(current_user_id(request), list_name)
        )

    @router.post("/{product_id}", response_model=ShoppingListResponse, responses=_ERRORS)
    def add_item(product_id: str, request: Request) -> ShoppingListResponse:
        return ShoppingListResponse(
            items=service.add(current_user_id(request), list_name, product_id)
        )

    @router.delete(
        "/{product_id}", response_model=ShoppingListResponse, responses=_ERRORS
    )
    def remove_item(product_id: str, request: Request) -> ShoppingListResponse:
        return ShoppingListResponse(
            items=service.remove(current_user_id(request), list_name, product_id)
        )

    return router
