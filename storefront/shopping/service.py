"""Cart and wishlist membership edits on the user record."""

from __future__ import annotations

import logging

from storefront.api.errors import ApiErrorCode, not_found
from storefront.auth.repository import UserRepository
from storefront.catalog.repository import ProductRepository

LOGGER = logging.getLogger(__name__)


class ShoppingListService:
    """Set-like, order-preserving product lists (``cart`` / ``wishlist``)."""

    def __init__(self, *, users: UserRepository, products: ProductRepository) -> None:
        self._users = users
        self._products = products

    def items(self, user_id: str, list_name: str) -> list[str]:
        items = self._users.get_list(user_id, list_name)
        if items is None:
            raise not_found(ApiErrorCode.USER_NOT_FOUND, "User not found")
        return items

    def add(self, user_id: str, list_name: str, product_id: str) -> list[str]:
        if self._products.get_product(product_id) is None:
            raise not_found(ApiErrorCode.PRODUCT_NOT_FOUND, "Product not found")
        items = self._users.add_to_list(user_id, list_name, product_id)
        if items is None:
            raise not_found(ApiErrorCode.USER_NOT_FOUND, "User not found")
        LOGGER.info(
            "list_item_added",
            extra={"user_id": user_id, "list_name": list_name, "product_id": product_id},
        )
        return items

    def remove(self, user_id: str, list_name: str, product_id: str) -> list[str]:
        items = self._users.remove_from_list(user_id, list_name, product_id)
        if items is None:
            raise not_found(ApiErrorCode.USER_NOT_FOUND, "User not found")
        LOGGER.info(
            "list_item_removed",
            extra={"user_id": user_id, "list_name": list_name, "product_id": product_id},
        )
        return items
