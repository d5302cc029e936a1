"""Catalog service: list products and create them with an uploaded image."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from storefront.api.errors import ApiError, ApiErrorCode, validation_failed
from storefront.catalog.image_store import ALLOWED_IMAGE_SUFFIXES, ImageStore
from storefront.catalog.models import Product, ProductFields
from storefront.catalog.repository import ProductRepository

LOGGER = logging.getLogger(__name__)

IMAGE_FOLDER = "products"


class CatalogService:
    """Product listing and creation with injected storage collaborators."""

    def __init__(
        self,
        *,
        repo: ProductRepository,
        image_store: ImageStore,
        upload_max_bytes: int,
    ) -> None:
        self._repo = repo
        self._image_store = image_store
        self._upload_max_bytes = upload_max_bytes

    def list_products(self) -> list[Product]:
        return self._repo.list_products()

    def create_product(
        self, fields: ProductFields, *, image: bytes | None, filename: str | None
    ) -> Product:
        """Upload the image, then persist the product pointing at its URL."""
        if not image or not filename:
            raise validation_failed("No image provided")
        if Path(filename).suffix.lower() not in ALLOWED_IMAGE_SUFFIXES:
            raise validation_failed(
                "Only " + "/".join(sorted(ALLOWED_IMAGE_SUFFIXES)) + " images are supported."
            )
        if len(image) > self._upload_max_bytes:
            raise validation_failed(
                f"Image exceeds {self._upload_max_bytes} bytes."
            )

        try:
            image_url = self._image_store.save(image, filename=filename, folder=IMAGE_FOLDER)
        except OSError as exc:
            LOGGER.exception("image_upload_failed")
            raise ApiError(
                status_code=500,
                error_code=ApiErrorCode.IMAGE_UPLOAD_FAILED,
                message="Error uploading image",
            ) from exc

        product = Product(
            product_id=uuid.uuid4().hex,
            image=image_url,
            **fields.model_dump(),
        )
        self._repo.insert_product(product)
        LOGGER.info("product_created", extra={"product_id": product.product_id})
        return product
