"""FastAPI router for catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter, File, Form, UploadFile
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from storefront.api.contracts import ApiErrorResponse, ProductResponse
from storefront.api.errors import validation_failed
from storefront.catalog.models import ProductFields
from storefront.catalog.service import CatalogService


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )


def create_catalog_router(service: CatalogService) -> APIRouter:
    """Build product list/create router."""
    router = APIRouter(prefix="/products", tags=["products"])

    @router.get("", response_model=list[ProductResponse])
    def list_products() -> list[ProductResponse]:
        """Return every product in the catalog."""
        return [
            ProductResponse(**product.public_view())
            for product in service.list_products()
        ]

    @router.post(
        "",
        status_code=201,
        response_model=ProductResponse,
        responses={400: {"model": ApiErrorResponse}, 500: {"model": ApiErrorResponse}},
    )
    async def create_product(
        name: str = Form(...),
        category: str = Form(...),
        brand: str = Form(...),
        description: str = Form(...),
        year_added: int = Form(..., alias="yearAdded"),
        rating: float = Form(...),
        original_price: float = Form(..., alias="originalPrice"),
        discount_percentage: float = Form(..., alias="discountPercentage"),
        image: UploadFile | None = File(default=None),
    ) -> ProductResponse:
        """Upload a product image and register the product."""
        try:
            fields = ProductFields(
                name=name,
                category=category,
                brand=brand,
                description=description,
                year_added=year_added,
                rating=rating,
                original_price=original_price,
                discount_percentage=discount_percentage,
            )
        except ValidationError as exc:
            raise validation_failed(_describe(exc)) from exc

        data = await image.read() if image is not None else None
        # file and database writes block, keep them off the event loop
        product = await run_in_threadpool(
            service.create_product,
            fields,
            image=data,
            filename=image.filename if image is not None else None,
        )
        return ProductResponse(**product.public_view())

    return router
