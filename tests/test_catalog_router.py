from __future__ import annotations

import asyncio

from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.catalog.models import Product, ProductFields
from storefront.catalog.router import create_catalog_router

FORM = {
    "name": "Runner",
    "category": "Shoes",
    "brand": "Acme",
    "description": "Light running shoe",
    "yearAdded": "2024",
    "rating": "4.5",
    "originalPrice": "99",
    "discountPercentage": "10",
}


class _RecordingService:
    def __init__(self) -> None:
        self.loop_in_call_thread: bool | None = None

    def list_products(self) -> list[Product]:
        return []

    def create_product(
        self, fields: ProductFields, *, image: bytes | None, filename: str | None
    ) -> Product:
        try:
            asyncio.get_running_loop()
            self.loop_in_call_thread = True
        except RuntimeError:
            self.loop_in_call_thread = False
        return Product(product_id="p1", image=f"/media/products/{filename}", **fields.model_dump())


def test_create_product_runs_service_outside_event_loop() -> None:
    service = _RecordingService()
    app = FastAPI()
    app.include_router(create_catalog_router(service))  # type: ignore[arg-type]

    response = TestClient(app).post(
        "/products",
        data=FORM,
        files={"image": ("shoe.png", b"\x89PNG data", "image/png")},
    )

    assert response.status_code == 201
    assert response.json()["id"] == "p1"
    assert service.loop_in_call_thread is False
