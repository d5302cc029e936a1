"""Pydantic models for the product catalog."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProductFields(BaseModel):
    """Product attributes supplied by the client alongside the image."""

    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    brand: str = Field(min_length=1)
    description: str = Field(min_length=1)
    year_added: int
    rating: float = Field(ge=0)
    original_price: float = Field(ge=0)
    discount_percentage: float = Field(ge=0, le=100)


class Product(ProductFields):
    """Persisted product record."""

    product_id: str
    image: str

    def public_view(self) -> dict[str, object]:
        return {
            "id": self.product_id,
            "image": self.image,
            "name": self.name,
            "category": self.category,
            "brand": self.brand,
            "description": self.description,
            "year_added": self.year_added,
            "rating": self.rating,
            "original_price": self.original_price,
            "discount_percentage": self.discount_percentage,
        }
