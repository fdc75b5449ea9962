"""
Product data models for the Catalog service.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, TypeAdapter


class Product(BaseModel):
    """Product as stored and served."""
    id: int = Field(..., description="Store-assigned product ID")
    user_id: int = Field(..., description="Owning user ID")
    product_name: str = Field(..., description="Product name")
    product_description: str = Field("", description="Free-text description")
    product_price: Decimal = Field(..., description="Unit price")
    product_images: List[str] = Field(default_factory=list, description="Raw image references")
    compressed_product_images: Optional[List[str]] = Field(
        None, description="Compressed image references, set by the image pipeline"
    )


class ProductCreateRequest(BaseModel):
    """Request model for creating a product.

    Field types are checked here; business rules (positive user ID and
    price, non-empty name and images) are enforced by the service.
    """
    user_id: int = Field(0, description="Owning user ID")
    product_name: str = Field("", description="Product name")
    product_description: str = Field("", description="Free-text description")
    product_price: Decimal = Field(Decimal("0"), description="Unit price")
    product_images: List[str] = Field(default_factory=list, description="Raw image references")


class ProductUpdateRequest(BaseModel):
    """Request model for updating a product."""
    product_name: str = Field("", description="Product name")
    product_description: str = Field("", description="Free-text description")
    product_price: Decimal = Field(Decimal("0"), description="Unit price")
    product_images: List[str] = Field(default_factory=list, description="Raw image references")


class ProductCreatedResponse(BaseModel):
    """Response model for product creation."""
    message: str = "Product created successfully"
    product_id: int


class ProductUpdatedResponse(BaseModel):
    """Response model for product update."""
    message: str = "Product updated successfully"
    rows_affected: int


@dataclass(frozen=True)
class ProductFilter:
    """Optional predicates for listing a user's products."""
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    name: Optional[str] = None


ProductAdapter = TypeAdapter(Product)
ProductListAdapter = TypeAdapter(List[Product])
