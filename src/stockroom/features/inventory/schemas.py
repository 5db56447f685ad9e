from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
import datetime


class CategoryOption(BaseModel):
    id: int = Field(..., description="Identifier used by the category filter")
    name: str

    model_config = ConfigDict(from_attributes=True)


class BrandOption(BaseModel):
    id: int = Field(..., description="Identifier used by the brand filter")
    name: str

    model_config = ConfigDict(from_attributes=True)


class ProductResponse(BaseModel):
    id: int
    public_id: str = Field(..., description="Public unique identifier for the product (KSUID)")
    name: str
    barcode: Optional[str] = None
    quantity: int = Field(..., description="Units currently in stock")
    unit_cost_price: float
    category: Optional[str] = Field(None, description="Category name")
    brand: Optional[str] = Field(None, description="Brand name")
    quality: Optional[str] = Field(None, description="Quality grade name")
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(
        from_attributes=True,
        protected_namespaces=(),
    )
