# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

from models.product import FilamentType


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str
    type: FilamentType = FilamentType.PLA
    color: Optional[str] = None
    hex: str = Field(default="#000000", pattern=r"^#[0-9a-fA-F]{3,8}$")
    price: float = Field(ge=0)
    weight: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    available: bool = True
    stock: int = Field(default=0, ge=0)


# Schema for full product updates (PUT); the image is handled by a separate upload endpoint
class ProductUpdate(ProductBase):
    pass


# Full product representation including ID and resolved image URL
class ProductOut(ProductBase):
    id: str
    image_url: Optional[str] = None


class ProductList(ORMBase):
    items: List[ProductOut]
    total: int
