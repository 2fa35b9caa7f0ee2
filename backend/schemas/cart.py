from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List

# A cart line as sent by the client
class CartLineIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: str
    quantity: int

# Request schema for re-validating a client cart
class CartValidateRequest(BaseModel):
    items: List[CartLineIn] = Field(default_factory=list)

# Response schema for a single cart line after clamping to stock
class CartLineOut(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    requested: int
    stock: int
    line_total: float

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartLineOut]
    count: int
    total: float
    adjusted: bool
