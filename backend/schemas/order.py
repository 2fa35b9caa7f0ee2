# backend/schemas/order.py
import json
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models.order import OrderStatus
from schemas.profile import Address

# Shipping destination: a structured address or free text (guest checkout)
ShippingAddress = Union[Address, str]


# Snapshot of one ordered product, frozen at checkout time
class OrderLine(BaseModel):
    product_id: str
    quantity: int
    name: str
    type: Optional[str] = None
    color: Optional[str] = None
    hex: Optional[str] = None
    weight: Optional[str] = None
    image_url: Optional[str] = None
    unit_price: float
    line_total: float


# Checkout request. Field names follow the client (camelCase); snake_case is accepted too.
# items and address may arrive JSON-encoded, they are decoded by the checkout workflow.
class PlaceOrderPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_number: Optional[str] = None
    customer_name: str
    customer_email: str
    date: Optional[str] = None
    # Accepted for compatibility, the total is always recomputed
    total: Optional[float] = None
    items: Any = None
    address: Any = None


# Checkout outcome returned to the client as {ok, orderId, message}
class PlaceOrderResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool
    order_id: str = ""
    message: str


# Output schema representing the full order details
class OrderOut(BaseModel):
    id: str
    order_number: str
    customer_name: str
    customer_email: str
    total: float
    date: str
    status: OrderStatus
    status_label: str
    items: List[OrderLine]
    address: Optional[ShippingAddress] = None
    created_at: Optional[datetime] = None


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderOut]
    total: int
    page: int
    page_size: int


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: OrderStatus


def load_address(value: Any) -> Optional[ShippingAddress]:
    """Decode an address coming from the client or from the ``orders.address`` column.

    JSON strings are decoded first; objects become :class:`Address`, anything
    else that is not empty is kept as free text.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return value.strip() or None
        if isinstance(decoded, (dict, str)) or decoded is None:
            return load_address(decoded)
        return value
    if isinstance(value, Address):
        return value
    if isinstance(value, dict):
        data = dict(value)
        data.setdefault("id", "")
        return Address.model_validate(data)
    return str(value)


def dump_address(address: Optional[ShippingAddress]) -> Any:
    if isinstance(address, Address):
        return address.model_dump(mode="json")
    return address


def load_lines(value: Any) -> List[OrderLine]:
    if isinstance(value, str):
        value = json.loads(value)
    return [OrderLine.model_validate(line) for line in (value or [])]


def dump_lines(lines: List[OrderLine]) -> List[dict]:
    return [line.model_dump(mode="json") for line in lines]
