# backend/models/order.py
import enum
import uuid

from sqlalchemy import Column, String, Float, DateTime, Enum, JSON, func
from database import Base


# Order lifecycle; values are the stored codes, labels are shown to customers
class OrderStatus(str, enum.Enum):
    CREATED = "KRIJUAR"
    PROCESSING = "NE_PROCES"
    SHIPPING = "NE_DERGIM"
    DELIVERED = "DOREZUAR"
    CANCELLED = "ANULUAR"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    OrderStatus.CREATED: "Krijuar",
    OrderStatus.PROCESSING: "Në proces",
    OrderStatus.SHIPPING: "Në dërgim",
    OrderStatus.DELIVERED: "Dorëzuar",
    OrderStatus.CANCELLED: "Anuluar",
}

# No status change is allowed once an order reaches one of these
TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def _new_id() -> str:
    return uuid.uuid4().hex


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=_new_id)
    order_number = Column(String, nullable=False, index=True)

    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False, index=True)

    # Computed from stock-checked prices, never taken from the client
    total = Column(Float, nullable=False)
    date = Column(String, nullable=False, index=True)
    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderStatus.CREATED,
    )

    # Line snapshots (list of OrderLine) and shipping address (Address or free text)
    items = Column(JSON, nullable=False)
    address = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
