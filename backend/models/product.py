# backend/models/product.py
import enum
import uuid

from sqlalchemy import Column, String, Float, Integer, Boolean, Enum, CheckConstraint
from database import Base


# Filament material families offered in the shop
class FilamentType(str, enum.Enum):
    PLA = "PLA"
    PETG = "PETG"
    ABS = "ABS"
    TPU = "TPU"
    ASA = "ASA"


def _new_id() -> str:
    return uuid.uuid4().hex


# Model Product
# A single filament spool in the catalog: display data, price, and the
# stock counter that checkout reserves against.
class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, index=True)
    type = Column(Enum(FilamentType, name="filament_type"), nullable=False, default=FilamentType.PLA, index=True)

    color = Column(String, nullable=True)
    hex = Column(String(16), nullable=False, default="#000000")
    weight = Column(String, nullable=True)
    description = Column(String, nullable=True)
    brand = Column(String, nullable=True)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False, default=0)

    # Stock is only decremented by checkout through a conditional update.
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)
    available = Column(Boolean, nullable=False, default=True)

    # Image reference: local upload path or absolute URL.
    image_url = Column(String, nullable=True)
