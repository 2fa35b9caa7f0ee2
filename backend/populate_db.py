# backend/populate_db.py
import os
import sys
import logging

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.product import Product, FilamentType

logger = logging.getLogger(__name__)

# Starter catalog: (name, type, color, hex, price, stock, brand)
STARTER_CATALOG = [
    ("PLA Basic Black", FilamentType.PLA, "Black", "#000000", 19.99, 25, "Spool Co"),
    ("PLA Basic White", FilamentType.PLA, "White", "#FFFFFF", 19.99, 25, "Spool Co"),
    ("PLA Silk Gold", FilamentType.PLA, "Gold", "#D4AF37", 24.99, 10, "Spool Co"),
    ("PETG Transparent Blue", FilamentType.PETG, "Blue", "#1E90FF", 22.50, 15, "Spool Co"),
    ("PETG Orange", FilamentType.PETG, "Orange", "#FF8C00", 22.50, 12, "Spool Co"),
    ("ABS Grey", FilamentType.ABS, "Grey", "#808080", 21.00, 8, "Spool Co"),
    ("TPU 95A Red", FilamentType.TPU, "Red", "#C0392B", 29.90, 6, "Spool Co"),
    ("ASA Outdoor White", FilamentType.ASA, "White", "#F5F5F5", 27.00, 5, "Spool Co"),
]


def seed_products(session) -> int:
    """Insert the starter catalog into an empty products table. Returns rows added."""
    if session.query(Product).count() > 0:
        logger.info("Products table is not empty, skipping seed")
        return 0

    for name, ftype, color, hex_code, price, stock, brand in STARTER_CATALOG:
        session.add(Product(
            name=name, type=ftype, color=color, hex=hex_code, price=price,
            weight="1kg", description=f"{ftype.value} filament, 1.75 mm, {color.lower()}.",
            brand=brand, available=True, stock=stock,
        ))
    session.commit()
    return len(STARTER_CATALOG)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    db = SessionLocal()
    try:
        added = seed_products(db)
        logger.info("Seeded %s products", added)
    finally:
        db.close()
