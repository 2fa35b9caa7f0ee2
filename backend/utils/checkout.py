# backend/utils/checkout.py
"""Order placement with inventory reservation.

A checkout either commits the order together with one stock decrement per
product, or commits nothing. Stock is read once, validated, and then written
with a conditional update (``... WHERE stock = <value read>``) so that two
concurrent checkouts of the same product cannot both consume the same units.
"""
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.order import Order, OrderStatus
from models.product import Product
from schemas.order import (
    OrderLine, PlaceOrderPayload, PlaceOrderResult,
    dump_address, dump_lines, load_address,
)
from utils.audit import write_log

logger = logging.getLogger(__name__)

MSG_OK = "OK"
MSG_EMPTY_CART = "Shporta është bosh."
MSG_INVALID_QUANTITY = "Sasi e pavlefshme."
MSG_NOT_FOUND = "Produkti nuk u gjet."
MSG_ORDER_NOT_CREATED = "Porosia nuk u krijua."
MSG_UNKNOWN = "Gabim i panjohur."


def msg_insufficient_stock(name: str) -> str:
    return f'Sasia e kërkuar për "{name}" tejkalon stokun.'


def msg_stock_changed(name: str) -> str:
    return f'Sasia e produktit "{name}" ndryshoi gjatë përpunimit. Ju lutem provoni përsëri.'


class CheckoutError(Exception):
    """A checkout rejected for a reason the customer can act on."""

    EMPTY_CART = "empty_cart"
    INVALID_QUANTITY = "invalid_quantity"
    NOT_FOUND = "not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"
    ORDER_NOT_CREATED = "order_not_created"
    CONCURRENT_MODIFICATION = "concurrent_modification"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def retryable(self) -> bool:
        return self.kind == self.CONCURRENT_MODIFICATION


@dataclass
class Reservation:
    product: Product
    observed_stock: int
    quantity: int

    @property
    def unit_price(self) -> float:
        return float(self.product.price or 0)

    def to_line(self) -> OrderLine:
        p = self.product
        return OrderLine(
            product_id=p.id,
            quantity=self.quantity,
            name=p.name,
            type=p.type.value if p.type is not None else None,
            color=p.color,
            hex=p.hex,
            weight=p.weight,
            image_url=p.image_url,
            unit_price=self.unit_price,
            line_total=round(self.unit_price * self.quantity, 2),
        )


# ---- STEP 1: items ----

def _decode_items(raw: Any) -> List[Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, list):
        return []
    return raw


def _product_id_of(entry: Dict[str, Any]) -> Optional[str]:
    pid = entry.get("productId") or entry.get("product_id")
    if not pid and isinstance(entry.get("product"), dict):
        pid = entry["product"].get("id")
    return str(pid) if pid else None


def _as_quantity(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value.is_integer() and value > 0:
        return int(value)
    return None


def parse_items(raw: Any) -> List[Tuple[str, int]]:
    """Decode the submitted items into ``(product_id, quantity)`` pairs.

    Repeated product ids are merged by summing their quantities; the order of
    first appearance is kept.
    """
    entries = _decode_items(raw)
    if not entries:
        raise CheckoutError(CheckoutError.EMPTY_CART, MSG_EMPTY_CART)

    merged: Dict[str, int] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            raise CheckoutError(CheckoutError.INVALID_QUANTITY, MSG_INVALID_QUANTITY)
        product_id = _product_id_of(entry)
        quantity = _as_quantity(entry.get("quantity"))
        if not product_id or quantity is None:
            raise CheckoutError(CheckoutError.INVALID_QUANTITY, MSG_INVALID_QUANTITY)
        merged[product_id] = merged.get(product_id, 0) + quantity
    return list(merged.items())


# ---- STEP 2: stock check ----

def load_reservations(db: Session, items: List[Tuple[str, int]]) -> List[Reservation]:
    reservations = []
    for product_id, quantity in items:
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise CheckoutError(CheckoutError.NOT_FOUND, MSG_NOT_FOUND)

        current_stock = product.stock or 0
        if quantity > current_stock:
            raise CheckoutError(
                CheckoutError.INSUFFICIENT_STOCK, msg_insufficient_stock(product.name or "produkt")
            )
        reservations.append(Reservation(product=product, observed_stock=current_stock, quantity=quantity))
    return reservations


# ---- STEP 4: order row ----

def _create_order(db: Session, payload: PlaceOrderPayload, lines: List[OrderLine], total: float) -> Order:
    order = Order(
        order_number=payload.order_number or f"ORD-{int(time.time() * 1000)}",
        customer_name=payload.customer_name,
        customer_email=payload.customer_email,
        total=total,
        date=payload.date or datetime.now(timezone.utc).isoformat(),
        status=OrderStatus.CREATED,
        items=dump_lines(lines),
        address=dump_address(load_address(payload.address)),
    )
    try:
        db.add(order)
        db.flush()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Order insert failed for %s", order.order_number)
        raise CheckoutError(CheckoutError.ORDER_NOT_CREATED, MSG_ORDER_NOT_CREATED)
    return order


# ---- STEP 5: conditional stock decrement ----

def reserve_stock(db: Session, reservations: List[Reservation]) -> None:
    for r in reservations:
        result = db.execute(
            update(Product)
            .where(Product.id == r.product.id, Product.stock == r.observed_stock)
            .values(stock=r.observed_stock - r.quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                "Stock of %s changed during checkout (expected %s)", r.product.id, r.observed_stock
            )
            raise CheckoutError(CheckoutError.CONCURRENT_MODIFICATION, msg_stock_changed(r.product.name))


def _notify(notifier, order: Order) -> None:
    if notifier is None:
        return
    try:
        notifier.send_order_notifications(order)
    except Exception:
        logger.exception("Order notification failed for %s", order.order_number)


def place_order(
    db: Session,
    payload: PlaceOrderPayload,
    notifier=None,
    actor_email: Optional[str] = None,
    ip: Optional[str] = None,
) -> PlaceOrderResult:
    """Validate the cart, create the order and reserve stock in one transaction.

    Never raises: every outcome is reported as a :class:`PlaceOrderResult`.
    ``notifier`` (see :class:`utils.mailer.Mailer`) is called after a
    successful commit and its failures are only logged.
    """
    try:
        items = parse_items(payload.items)
        reservations = load_reservations(db, items)

        lines = [r.to_line() for r in reservations]
        total = round(sum(line.unit_price * line.quantity for line in lines), 2)

        order = _create_order(db, payload, lines, total)
        try:
            reserve_stock(db, reservations)
            # Commits the order, the stock decrements and the audit row together
            write_log(
                db, actor_email=actor_email or payload.customer_email, action="ORDER_PLACE",
                resource="orders", status="SUCCESS", ip=ip,
                meta={"order_id": order.id, "order_number": order.order_number, "total": total},
            )
        except CheckoutError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Checkout commit failed for %s", order.order_number)
            raise CheckoutError(CheckoutError.ORDER_NOT_CREATED, MSG_ORDER_NOT_CREATED)

        db.refresh(order)
        logger.info("Order %s placed (%s items, total %.2f)", order.order_number, len(lines), total)
        _notify(notifier, order)
        return PlaceOrderResult(ok=True, order_id=order.id, message=MSG_OK)

    except CheckoutError as e:
        logger.info("Checkout rejected (%s): %s", e.kind, e.message)
        return PlaceOrderResult(ok=False, order_id="", message=e.message)
    except Exception as e:
        db.rollback()
        logger.exception("placeOrder failed")
        return PlaceOrderResult(ok=False, order_id="", message=str(e) or MSG_UNKNOWN)
