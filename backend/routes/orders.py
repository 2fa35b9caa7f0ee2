# backend/routes/orders.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, Query
from sqlalchemy.orm import Session
import logging

from database import get_db
from utils.tokenJWT import get_current_identity, get_optional_identity, admin_required
from utils.audit import write_log
from utils.checkout import place_order
from utils.mailer import mailer
from models.order import Order, TERMINAL_STATUSES
from schemas.order import (
    OrderOut, OrdersPage, OrderStatusPatch,
    PlaceOrderPayload, PlaceOrderResult, load_address, load_lines,
)
from schemas.profile import Identity

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

ORDERS_PAGE_SIZE = 15

# Map Order model to OrderOut schema
def _order_to_out(order: Order) -> OrderOut:
    return OrderOut(
        id=order.id,
        order_number=order.order_number,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        total=round(order.total, 2),
        date=order.date,
        status=order.status,
        status_label=order.status.label,
        items=load_lines(order.items),
        address=load_address(order.address),
        created_at=order.created_at,
    )

def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None

# Checkout entry point, open to guests. Always answers {ok, orderId, message}.
@router.post("/place-order", response_model=PlaceOrderResult)
def place_order_endpoint(
    payload: PlaceOrderPayload,
    request: Request,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    return place_order(
        db, payload, notifier=mailer,
        actor_email=identity.email if identity else None,
        ip=_client_ip(request),
    )


# List orders: admins see every order, customers only their own
@router.get("", response_model=OrdersPage)
def list_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(ORDERS_PAGE_SIZE, ge=1, le=100),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    q = db.query(Order)
    if not identity.is_admin:
        q = q.filter(Order.customer_email == identity.email)
    q = q.order_by(Order.date.desc(), Order.id.desc())

    total = q.count()
    rows = q.offset((page - 1) * page_size).limit(page_size).all()
    items = [_order_to_out(o) for o in rows]
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderOut)
def get_order_detail(
    order_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    o = db.query(Order).filter(Order.id == order_id).first()
    if not o or (o.customer_email != identity.email and not identity.is_admin):
        raise HTTPException(status_code=404, detail="Order not found or forbidden")
    return _order_to_out(o)


# Manually update order status (Admin only)
@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(admin_required),
):
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    old_status, new_status = order.status, payload.status
    if old_status in TERMINAL_STATUSES and new_status != old_status:
        raise HTTPException(status_code=400, detail=f"Cannot change status from {old_status.label}")

    order.status = new_status
    db.commit()
    write_log(db, actor_email=identity.email, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
        ip=_client_ip(request), meta={"order_id": order.id, "old": old_status.value, "new": new_status.value})

    db.refresh(order)
    return _order_to_out(order)
