# backend/routes/cart.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product
from schemas.cart import CartValidateRequest, CartOut, CartLineOut
from utils.cart import Cart

router = APIRouter(prefix="/cart", tags=["Cart"])


# Rebuild a client-held cart against current stock. Advisory only: checkout re-validates.
@router.post("/validate", response_model=CartOut)
def validate_cart(
    payload: CartValidateRequest,
    db: Session = Depends(get_db),
):
    cart = Cart()
    requested = {}
    adjusted = False

    for line in payload.items:
        requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity
        product = db.query(Product).filter(Product.id == line.product_id).first()
        if not product:
            adjusted = True
            continue
        added = cart.add(product, line.quantity)
        if added != line.quantity:
            adjusted = True

    items_out = [
        CartLineOut(
            product_id=it.product.id,
            name=it.product.name,
            unit_price=it.product.price,
            quantity=it.quantity,
            requested=requested[it.product.id],
            stock=it.product.stock,
            line_total=it.line_total,
        )
        for it in cart.lines
    ]
    return CartOut(items=items_out, count=cart.count, total=cart.total, adjusted=adjusted)
