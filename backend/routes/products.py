# backend/routes/products.py
from typing import Optional
from fastapi import (
    APIRouter, Depends, HTTPException, Query, Request,
    UploadFile, File, Form
)
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import admin_required
from utils.audit import write_log
from utils.storage import image_store
from models.product import Product, FilamentType
from schemas.profile import Identity
import schemas.product as product_schemas

router = APIRouter(tags=["Products"])


# ---- HELPERS ----
def _get_or_404(db: Session, product_id: str) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

def _to_out(request: Request, product: Product) -> product_schemas.ProductOut:
    out = product_schemas.ProductOut.model_validate(product)
    out.image_url = image_store.url_for(request, product.image_url)
    return out


# =========================
# CATALOG
# =========================
@router.get("/products", response_model=product_schemas.ProductList)
def list_products(
    request: Request,
    type: Optional[FilamentType] = Query(None, description="Filter by filament type"),
    available: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(Product)
    if type is not None:
        query = query.filter(Product.type == type)
    if available is not None:
        query = query.filter(Product.available == available)

    items = query.order_by(Product.name.asc()).all()
    return {"items": [_to_out(request, p) for p in items], "total": len(items)}


@router.get("/products/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: str, request: Request, db: Session = Depends(get_db)):
    return _to_out(request, _get_or_404(db, product_id))


# =========================
# ADMIN: CREATE (multipart, optional image)
# =========================
@router.post("/products", response_model=product_schemas.ProductOut, status_code=201)
def add_product(
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(admin_required),
    file: Optional[UploadFile] = File(None),
    name: str = Form(...),
    price: float = Form(..., ge=0),
    stock: int = Form(0, ge=0),
    type: FilamentType = Form(FilamentType.PLA),
    color: Optional[str] = Form(None),
    hex: str = Form("#000000", pattern=r"^#[0-9a-fA-F]{3,8}$"),
    weight: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    available: bool = Form(True),
    image_url: Optional[str] = Form(None),
):
    if file:
        image_url = image_store.save(file)

    new_product = Product(
        name=name, type=type, color=color, hex=hex, price=price, weight=weight,
        description=description, brand=brand, available=available, stock=stock,
        image_url=image_url,
    )
    db.add(new_product)
    db.commit()
    db.refresh(new_product)

    write_log(
        db, actor_email=identity.email, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", meta={"id": new_product.id, "name": new_product.name}
    )
    return _to_out(request, new_product)


# =========================
# ADMIN: FULL UPDATE
# =========================
@router.put("/products/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: str, updated_data: product_schemas.ProductUpdate,
    request: Request, db: Session = Depends(get_db), identity: Identity = Depends(admin_required),
):
    product = _get_or_404(db, product_id)

    # Stock is set directly here, without the checkout's conditional update
    old_stock = product.stock
    for key, value in updated_data.model_dump().items():
        setattr(product, key, value)

    db.commit()
    db.refresh(product)

    write_log(
        db, actor_email=identity.email, action="PRODUCT_UPDATE", resource="products",
        status="SUCCESS", meta={"id": product.id, "old_stock": old_stock, "new_stock": product.stock}
    )
    return _to_out(request, product)


@router.post("/products/{product_id}/image", response_model=product_schemas.ProductOut)
def replace_product_image(
    product_id: str,
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    identity: Identity = Depends(admin_required),
):
    product = _get_or_404(db, product_id)
    new_url = image_store.save(file)
    image_store.delete(product.image_url)
    product.image_url = new_url
    db.commit()
    db.refresh(product)

    write_log(
        db, actor_email=identity.email, action="PRODUCT_IMAGE", resource="products",
        status="SUCCESS", meta={"id": product.id, "image_url": new_url}
    )
    return _to_out(request, product)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(admin_required),
):
    product = _get_or_404(db, product_id)
    image_url = product.image_url
    db.delete(product)
    db.commit()
    image_store.delete(image_url)

    write_log(
        db, actor_email=identity.email, action="PRODUCT_DELETE", resource="products",
        status="SUCCESS", meta={"id": product_id}
    )
