from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional

from app.models.product import Product
from app.models.user import get_db
from app.schemas.product import ProductOut
from app.services.currency import discount_percent

router = APIRouter()


def to_product_out(p: Product) -> ProductOut:
    compare_price = float(p.compare_price) if p.compare_price is not None else None
    return ProductOut(
        id=p.id,
        name=p.name,
        description=p.description,
        price=p.price,
        comparePrice=compare_price,
        discountPercent=discount_percent(p.compare_price, p.price) if p.compare_price else 0,
        category=p.category,
        subCategory=p.sub_category,
        images=p.images or [],
        sizes=p.sizes or [],
        colors=p.colors or [],
        variants=p.variants or [],
        stock=int(p.stock or 0),
        inStock=(not p.track_quantity) or int(p.stock or 0) > 0,
        featured=bool(p.featured),
    )


# Get All Products (with filters)
@router.get("/", response_model=List[ProductOut])
def get_all_products(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    category: Optional[str] = None,
    subCategory: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Product).filter(Product.status == "active")
    if category:
        query = query.filter(Product.category == category)
    if subCategory:
        query = query.filter(Product.sub_category == subCategory)
    if featured is not None:
        query = query.filter(Product.featured == featured)
    if search:
        like = f"%{search.strip()}%"
        query = query.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
    products = query.order_by(Product.created_at.desc(), Product.id.desc()).offset(page * size).limit(size).all()
    return [to_product_out(p) for p in products]


# Get Product by ID
@router.get("/{id}", response_model=ProductOut)
def get_product(id: int, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return to_product_out(product)
