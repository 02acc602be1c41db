from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional

from app.models.user import User, get_db
from app.models.cart import Cart
from app.models.product import Product
from app.schemas.cart import CartItemIn, CartQuantityUpdate, CartOut, CartItemOut
from app.storefront.cart import CartLine, CartStore
from app.utils.security import get_current_user_record


router = APIRouter()


def _normalize_option(value: Optional[str]) -> Optional[str]:
    # Consistent matching for variant options (trimmed, empty -> None)
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def _get_or_create_cart(db: Session, user_id: int) -> Cart:
    cart = db.query(Cart).filter(Cart.user_id == user_id).first()
    if not cart:
        cart = Cart(user_id=user_id, state=CartStore().snapshot())
        db.add(cart)
        db.flush()
    return cart


def _save_cart(db: Session, cart: Cart, store: CartStore) -> None:
    # Whole-snapshot overwrite; reassigning keeps SQLAlchemy change tracking simple
    cart.state = store.snapshot()
    cart.updated_at = datetime.utcnow()
    db.commit()


def serialize_cart(store: CartStore) -> CartOut:
    items = [CartItemOut(**i.model_dump()) for i in store.items]
    return CartOut(
        items=items,
        totalItems=store.total_items,
        totalAmount=store.total_amount,
        isOpen=store.is_open,
    )


def clear_user_cart(db: Session, user_id: int) -> None:
    """Empty the persisted cart once an order is confirmed; caller commits."""
    cart = db.query(Cart).filter(Cart.user_id == user_id).first()
    if cart:
        store = CartStore.from_snapshot(cart.state)
        store.clear()
        cart.state = store.snapshot()
        cart.updated_at = datetime.utcnow()


# Get Cart
@router.get("/", response_model=CartOut)
def get_cart(db: Session = Depends(get_db), user: User = Depends(get_current_user_record)):
    cart = _get_or_create_cart(db, user.id)
    db.commit()  # ensure cart persisted if created
    return serialize_cart(CartStore.from_snapshot(cart.state))


# Add Cart Item
@router.post("/", response_model=CartOut)
def add_cart_item(
    payload: CartItemIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
):
    product = db.query(Product).filter(Product.id == payload.productId).first()
    if not product or product.status != "active":
        raise HTTPException(status_code=404, detail="Product not found")

    size = _normalize_option(payload.selectedSize)
    color = _normalize_option(payload.selectedColor)
    if product.variants and product.find_variant(size, color) is None:
        raise HTTPException(status_code=400, detail=f"Selected variant for {product.name} not found")

    max_quantity = product.max_cart_quantity(size, color)
    if max_quantity < 1:
        raise HTTPException(status_code=400, detail=f"{product.name} is out of stock")

    cart = _get_or_create_cart(db, user.id)
    store = CartStore.from_snapshot(cart.state)
    # Price and image are captured now, not re-fetched later
    store.add_item(
        CartLine(
            productId=product.id,
            name=product.name,
            unitPrice=product.price,
            image=product.main_image,
            selectedSize=size,
            selectedColor=color,
        ),
        quantity=payload.quantity,
        max_quantity=max_quantity,
    )
    _save_cart(db, cart, store)
    return serialize_cart(store)


# Update Cart Item Quantity
@router.put("/", response_model=CartOut)
def update_cart_item(
    payload: CartQuantityUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
):
    cart = _get_or_create_cart(db, user.id)
    store = CartStore.from_snapshot(cart.state)
    store.update_quantity(
        payload.productId,
        payload.quantity,
        _normalize_option(payload.selectedSize),
        _normalize_option(payload.selectedColor),
    )
    _save_cart(db, cart, store)
    return serialize_cart(store)


# Remove Cart Item
@router.delete("/", response_model=CartOut)
def remove_cart_item(
    productId: int = Query(...),
    selectedSize: Optional[str] = Query(None),
    selectedColor: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
):
    cart = _get_or_create_cart(db, user.id)
    store = CartStore.from_snapshot(cart.state)
    if not store.remove_item(productId, _normalize_option(selectedSize), _normalize_option(selectedColor)):
        raise HTTPException(status_code=404, detail="Cart item not found")
    _save_cart(db, cart, store)
    return serialize_cart(store)


# Clear Cart
@router.delete("/clear", response_model=CartOut)
def clear_cart(db: Session = Depends(get_db), user: User = Depends(get_current_user_record)):
    cart = _get_or_create_cart(db, user.id)
    store = CartStore.from_snapshot(cart.state)
    store.clear()
    _save_cart(db, cart, store)
    return serialize_cart(store)
