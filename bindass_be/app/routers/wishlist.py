from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import datetime

from app.models.user import User, get_db
from app.models.wishlist import Wishlist
from app.models.product import Product
from app.schemas.wishlist import WishlistItemIn, WishlistOut, WishlistItemOut
from app.storefront.wishlist import WishlistEntry, WishlistStore
from app.utils.security import get_current_user_record


router = APIRouter()


def _get_or_create_wishlist(db: Session, user_id: int) -> Wishlist:
    wl = db.query(Wishlist).filter(Wishlist.user_id == user_id).first()
    if not wl:
        wl = Wishlist(user_id=user_id, state=WishlistStore().snapshot())
        db.add(wl)
        db.flush()
    return wl


def _save_wishlist(db: Session, wl: Wishlist, store: WishlistStore) -> None:
    wl.state = store.snapshot()
    wl.updated_at = datetime.utcnow()
    db.commit()


def _serialize_wishlist(store: WishlistStore) -> WishlistOut:
    items = [WishlistItemOut(**i.model_dump()) for i in store.items]
    return WishlistOut(items=items, itemCount=store.item_count)


def _entry_for(db: Session, product_id: int) -> WishlistEntry:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return WishlistEntry(
        productId=product.id,
        name=product.name,
        unitPrice=product.price,
        image=product.main_image,
        category=product.category,
        subCategory=product.sub_category,
    )


# Get Wishlist
@router.get("/", response_model=WishlistOut)
def get_wishlist(db: Session = Depends(get_db), user: User = Depends(get_current_user_record)):
    wl = _get_or_create_wishlist(db, user.id)
    db.commit()
    return _serialize_wishlist(WishlistStore.from_snapshot(wl.state))


# Add Wishlist Item (no-op when already present)
@router.post("/", response_model=WishlistOut)
def add_wishlist_item(
    payload: WishlistItemIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
):
    entry = _entry_for(db, payload.productId)
    wl = _get_or_create_wishlist(db, user.id)
    store = WishlistStore.from_snapshot(wl.state)
    store.add(entry)
    _save_wishlist(db, wl, store)
    return _serialize_wishlist(store)


# Toggle Wishlist Item
@router.post("/toggle", response_model=WishlistOut)
def toggle_wishlist_item(
    productId: int = Query(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
):
    wl = _get_or_create_wishlist(db, user.id)
    store = WishlistStore.from_snapshot(wl.state)
    if store.contains(productId):
        # Removing must work even if the product has since been deleted
        store.remove(productId)
    else:
        store.toggle(_entry_for(db, productId))
    _save_wishlist(db, wl, store)
    return _serialize_wishlist(store)


# Remove Wishlist Item
@router.delete("/", response_model=WishlistOut)
def remove_wishlist_item(
    productId: int = Query(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
):
    wl = _get_or_create_wishlist(db, user.id)
    store = WishlistStore.from_snapshot(wl.state)
    if not store.remove(productId):
        raise HTTPException(status_code=404, detail="Item not in wishlist")
    _save_wishlist(db, wl, store)
    return _serialize_wishlist(store)


# Clear Wishlist
@router.delete("/clear", response_model=WishlistOut)
def clear_wishlist(db: Session = Depends(get_db), user: User = Depends(get_current_user_record)):
    wl = _get_or_create_wishlist(db, user.id)
    store = WishlistStore.from_snapshot(wl.state)
    store.clear()
    _save_wishlist(db, wl, store)
    return _serialize_wishlist(store)
