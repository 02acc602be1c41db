from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.order import Order, FULFILLED_STATUSES
from app.models.review import Review


@dataclass
class ReviewEligibility:
    can_review: bool
    reason: Optional[str] = None
    order: Optional[Order] = None
    existing_review: Optional[Review] = None


def check_review_eligibility(
    db: Session,
    order_id: int,
    user_id: int,
    product_id: Optional[int] = None,
) -> ReviewEligibility:
    """Decide whether ``user_id`` may review ``order_id`` (optionally one of its products)."""
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order or order.user_id != user_id:
        return ReviewEligibility(False, "Order not found")
    if str(order.status or "").upper() not in FULFILLED_STATUSES:
        return ReviewEligibility(False, "Order not completed yet")

    if product_id is not None:
        if not order.has_product(product_id):
            return ReviewEligibility(False, "Product not found in this order")
        existing = (
            db.query(Review)
            .filter(Review.user_id == user_id, Review.product_id == product_id)
            .first()
        )
        if existing:
            return ReviewEligibility(False, "You have already reviewed this product", existing_review=existing)
    else:
        existing = (
            db.query(Review)
            .filter(Review.user_id == user_id, Review.order_id == order_id, Review.product_id.is_(None))
            .first()
        )
        if existing:
            return ReviewEligibility(False, "You have already reviewed this order", existing_review=existing)

    return ReviewEligibility(True, order=order)


def review_stats(db: Session, product_id: Optional[int] = None) -> dict:
    """Count, average (one decimal) and per-star counts over approved reviews."""
    query = db.query(Review.rating, func.count(Review.id)).filter(Review.is_approved.is_(True))
    if product_id is not None:
        query = query.filter(Review.product_id == product_id)
    counts = {star: 0 for star in (5, 4, 3, 2, 1)}
    for rating, count in query.group_by(Review.rating).all():
        counts[int(rating)] = count
    total = sum(counts.values())
    average = round(sum(star * n for star, n in counts.items()) / total, 1) if total else 0.0
    return {"totalReviews": total, "averageRating": average, "ratingCounts": counts}
