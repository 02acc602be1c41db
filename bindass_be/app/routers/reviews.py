from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime
from typing import Optional
import logging
import math

from app.models.user import User, get_db
from app.models.review import Review
from app.schemas.review import (
    EligibleOrder,
    ReviewCreate,
    ReviewEligibilityOut,
    ReviewModeration,
    ReviewOut,
    ReviewPage,
    ReviewStats,
)
from app.services.reviews import check_review_eligibility, review_stats
from app.utils.email_templates import review_received
from app.utils.mailer import send_email
from app.utils.security import get_current_user_record, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


def to_review_out(r: Review) -> ReviewOut:
    return ReviewOut(
        id=r.id,
        userId=r.user_id,
        orderId=r.order_id,
        productId=r.product_id,
        rating=r.rating,
        title=r.title,
        comment=r.comment,
        images=r.images or [],
        isVerifiedPurchase=bool(r.is_verified_purchase),
        isApproved=bool(r.is_approved),
        isFeatured=bool(r.is_featured),
        createdAt=r.created_at.isoformat(),
    )


# List Reviews (approved only by default)
@router.get("/", response_model=ReviewPage)
def list_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    productId: Optional[int] = None,
    featured: bool = False,
    db: Session = Depends(get_db),
):
    query = db.query(Review).filter(Review.is_approved.is_(True))
    if productId is not None:
        query = query.filter(Review.product_id == productId)
    if featured:
        query = query.filter(Review.is_featured.is_(True))
    total = query.count()
    reviews = query.order_by(Review.created_at.desc(), Review.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return ReviewPage(
        reviews=[to_review_out(r) for r in reviews],
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit) if total else 0,
        stats=ReviewStats(**review_stats(db, productId)),
    )


# Review Eligibility
@router.get("/can-review", response_model=ReviewEligibilityOut)
def can_review(
    orderId: int = Query(...),
    productId: Optional[int] = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
):
    result = check_review_eligibility(db, orderId, user.id, productId)
    if not result.can_review:
        return ReviewEligibilityOut(
            canReview=False,
            reason=result.reason,
            existingReview=to_review_out(result.existing_review) if result.existing_review else None,
        )
    order = result.order
    return ReviewEligibilityOut(
        canReview=True,
        order=EligibleOrder(
            id=order.id,
            orderNumber=order.order_number,
            productIds=[i.product_id for i in order.items],
            createdAt=order.created_at.isoformat(),
        ),
    )


# Create Review
@router.post("/", response_model=ReviewOut)
def create_review(
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user_record),
):
    result = check_review_eligibility(db, payload.orderId, user.id, payload.productId)
    if not result.can_review:
        raise HTTPException(status_code=400, detail=result.reason)

    review = Review(
        user_id=user.id,
        order_id=payload.orderId,
        product_id=payload.productId,
        rating=payload.rating,
        title=payload.title,
        comment=payload.comment,
        images=payload.images,
        is_verified_purchase=True,
        is_approved=False,
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent duplicate submission for the same product
        db.rollback()
        raise HTTPException(status_code=400, detail="You have already reviewed this product")
    db.refresh(review)
    logger.info("Review %s submitted by user %s for order %s", review.id, user.id, review.order_id)

    tpl = review_received(review.title)
    send_email(user.email, tpl["subject"], tpl["body"])
    return to_review_out(review)


# Admin: Moderate Review
@admin_router.put("/{id}", response_model=ReviewOut)
def moderate_review(
    id: int,
    payload: ReviewModeration,
    db: Session = Depends(get_db),
    admin_email: str = Depends(require_admin),
):
    review = db.query(Review).filter(Review.id == id).first()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    if payload.isApproved is not None:
        review.is_approved = payload.isApproved
    if payload.isFeatured is not None:
        review.is_featured = payload.isFeatured
    review.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(review)
    return to_review_out(review)
