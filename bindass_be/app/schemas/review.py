from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional


class ReviewCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    orderId: int
    productId: Optional[int] = None
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1, max_length=100)
    comment: str = Field(min_length=1, max_length=1000)
    images: List[str] = []


class ReviewModeration(BaseModel):
    isApproved: Optional[bool] = None
    isFeatured: Optional[bool] = None


class ReviewOut(BaseModel):
    id: int
    userId: int
    orderId: int
    productId: Optional[int] = None
    rating: int
    title: str
    comment: str
    images: List[str] = []
    isVerifiedPurchase: bool
    isApproved: bool
    isFeatured: bool
    createdAt: str


class ReviewStats(BaseModel):
    totalReviews: int
    averageRating: float
    ratingCounts: Dict[int, int]


class ReviewPage(BaseModel):
    reviews: List[ReviewOut]
    page: int
    limit: int
    total: int
    pages: int
    stats: ReviewStats


class EligibleOrder(BaseModel):
    id: int
    orderNumber: str
    productIds: List[int]
    createdAt: str


class ReviewEligibilityOut(BaseModel):
    canReview: bool
    reason: Optional[str] = None
    order: Optional[EligibleOrder] = None
    existingReview: Optional[ReviewOut] = None
