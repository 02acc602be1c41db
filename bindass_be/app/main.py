from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from app.models.user import Base, engine  # Base/engine single source
from app.routers import products
from app.routers import cart
from app.routers import wishlist
from app.routers import orders
from app.routers import payments
from app.routers import reviews
from app.routers import settings as settings_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Bindass Storefront API")


@app.on_event("startup")
def on_startup():
    # Routers import every model, so the metadata is complete by now
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(cart.router, prefix="/api/cart", tags=["cart"])
app.include_router(wishlist.router, prefix="/api/wishlist", tags=["wishlist"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(orders.admin_router, prefix="/api/admin/orders", tags=["admin-orders"])
app.include_router(payments.router, prefix="/api/payments", tags=["payments"])
app.include_router(payments.webhook_router, prefix="/api/webhook", tags=["webhooks"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["reviews"])
app.include_router(reviews.admin_router, prefix="/api/admin/reviews", tags=["admin-reviews"])
app.include_router(settings_router.router, prefix="/api", tags=["settings"])


# --- Entry point for Railway / local ---
if __name__ == "__main__":
    import uvicorn, os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=False)
