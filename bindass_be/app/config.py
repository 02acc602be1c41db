import os
from functools import lru_cache

from dotenv import load_dotenv, find_dotenv

# Prefer loading environment variables from a .env file when one is present
_env_path = find_dotenv(usecwd=True)
if _env_path:
    load_dotenv(_env_path, override=False)


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL")
    # Primary admin email; ADMIN_EMAILS may list more, comma separated
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    ADMIN_EMAILS: str = os.getenv("ADMIN_EMAILS", "")
    ADMIN_EMAIL_PASSWORD: str = os.getenv("ADMIN_EMAIL_PASSWORD", "")
    SMTP_SERVER: str = os.getenv("SMTP_SERVER", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    EMAIL_BACKEND: str = os.getenv("EMAIL_BACKEND", "console").lower()
    # Feature flag for sending notification emails
    ENABLE_EMAIL_NOTIFICATIONS: bool = bool(int(os.getenv("ENABLE_EMAIL_NOTIFICATIONS", "1")))

    # Payment gateway (Razorpay) credentials
    RAZORPAY_KEY_ID: str = os.getenv("RAZORPAY_KEY_ID", "")
    RAZORPAY_KEY_SECRET: str = os.getenv("RAZORPAY_KEY_SECRET", "")
    RAZORPAY_WEBHOOK_SECRET: str = os.getenv("RAZORPAY_WEBHOOK_SECRET", "")

    # Store defaults, copied into the store_settings row on first use
    STORE_NAME: str = os.getenv("STORE_NAME", "Bindass")
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "INR").upper()
    TAX_RATE: str = os.getenv("TAX_RATE", "0.18")
    SHIPPING_RATE: str = os.getenv("SHIPPING_RATE", "99")
    FREE_SHIPPING_THRESHOLD: str = os.getenv("FREE_SHIPPING_THRESHOLD", "2000")
    ORDER_NUMBER_PREFIX: str = os.getenv("ORDER_NUMBER_PREFIX", "BIND")


@lru_cache
def get_settings():
    return Settings()
