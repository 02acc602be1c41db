import hmac
import logging
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.user import User, get_db

logger = logging.getLogger(__name__)

http_basic = HTTPBasic()


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(http_basic),
    db: Session = Depends(get_db),
) -> str:
    user = db.query(User).filter(User.email == credentials.username).first()
    if not user or not hmac.compare_digest(str(user.password), credentials.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return user.email


def get_current_user_record(
    current_user_email: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.email == current_user_email).first()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid user")
    return user


def _admin_emails() -> set:
    settings = get_settings()
    emails = {e.strip().lower() for e in (settings.ADMIN_EMAILS or "").split(",") if e.strip()}
    if settings.ADMIN_EMAIL:
        emails.add(settings.ADMIN_EMAIL.lower())
    return emails


def is_admin_email(email: str) -> bool:
    if not email:
        return False
    email = email.lower()
    return email in _admin_emails() or email.endswith("@admin")


def require_admin(current_user_email: str = Depends(get_current_user)) -> str:
    if not is_admin_email(current_user_email):
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user_email
