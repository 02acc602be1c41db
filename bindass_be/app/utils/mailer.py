import logging
import smtplib
from email.mime.text import MIMEText

from app.config import get_settings

logger = logging.getLogger(__name__)


def _send_email_console(to_email: str, subject: str, body: str):
    # Development helper: logs the email content instead of sending
    logger.info("[EMAIL:console] To=%s Subject=%s Body=%s", to_email, subject, body)


def send_email(to_email: str, subject: str, body: str) -> bool:
    """Send an email using the configured backend.

    In development (EMAIL_BACKEND=console), the email is logged instead of sent.
    In SMTP mode, errors are logged and never raised to callers.
    """
    settings = get_settings()
    if not settings.ENABLE_EMAIL_NOTIFICATIONS:
        return False
    backend = (settings.EMAIL_BACKEND or "console").lower()
    sender = settings.ADMIN_EMAIL
    password = settings.ADMIN_EMAIL_PASSWORD

    if backend != "smtp" or not sender or not password:
        if backend == "smtp":
            logger.warning(
                "EMAIL_BACKEND=smtp but credentials missing (ADMIN_EMAIL set=%s, password length=%s). Falling back to console.",
                bool(sender), len(password or ""),
            )
        _send_email_console(to_email, subject, body)
        return True

    try:
        msg = MIMEText(body)
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = to_email

        logger.debug("Attempting SMTP connection to %s:%s", settings.SMTP_SERVER, settings.SMTP_PORT)
        with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT, timeout=20) as server:
            server.starttls()
            server.login(sender, password)
            server.send_message(msg)
        logger.info("Email sent via SMTP to %s", to_email)
        return True
    except (smtplib.SMTPException, OSError) as e:
        # Do not break API flow on email failure
        logger.error("Failed to send email via SMTP: %s", e, exc_info=True)
        _send_email_console(to_email, subject, body)
        return False
