"""Celery tasks for outbound account emails."""
from __future__ import annotations

from urllib.parse import quote

import httpx
from loguru import logger

from benglish.celery_app import celery_app
from benglish.config import settings

# Relay answers worth retrying: greylisting and transient SMTP/HTTP failures
TRANSIENT_STATUS_CODES = {421, 429, 450, 451, 452, 502, 503, 504}


class EmailRelayError(Exception):
    """Raised when the relay refuses a message."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def is_transient(exc: Exception) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return getattr(exc, "status_code", None) in TRANSIENT_STATUS_CODES


def build_reset_links(token: str) -> tuple[str, str]:
    """Return the (app deep link, web link) pair for a reset token."""

    encoded = quote(token, safe="")
    return (
        f"{settings.APP_RESET_LINK_BASE}?token={encoded}",
        f"{settings.WEB_RESET_LINK_BASE}?token={encoded}",
    )


def relay_email(*, to: str, subject: str, text: str, html: str) -> None:
    """Hand a message to the HTTP email relay."""

    if settings.EMAIL_RELAY_URL is None:
        logger.warning("EMAIL_RELAY_URL is not configured, dropping email", subject=subject)
        return
    headers = {}
    if settings.EMAIL_RELAY_TOKEN:
        headers["x-internal-token"] = settings.EMAIL_RELAY_TOKEN
    payload = {"to": to, "from": settings.MAIL_FROM, "subject": subject, "text": text, "html": html}
    with httpx.Client(timeout=settings.EMAIL_RELAY_TIMEOUT_SECONDS) as client:
        response = client.post(str(settings.EMAIL_RELAY_URL), json=payload, headers=headers)
    if response.status_code >= 300:
        raise EmailRelayError(
            f"Relay error status={response.status_code} body={response.text[:200]}",
            status_code=response.status_code,
        )
    logger.info("Email relayed", subject=subject, status=response.status_code)


@celery_app.task(
    name="benglish.tasks.notifications.send_password_reset_email",
    bind=True,
    max_retries=5,
)
def send_password_reset_email(self, email: str, token: str) -> dict[str, str]:
    """Send the password reset link, retrying transient relay failures with backoff."""

    _, web_link = build_reset_links(token)
    minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
    try:
        relay_email(
            to=email,
            subject="Resetare parolă Benglish",
            text=f"Apasă pentru a reseta parola: {web_link}",
            html=(
                f'<p>Apasă pentru a reseta parola: <a href="{web_link}">Deschide în aplicație</a></p>'
                f"<p>Acest link expiră în {minutes} minute și poate fi folosit o singură dată.</p>"
            ),
        )
    except (httpx.TransportError, EmailRelayError) as exc:
        if is_transient(exc) and self.request.retries < self.max_retries:
            countdown = min(30, 2 * (self.request.retries + 1))
            logger.warning("Retrying password reset email", error=str(exc), countdown=countdown)
            raise self.retry(exc=exc, countdown=countdown)
        logger.error("Password reset email failed", error=str(exc))
        raise
    return {"status": "sent"}
