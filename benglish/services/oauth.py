"""Google ID token verification."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import httpx
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from benglish.config import settings
from benglish.utils.exceptions import ServiceUnavailableError, UnauthorizedError

GOOGLE_ISSUERS = {"accounts.google.com", "https://accounts.google.com"}


@dataclass(slots=True)
class GoogleIdentity:
    subject: str
    email: str
    picture: str | None = None


class GoogleTokenVerifier:
    """Verify Google ID tokens with the tokeninfo endpoint.

    The endpoint checks the signature and expiry; audience, issuer and the
    verified-email flag are checked here.
    """

    def __init__(
        self,
        *,
        client_ids: Sequence[str] | None = None,
        tokeninfo_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.client_ids = set(client_ids if client_ids is not None else settings.GOOGLE_CLIENT_IDS)
        self.tokeninfo_url = tokeninfo_url or settings.GOOGLE_TOKENINFO_URL
        self.timeout = timeout or settings.OAUTH_REQUEST_TIMEOUT_SECONDS

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        before_sleep=lambda state: logger.warning(
            "Retrying Google tokeninfo request", attempt=state.attempt_number
        ),
        reraise=True,
    )
    def _fetch_tokeninfo(self, id_token: str) -> httpx.Response:
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(self.tokeninfo_url, params={"id_token": id_token})

    def verify(self, id_token: str) -> GoogleIdentity:
        try:
            response = self._fetch_tokeninfo(id_token)
        except httpx.HTTPError as exc:
            logger.error("Google token verification failed", error=str(exc))
            raise ServiceUnavailableError("Google sign-in is temporarily unavailable") from exc

        if response.status_code != 200:
            logger.warning("Google rejected ID token", status=response.status_code)
            raise UnauthorizedError("Invalid Google token")
        return self.identity_from_claims(response.json())

    def identity_from_claims(self, claims: dict) -> GoogleIdentity:
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise UnauthorizedError("Invalid Google token")
        if self.client_ids and claims.get("aud") not in self.client_ids:
            raise UnauthorizedError("Invalid Google token")
        subject = claims.get("sub")
        email = (claims.get("email") or "").strip().lower()
        # tokeninfo returns booleans as strings
        verified = str(claims.get("email_verified", "")).lower() == "true"
        if not subject or not email or not verified:
            raise UnauthorizedError("Google account has no verified email")
        return GoogleIdentity(subject=str(subject), email=email, picture=claims.get("picture"))
