# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for Cloudflare Turnstile token verification."""
from typing import Optional

import httpx

from hackreg.core.config import settings
from hackreg.core.logging import get_logger
from hackreg.errors import VerificationError, VerificationUnavailableError
from hackreg.metrics import VERIFICATIONS

logger = get_logger(__name__)


class TurnstileVerifier:
    def __init__(self, secret_key: Optional[str] = None, verify_url: Optional[str] = None,
                 timeout: Optional[float] = None, mode: Optional[str] = None):
        self._secret = settings.TURNSTILE_SECRET_KEY if secret_key is None else secret_key
        self._url = verify_url or settings.TURNSTILE_VERIFY_URL
        self._timeout = timeout or settings.TURNSTILE_TIMEOUT
        self._mode = (mode or settings.TURNSTILE_MODE).lower()

    def verify(self, token: Optional[str], remote_ip: Optional[str] = None) -> None:
        """Raise VerificationError when the token is missing or rejected and
        VerificationUnavailableError when Turnstile cannot be asked."""
        if not token:
            VERIFICATIONS.labels(result="missing").inc()
            raise VerificationError("Verification token is required")

        if self._mode == "mock":
            logger.warning("[MOCK TURNSTILE] TURNSTILE_MODE=mock, accepting token")
            VERIFICATIONS.labels(result="mock").inc()
            return

        if not self._secret:
            logger.error("TURNSTILE_SECRET_KEY is not set, cannot verify tokens")
            VERIFICATIONS.labels(result="unconfigured").inc()
            raise VerificationUnavailableError("Verification service unavailable")

        form = {"secret": self._secret, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(self._url, data=form)
                resp.raise_for_status()
                outcome = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Turnstile unreachable: %s", exc)
            VERIFICATIONS.labels(result="unavailable").inc()
            raise VerificationUnavailableError("Verification service unavailable") from exc

        if not outcome.get("success"):
            logger.info("Turnstile rejected token: %s", outcome.get("error-codes", []))
            VERIFICATIONS.labels(result="rejected").inc()
            raise VerificationError("Verification failed")

        VERIFICATIONS.labels(result="passed").inc()
