# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client the form uses to submit a registration."""
from typing import Any, Dict, Optional

import httpx

from hackreg.core.config import settings
from hackreg.core.logging import get_logger

logger = get_logger(__name__)


class SubmissionError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body or {}


class RegistrationClient:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = (base_url or settings.REGISTRATION_API_URL).rstrip("/")
        self._timeout = timeout or settings.SUBMIT_TIMEOUT
        self._transport = transport

    async def submit(self, payload: Dict[str, Any], token: str) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout,
                                         transport=self._transport) as client:
                resp = await client.post(
                    "/api/v1/register",
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            logger.warning("Registration API unreachable: %s", exc)
            raise SubmissionError(f"Registration API unreachable: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.status_code != 201:
            logger.warning("Registration rejected status=%s error=%s",
                           resp.status_code, body.get("error"))
            raise SubmissionError(body.get("error", "Registration failed"),
                                  status_code=resp.status_code, body=body)
        return body
