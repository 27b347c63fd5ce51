"""
scheduler/app/utils/api.py

HTTP client for the booking backend.

Every endpoint answers with an envelope:
    {"statusCode": 200, "message": "...", "data": ...}

Non-2xx answers are returned as envelopes too (statusCode taken from the
HTTP status when the body has none), so callers can surface the server
message. Only transport failures raise.
"""

import logging
from typing import Optional

import httpx

from ..auth import AuthContext
from ..config import settings
from ..errors import ApiTransportError
from ..schemas.bookings import BookBatchRequest, BookMultiRequest, dump_request

logger = logging.getLogger(__name__)


class ApiClient:
    """Async client for the booking backend."""

    def __init__(
        self,
        base_url: str = settings.resolved_api_base_url,
        auth: Optional[AuthContext] = None,
        timeout: float = settings.request_timeout,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.auth = auth or AuthContext()
        self.timeout = timeout
        self.transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        headers: dict = None,
        **kwargs
    ) -> dict:
        """Base HTTP request. Returns the response envelope."""
        url = f"{self.base_url}{path}"

        _headers = {"Content-Type": "application/json", **self.auth.headers()}
        if headers:
            _headers.update(headers)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                resp = await client.request(method, url, headers=_headers, **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"API request failed: {method} {path} -> {e}")
                raise ApiTransportError(str(e) or type(e).__name__) from e

        if resp.status_code >= 400:
            logger.error(f"API error: {method} {path} -> {resp.status_code}")

        return self._envelope(resp)

    @staticmethod
    def _envelope(resp: httpx.Response) -> dict:
        if resp.status_code == 204 or not resp.content:
            return {"statusCode": resp.status_code, "message": None, "data": None}
        try:
            body = resp.json()
        except ValueError:
            return {"statusCode": resp.status_code, "message": None, "data": None}

        if not isinstance(body, dict):
            return {"statusCode": resp.status_code, "message": None, "data": body}

        envelope = dict(body)
        envelope.setdefault("statusCode", resp.status_code)
        envelope.setdefault("message", None)
        return envelope

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def get_resource(self, resource_id: int | str) -> dict:
        """GET /resources/{id}"""
        return await self._request("GET", f"/resources/{resource_id}")

    async def book_resource_batch(self, resource_id: int | str, body: BookBatchRequest) -> dict:
        """POST /resources/{id}/book-batch (slots on one date)"""
        return await self._request(
            "POST", f"/resources/{resource_id}/book-batch", json=dump_request(body)
        )

    async def book_resource_multi(self, resource_id: int | str, body: BookMultiRequest) -> dict:
        """POST /resources/{id}/book-multi (slots on several dates)"""
        return await self._request(
            "POST", f"/resources/{resource_id}/book-multi", json=dump_request(body)
        )

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def my_profile(self) -> dict:
        """GET /users/account"""
        return await self._request("GET", "/users/account")

    async def get_saved_emails(self) -> dict:
        """GET /users/saved-emails"""
        return await self._request("GET", "/users/saved-emails")

    async def add_saved_email(self, email: str) -> dict:
        """POST /users/saved-emails?email=..."""
        return await self._request("POST", "/users/saved-emails", params={"email": email})
