"""HTTP client for the obicei server's push and settings endpoints."""

import asyncio
import logging
from typing import Any

import requests

from obicei.client.platform import PushSubscriptionHandle

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ServerApiError(Exception):
    """A server call failed (network error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ServerApi:
    """Blocking ``requests`` calls run in a worker thread."""

    def __init__(
        self,
        base_url: str,
        session_token: str = "",
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session_token = session_token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        if not self.session_token:
            return {}
        return {"Authorization": f"Bearer {self.session_token}"}

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, json=body, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ServerApiError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            raise ServerApiError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response.json() if response.content else None

    async def _call(self, method: str, path: str, body: Any = None) -> Any:
        return await asyncio.to_thread(self._request, method, path, body)

    async def get_vapid_public_key(self) -> str:
        data = await self._call("GET", "/api/push/vapid-public-key")
        return data["publicKey"]

    async def subscribe(
        self,
        subscription: PushSubscriptionHandle,
        reminders: list[dict],
        global_reminder: dict | None = None,
    ) -> None:
        """Upsert the subscription and its reminder list (UTC) in one call."""
        body: dict[str, Any] = {"subscription": subscription.to_json(), "reminders": reminders}
        if global_reminder is not None:
            body["globalReminder"] = global_reminder
        await self._call("POST", "/api/push/subscribe", body)

    async def unsubscribe(self, endpoint: str) -> None:
        """Delete this device's subscription server-side."""
        await self._call("POST", "/api/push/unsubscribe", {"endpoint": endpoint})

    async def get_settings(self) -> dict:
        """Server-side settings; reminder times are UTC."""
        return await self._call("GET", "/api/settings")
