"""Resend transactional email client (REST API via httpx)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when Resend refuses or fails to accept an email."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Resend error {status_code}: {detail}")


class ResendSender:
    """Sends email through the Resend API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def _call(self, method: str, path: str, json_data: Any = None) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.request(
                    method, f"{self._base_url}{path}", headers=self._headers, json=json_data,
                )
        except httpx.TimeoutException:
            raise EmailError(0, "Resend request timed out")
        except httpx.HTTPError as e:
            raise EmailError(0, f"Resend unreachable: {e}")

        if resp.status_code >= 400:
            detail = resp.text
            try:
                detail = resp.json().get("message", resp.text)
            except Exception:
                pass
            raise EmailError(resp.status_code, str(detail))
        return resp.json() if resp.content else {}

    async def send(
        self,
        sender: str,
        to: str | list[str],
        subject: str,
        html: str,
        text: str = "",
    ) -> str:
        """Send one email and return the Resend message id."""
        payload: dict[str, Any] = {
            "from": sender,
            "to": [to] if isinstance(to, str) else list(to),
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text
        data = await self._call("POST", "/emails", payload)
        message_id = str(data.get("id", ""))
        logger.info("Email accepted by Resend (id=%s)", message_id or "?")
        return message_id

    async def list_domains(self) -> list[dict[str, Any]]:
        """GET /domains — validates the API key without sending mail."""
        data = await self._call("GET", "/domains")
        return list(data.get("data", []) if isinstance(data, dict) else data)
