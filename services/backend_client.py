# services/backend_client.py
from __future__ import annotations
import json
import logging
import typing as t

import httpx

from utils.config import API_HTTP_TIMEOUT, SERVICE_A_BASE_URL

logger = logging.getLogger(__name__)


def _log(msg: str):
    logger.info(f"[BACKEND] {msg}")


def _preview_body(data: t.Any, limit: int = 300) -> str:
    try:
        s = json.dumps(data, ensure_ascii=False)
    except (TypeError, ValueError):
        s = str(data)
    if len(s) > limit:
        return s[:limit] + "...(truncated)"
    return s


def _auth_headers(access: str | None) -> dict:
    return {"Authorization": f"Bearer {access}"} if access else {}


class BackendError(Exception):
    """Lỗi nghiệp vụ khi gọi Service A, kèm thông báo cho người dùng."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def is_success(status: int) -> bool:
    return 200 <= status < 300


async def _request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: dict,
    params: dict | None = None,
    payload: dict | None = None,
) -> tuple[int, t.Any]:
    _log(f"→ {method} {url} params={params or {}}")
    r = await client.request(method, url, headers=headers, params=params or {}, json=payload)
    try:
        js = r.json()
    except ValueError:
        _log(f"← {r.status_code} {url} text={(r.text or '')[:300]}")
        return r.status_code, None
    _log(f"← {r.status_code} {url} json={_preview_body(js)}")
    return r.status_code, js


class BackendClientAsync:
    """
    Client gọi REST backend (Service A).
    Mọi hàm trả về (status_code, json | None). Lỗi mạng (httpx.RequestError)
    không bị nuốt ở đây, caller tự quyết định.
    """

    def __init__(
        self,
        base_url: str = SERVICE_A_BASE_URL,
        *,
        timeout: float = API_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _get(self, access: str | None, path: str, params: dict | None = None) -> tuple[int, t.Any]:
        async with self._client() as c:
            return await _request_json(c, "GET", path, _auth_headers(access), params)

    async def _send(self, method: str, access: str | None, path: str, payload: dict | None = None) -> tuple[int, t.Any]:
        async with self._client() as c:
            return await _request_json(c, method, path, _auth_headers(access), payload=payload)

    # ---------- auth ----------
    async def fetch_me(self, access: str | None) -> dict | None:
        if not access:
            return None
        try:
            st, js = await self._get(access, "/auth/me")
        except httpx.RequestError as e:
            _log(f"fetch_me EXC: {e}")
            return None
        return js if st == 200 and isinstance(js, dict) else None

    # ---------- dashboard collections ----------
    async def list_customers(self, access: str | None) -> tuple[int, t.Any]:
        return await self._get(access, "/api/customers")

    async def list_orders(self, access: str | None) -> tuple[int, t.Any]:
        return await self._get(access, "/api/orders")

    async def list_contracts(self, access: str | None) -> tuple[int, t.Any]:
        return await self._get(access, "/api/contracts")

    async def list_domains(self, access: str | None) -> tuple[int, t.Any]:
        return await self._get(access, "/api/domain")

    async def list_hosting(self, access: str | None, *, purchased: str = "all") -> tuple[int, t.Any]:
        return await self._get(access, "/api/hosting", {"purchased": purchased})

    async def list_vps(self, access: str | None, *, purchased: str = "all") -> tuple[int, t.Any]:
        return await self._get(access, "/api/vps", {"purchased": purchased})

    # ---------- invoices ----------
    async def list_invoices(self, access: str | None) -> tuple[int, t.Any]:
        return await self._get(access, "/api/invoices")

    async def send_invoice(self, access: str | None, invoice_id: int, mode: str) -> tuple[int, t.Any]:
        endpoint = "send" if mode == "send" else "reminder"
        return await self._send("POST", access, f"/api/invoice/{invoice_id}/{endpoint}")

    async def delete_invoice(self, access: str | None, invoice_id: int) -> tuple[int, t.Any]:
        return await self._send("DELETE", access, f"/api/invoice/{invoice_id}")

    # ---------- settings ----------
    async def get_settings(self, access: str | None) -> tuple[int, t.Any]:
        return await self._get(access, "/api/settings")

    async def put_settings(self, access: str | None, payload: dict) -> tuple[int, t.Any]:
        return await self._send("PUT", access, "/api/settings", payload)


backend_client = BackendClientAsync()


def get_backend_client() -> BackendClientAsync:
    return backend_client
