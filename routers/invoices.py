# routers/invoices.py
from __future__ import annotations
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Path, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from services.backend_client import BackendClientAsync, BackendError, get_backend_client
from services.invoice_service import (
    STATUS_CONFIG,
    delete_invoice,
    filter_invoices,
    invoice_stats,
    load_invoices,
    send_invoice,
)
from utils.auth import get_access_token, is_admin, login_redirect_url
from utils.templates import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _log(msg: str):
    logger.info(f"[INVOICES_B] {msg}")


def _unauth():
    return JSONResponse({"error": "unauthorized"}, status_code=401)


def _fail(e: BackendError):
    return JSONResponse({"success": False, "message": e.message}, status_code=e.status_code)


def _upstream_down(e: httpx.RequestError):
    _log(f"upstream EXC: {e}")
    return JSONResponse({"success": False, "message": "Lỗi kết nối Service A"}, status_code=502)


@router.get("", response_class=HTMLResponse)
async def invoices_page(
    request: Request,
    q: Optional[str] = Query(None),
    client: BackendClientAsync = Depends(get_backend_client),
):
    token = get_access_token(request)
    if not token:
        return RedirectResponse(url=login_redirect_url("/invoices"), status_code=303)

    me = await client.fetch_me(token)
    load_err = None
    invoices = []
    try:
        invoices = await load_invoices(client, token)
    except BackendError as e:
        load_err = e.message
    except httpx.RequestError as e:
        _log(f"invoices_page EXC: {e}")
        load_err = "Không thể tải danh sách hoá đơn"

    return templates.TemplateResponse(
        request,
        "invoices/index.html",
        {
            "title": "Hoá đơn",
            "invoices": filter_invoices(invoices, q),
            "stats": invoice_stats(invoices),
            "status_config": STATUS_CONFIG,
            "init_q": q or "",
            "is_admin": is_admin(me),
            "load_err": load_err,
        },
    )


@router.get("/data", response_class=JSONResponse)
async def invoices_data(
    request: Request,
    q: Optional[str] = Query(None),
    client: BackendClientAsync = Depends(get_backend_client),
):
    token = get_access_token(request)
    if not token:
        return _unauth()

    try:
        invoices = await load_invoices(client, token)
    except BackendError as e:
        return _fail(e)
    except httpx.RequestError as e:
        return _upstream_down(e)

    return JSONResponse(
        {
            "data": [inv.model_dump(mode="json") for inv in filter_invoices(invoices, q)],
            "stats": invoice_stats(invoices),
        },
        status_code=200,
    )


async def _send(request: Request, client: BackendClientAsync, invoice_id: int, mode: str):
    token = get_access_token(request)
    if not token:
        return _unauth()

    me = await client.fetch_me(token)
    try:
        msg = await send_invoice(client, token, me, invoice_id, mode)
    except BackendError as e:
        return _fail(e)
    except httpx.RequestError as e:
        return _upstream_down(e)
    return JSONResponse({"success": True, "message": msg}, status_code=200)


@router.post("/{invoice_id}/send", response_class=JSONResponse)
async def invoice_send(
    request: Request,
    invoice_id: int = Path(..., ge=1),
    client: BackendClientAsync = Depends(get_backend_client),
):
    return await _send(request, client, invoice_id, "send")


@router.post("/{invoice_id}/reminder", response_class=JSONResponse)
async def invoice_reminder(
    request: Request,
    invoice_id: int = Path(..., ge=1),
    client: BackendClientAsync = Depends(get_backend_client),
):
    return await _send(request, client, invoice_id, "reminder")


@router.delete("/{invoice_id}", response_class=JSONResponse)
async def invoice_delete(
    request: Request,
    invoice_id: int = Path(..., ge=1),
    client: BackendClientAsync = Depends(get_backend_client),
):
    token = get_access_token(request)
    if not token:
        return _unauth()

    me = await client.fetch_me(token)
    try:
        msg = await delete_invoice(client, token, me, invoice_id)
    except BackendError as e:
        return _fail(e)
    except httpx.RequestError as e:
        return _upstream_down(e)
    return JSONResponse({"success": True, "message": msg}, status_code=200)
