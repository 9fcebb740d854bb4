# routers/site_settings.py
from __future__ import annotations
import logging
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from services.backend_client import BackendClientAsync, BackendError, get_backend_client
from services.settings_service import footer_links, load_settings, save_settings
from utils.auth import get_access_token, login_redirect_url
from utils.templates import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


def _log(msg: str):
    logger.info(f"[SETTINGS_B] {msg}")


@router.get("", response_class=HTMLResponse)
async def settings_page(request: Request, client: BackendClientAsync = Depends(get_backend_client)):
    token = get_access_token(request)
    if not token:
        return RedirectResponse(url=login_redirect_url("/settings"), status_code=303)

    load_err = None
    try:
        settings = await load_settings(client, token)
    except httpx.RequestError as e:
        _log(f"settings_page EXC: {e}")
        load_err = "Không thể tải cài đặt"
        settings = None

    return templates.TemplateResponse(
        request,
        "settings/index.html",
        {
            "title": "Cài đặt",
            "settings": settings or {},
            "footer_links": footer_links(settings or {}),
            "load_err": load_err,
        },
    )


@router.get("/data", response_class=JSONResponse)
async def settings_data(request: Request, client: BackendClientAsync = Depends(get_backend_client)):
    token = get_access_token(request)
    if not token:
        return JSONResponse({"error": "unauthorized"}, status_code=401)

    try:
        settings = await load_settings(client, token)
    except httpx.RequestError as e:
        _log(f"settings_data EXC: {e}")
        return JSONResponse({"success": False, "error": "Không thể tải cài đặt"}, status_code=502)
    return JSONResponse({"success": True, "data": settings}, status_code=200)


@router.put("/data", response_class=JSONResponse)
async def settings_save(
    request: Request,
    changes: Dict[str, Any] = Body(...),
    client: BackendClientAsync = Depends(get_backend_client),
):
    token = get_access_token(request)
    if not token:
        return JSONResponse({"error": "unauthorized"}, status_code=401)

    try:
        current = await load_settings(client, token, strict=True)
        saved = await save_settings(client, token, current, changes)
    except BackendError as e:
        return JSONResponse({"success": False, "error": e.message}, status_code=e.status_code)
    except httpx.RequestError as e:
        _log(f"settings_save EXC: {e}")
        return JSONResponse({"success": False, "error": "Đã xảy ra lỗi khi lưu cài đặt"}, status_code=502)

    return JSONResponse(
        {"success": True, "data": saved, "message": "Đã lưu cài đặt thành công"},
        status_code=200,
    )
