# routers/dashboard.py
from __future__ import annotations
import logging
from datetime import datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from services.backend_client import BackendClientAsync, get_backend_client
from services.dashboard_service import (
    DashboardSession,
    build_service_rows,
    build_stat_cards,
    order_status_label,
)
from utils.auth import get_access_token, login_redirect_url
from utils.templates import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])


def _log(msg: str):
    logger.info(f"[DASHBOARD_B] {msg}")


def get_clock() -> Optional[Callable[[], datetime]]:
    # None -> DashboardSession dùng giờ local theo DASHBOARD_TZ
    return None


@router.get("/", response_class=HTMLResponse)
async def home_redirect():
    return RedirectResponse(url="/dashboard", status_code=303)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_index(
    request: Request,
    client: BackendClientAsync = Depends(get_backend_client),
    clock: Optional[Callable[[], datetime]] = Depends(get_clock),
):
    token = get_access_token(request)
    if not token:
        _log("AUTH missing → redirect /login")
        return RedirectResponse(url=login_redirect_url("/dashboard"), status_code=303)

    session = DashboardSession(client, token, now_fn=clock)
    stats = await session.load()

    return templates.TemplateResponse(
        request,
        "dashboard/index.html",
        {
            "title": "Dashboard",
            "stats": stats,
            "cards": build_stat_cards(stats),
            "services": build_service_rows(stats),
            "status_label": order_status_label,
            "is_loading": session.is_loading,
        },
    )


@router.get("/dashboard/data", response_class=JSONResponse)
async def dashboard_data(
    request: Request,
    client: BackendClientAsync = Depends(get_backend_client),
    clock: Optional[Callable[[], datetime]] = Depends(get_clock),
):
    token = get_access_token(request)
    if not token:
        return JSONResponse({"error": "unauthorized"}, status_code=401)

    session = DashboardSession(client, token, now_fn=clock)
    stats = await session.load()

    return JSONResponse(
        {
            "stats": stats.model_dump(mode="json", by_alias=True),
            "cards": build_stat_cards(stats),
            "services": build_service_rows(stats),
            "isLoading": session.is_loading,
        },
        status_code=200,
    )
