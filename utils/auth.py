# utils/auth.py
from __future__ import annotations
from typing import Any, Dict, Optional
from urllib.parse import quote

from utils.config import ACCESS_COOKIE_NAME


def get_access_token(request) -> str | None:
    """
    Lấy token theo thứ tự ưu tiên:
    - Header Authorization: Bearer <token>
    - Cookie 'access_token'
    - Cookie tên cấu hình qua ACCESS_COOKIE_NAME (nếu khác)
    """
    auth = request.headers.get("Authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip() or None

    for name in ("access_token", ACCESS_COOKIE_NAME):
        tok = request.cookies.get(name)
        if tok:
            return tok

    return None


def is_admin(me: Optional[Dict[str, Any]]) -> bool:
    return bool(me) and (me.get("role") or "").upper() == "ADMIN"


def login_redirect_url(next_path: str) -> str:
    return f"/login?next={quote(next_path, safe='')}"
