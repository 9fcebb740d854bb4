# utils/templates.py
from pathlib import Path

from starlette.templating import Jinja2Templates

from .auth import get_access_token
from .config import ACCESS_COOKIE_NAME, BRAND_NAME
from .date_utils import format_vi_date, parse_timestamp
from .money_utils import format_vi_number, format_vnd

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def is_logged_in(request) -> bool:
    return bool(get_access_token(request))

templates.env.globals["ACCESS_COOKIE_NAME"] = ACCESS_COOKIE_NAME
templates.env.globals["BRAND_NAME"] = BRAND_NAME
templates.env.globals["is_logged_in"] = is_logged_in


def datetimeformat(value, fmt="%d/%m/%Y %H:%M:%S"):
    if not value:
        return ""
    ts = parse_timestamp(value)
    if ts is None:
        return str(value)
    return ts.strftime(fmt)

templates.env.filters["datetimeformat"] = datetimeformat
templates.env.filters["vnd"] = format_vnd
templates.env.filters["vi_number"] = format_vi_number
templates.env.filters["vi_date"] = format_vi_date
