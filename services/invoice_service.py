# services/invoice_service.py
from __future__ import annotations
import logging
import typing as t

from pydantic import BaseModel

from services.backend_client import BackendClientAsync, BackendError, is_success
from utils.auth import is_admin
from utils.money_utils import to_number

logger = logging.getLogger(__name__)

InvoiceStatus = t.Literal["DRAFT", "SENT", "PARTIAL", "OVERDUE", "PAID"]

STATUS_CONFIG: dict[str, dict[str, str]] = {
    "DRAFT": {"label": "Nháp", "variant": "bg-slate-100 text-slate-700"},
    "SENT": {"label": "Đã gửi", "variant": "bg-blue-100 text-blue-700"},
    "PARTIAL": {"label": "Thanh toán một phần", "variant": "bg-amber-100 text-amber-700"},
    "OVERDUE": {"label": "Quá hạn", "variant": "bg-red-100 text-red-700"},
    "PAID": {"label": "Đã thanh toán", "variant": "bg-emerald-100 text-emerald-700"},
}

SEND_MODES = ("send", "reminder")


def _log(msg: str):
    logger.info(f"[INVOICES_B] {msg}")


class InvoiceError(BackendError):
    pass


def _coalesce(*values):
    # chỉ bỏ qua None, giữ "" và 0
    for v in values:
        if v is not None:
            return v
    return None


def _str_or_none(v) -> t.Optional[str]:
    return None if v is None else str(v)


def status_label(status: str | None) -> str:
    return STATUS_CONFIG.get(status or "", {}).get("label", status or "")


class InvoiceSummary(BaseModel):
    id: t.Any = None
    invoice_number: str = ""
    status: str = "DRAFT"
    issue_date: t.Optional[str] = None
    due_date: t.Optional[str] = None
    customer_name: str = "Không xác định"
    customer_email: t.Optional[str] = None
    total: t.Any = 0
    currency: str = "VND"
    balance: t.Any = None

    @classmethod
    def from_raw(cls, raw: dict) -> "InvoiceSummary":
        customer = raw.get("customer") if isinstance(raw.get("customer"), dict) else {}
        totals = raw.get("totals") if isinstance(raw.get("totals"), dict) else {}
        return cls(
            id=raw.get("id"),
            invoice_number=str(raw.get("invoiceNumber") or ""),
            status=str(raw.get("status") or "DRAFT"),
            issue_date=_str_or_none(raw.get("issueDate")),
            due_date=_str_or_none(raw.get("dueDate")),
            customer_name=str(_coalesce(raw.get("customerName"), customer.get("name"), "Không xác định")),
            customer_email=_str_or_none(_coalesce(raw.get("customerEmail"), customer.get("email"))),
            total=_coalesce(raw.get("total"), totals.get("total"), 0),
            currency=str(_coalesce(raw.get("currency"), totals.get("currency"), "VND")),
            balance=_coalesce(raw.get("balance"), totals.get("balance")),
        )

    @property
    def status_label(self) -> str:
        return status_label(self.status)


async def load_invoices(client: BackendClientAsync, access: str | None) -> list[InvoiceSummary]:
    st, result = await client.list_invoices(access)
    if not is_success(st):
        _log(f"load_invoices: status={st}")
        raise InvoiceError("Không thể tải danh sách hoá đơn", status_code=502)
    if isinstance(result, dict) and result.get("success") and isinstance(result.get("data"), list):
        return [InvoiceSummary.from_raw(r) for r in result["data"] if isinstance(r, dict)]
    return []


def filter_invoices(invoices: list[InvoiceSummary], term: str | None) -> list[InvoiceSummary]:
    if not (term or "").strip():
        return invoices
    term = term.lower()
    return [
        inv for inv in invoices
        if term in inv.invoice_number.lower()
        or term in inv.customer_name.lower()
        or term in (inv.customer_email or "").lower()
        or term in inv.status_label.lower()
    ]


def invoice_stats(invoices: list[InvoiceSummary]) -> dict:
    return {
        "count": len(invoices),
        "total_amount": sum((to_number(inv.total) for inv in invoices), 0.0),
        "outstanding": sum((to_number(_coalesce(inv.balance, inv.total)) for inv in invoices), 0.0),
        "overdue_count": sum(1 for inv in invoices if inv.status == "OVERDUE"),
    }


def _result_ok(st: int, result: t.Any) -> bool:
    return is_success(st) and isinstance(result, dict) and bool(result.get("success"))


def _result_message(result: t.Any, default: str) -> str:
    if isinstance(result, dict) and result.get("message"):
        return str(result["message"])
    return default


async def send_invoice(
    client: BackendClientAsync,
    access: str | None,
    me: dict | None,
    invoice_id: int,
    mode: str,
) -> str:
    """Gửi hoá đơn / nhắc thanh toán. Trả về thông báo thành công."""
    if not is_admin(me):
        raise InvoiceError("Bạn không có quyền gửi email hoá đơn", status_code=403)
    if mode not in SEND_MODES:
        raise InvoiceError(f"mode không hợp lệ: {mode}", status_code=422)

    st, result = await client.send_invoice(access, invoice_id, mode)
    if not _result_ok(st, result):
        _log(f"send_invoice id={invoice_id} mode={mode} failed status={st}")
        raise InvoiceError(_result_message(result, "Không thể gửi email hoá đơn"), status_code=502)
    return "Đã gửi hoá đơn cho khách hàng" if mode == "send" else "Đã gửi email nhắc thanh toán"


async def delete_invoice(
    client: BackendClientAsync,
    access: str | None,
    me: dict | None,
    invoice_id: int,
) -> str:
    if not is_admin(me):
        raise InvoiceError("Bạn không có quyền xoá hoá đơn", status_code=403)

    st, result = await client.delete_invoice(access, invoice_id)
    if not _result_ok(st, result):
        _log(f"delete_invoice id={invoice_id} failed status={st}")
        raise InvoiceError(_result_message(result, "Không thể xoá hoá đơn"), status_code=502)
    return "Đã xoá hoá đơn thành công"
