# tests/test_invoices.py
import pytest

from services.invoice_service import (
    InvoiceError,
    InvoiceSummary,
    filter_invoices,
    invoice_stats,
    load_invoices,
    send_invoice,
)

from conftest import AUTH, TOKEN, FakeBackend

ADMIN = {"id": 1, "role": "ADMIN"}
STAFF = {"id": 2, "role": "STAFF"}

RAW_INVOICES = [
    {"id": 1, "invoiceNumber": "INV-001", "status": "SENT", "issueDate": "2025-10-01", "dueDate": "2025-10-15",
     "customerName": "Nguyễn Văn A", "customerEmail": "a@example.com", "total": 1000000, "balance": 400000},
    {"id": 2, "invoiceNumber": "INV-002", "status": "OVERDUE", "issueDate": "2025-09-01", "dueDate": "2025-09-15",
     "customer": {"name": "Công ty B", "email": "b@example.com"}, "totals": {"total": "2500000", "currency": "VND"}},
    {"id": 3, "invoiceNumber": "INV-003", "status": "PAID", "total": "abc"},
]


def _summaries():
    return [InvoiceSummary.from_raw(r) for r in RAW_INVOICES]


def test_summary_fallbacks():
    a, b, c = _summaries()
    assert a.customer_name == "Nguyễn Văn A"
    assert b.customer_name == "Công ty B"
    assert b.customer_email == "b@example.com"
    assert b.total == "2500000"
    assert b.currency == "VND"
    assert c.customer_name == "Không xác định"
    assert c.customer_email is None
    assert c.balance is None


def test_filter_by_number_customer_email_and_status_label():
    invoices = _summaries()
    assert [i.id for i in filter_invoices(invoices, "")] == [1, 2, 3]
    assert [i.id for i in filter_invoices(invoices, "   ")] == [1, 2, 3]
    assert [i.id for i in filter_invoices(invoices, "inv-002")] == [2]
    assert [i.id for i in filter_invoices(invoices, "công ty")] == [2]
    assert [i.id for i in filter_invoices(invoices, "a@example")] == [1]
    assert [i.id for i in filter_invoices(invoices, "quá hạn")] == [2]


def test_invoice_stats():
    stats = invoice_stats(_summaries())
    assert stats == {
        "count": 3,
        "total_amount": 3500000.0,
        "outstanding": 400000.0 + 2500000.0,
        "overdue_count": 1,
    }


@pytest.mark.asyncio
async def test_load_invoices_error_and_unexpected_body():
    backend = FakeBackend({("GET", "/api/invoices"): (500, {"detail": "x"})})
    with pytest.raises(InvoiceError) as exc:
        await load_invoices(backend.client(), TOKEN)
    assert exc.value.message == "Không thể tải danh sách hoá đơn"

    backend.routes[("GET", "/api/invoices")] = (200, {"success": False})
    assert await load_invoices(backend.client(), TOKEN) == []


@pytest.mark.asyncio
async def test_send_invoice_requires_admin():
    backend = FakeBackend()
    with pytest.raises(InvoiceError) as exc:
        await send_invoice(backend.client(), TOKEN, STAFF, 1, "send")
    assert exc.value.status_code == 403
    assert backend.requests == []


@pytest.mark.asyncio
async def test_send_invoice_modes():
    backend = FakeBackend({
        ("POST", "/api/invoice/5/send"): (200, {"success": True}),
        ("POST", "/api/invoice/5/reminder"): (200, {"success": True}),
    })
    assert await send_invoice(backend.client(), TOKEN, ADMIN, 5, "send") == "Đã gửi hoá đơn cho khách hàng"
    assert await send_invoice(backend.client(), TOKEN, ADMIN, 5, "reminder") == "Đã gửi email nhắc thanh toán"


@pytest.mark.asyncio
async def test_send_invoice_failure_uses_backend_message():
    backend = FakeBackend({("POST", "/api/invoice/5/send"): (400, {"success": False, "message": "Thiếu email"})})
    with pytest.raises(InvoiceError) as exc:
        await send_invoice(backend.client(), TOKEN, ADMIN, 5, "send")
    assert exc.value.message == "Thiếu email"


# ---------- routes ----------
def _me(backend, me):
    backend.routes[("GET", "/auth/me")] = (200, me)


def test_invoices_data_route(app_client, backend):
    backend.routes[("GET", "/api/invoices")] = (200, {"success": True, "data": RAW_INVOICES})

    r = app_client.get("/invoices/data", params={"q": "INV-00"}, headers=AUTH)

    assert r.status_code == 200
    body = r.json()
    assert [i["invoice_number"] for i in body["data"]] == ["INV-001", "INV-002", "INV-003"]
    assert body["stats"]["overdue_count"] == 1


def test_invoices_data_route_backend_down(app_client, backend):
    backend.routes[("GET", "/api/invoices")] = (503, None)
    r = app_client.get("/invoices/data", headers=AUTH)
    assert r.status_code == 502
    assert r.json() == {"success": False, "message": "Không thể tải danh sách hoá đơn"}


def test_invoice_delete_route(app_client, backend):
    _me(backend, ADMIN)
    backend.routes[("DELETE", "/api/invoice/7")] = (200, {"success": True})

    r = app_client.delete("/invoices/7", headers=AUTH)

    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Đã xoá hoá đơn thành công"}


def test_invoice_delete_route_forbidden_for_staff(app_client, backend):
    _me(backend, STAFF)
    r = app_client.delete("/invoices/7", headers=AUTH)
    assert r.status_code == 403
    assert r.json()["message"] == "Bạn không có quyền xoá hoá đơn"
    assert ("DELETE", "/api/invoice/7") not in backend.paths()


def test_invoice_reminder_route(app_client, backend):
    _me(backend, ADMIN)
    backend.routes[("POST", "/api/invoice/4/reminder")] = (200, {"success": True})
    r = app_client.post("/invoices/4/reminder", headers=AUTH)
    assert r.status_code == 200
    assert r.json()["message"] == "Đã gửi email nhắc thanh toán"


def test_invoices_page_renders(app_client, backend):
    _me(backend, ADMIN)
    backend.routes[("GET", "/api/invoices")] = (200, {"success": True, "data": RAW_INVOICES})
    r = app_client.get("/invoices", headers=AUTH)
    assert r.status_code == 200
    assert "INV-002" in r.text
    assert "Quá hạn" in r.text
    assert "1/10/2025" in r.text
