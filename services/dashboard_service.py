# services/dashboard_service.py
"""
Tổng hợp số liệu Dashboard từ 6 danh sách lấy từ Service A:
khách hàng, đơn hàng, hợp đồng, tên miền, hosting, VPS.

- fetch_collections: gọi song song 6 API, API lỗi (non-2xx) -> danh sách rỗng
- compute_dashboard_stats: hàm thuần, tính thống kê tháng + cảnh báo
- DashboardSession: trạng thái của một lần xem màn hình (fetch một lần)
"""
from __future__ import annotations
import asyncio
import logging
import math
import typing as t
from datetime import datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from services.backend_client import BackendClientAsync, is_success
from utils.config import DASHBOARD_TZ
from utils.date_utils import align_tz, days_from, month_add, month_floor, parse_timestamp
from utils.money_utils import format_vi_number, format_vnd, parse_amount

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5
EXPIRY_WINDOW_DAYS = 30


def _log(msg: str):
    logger.info(f"[DASHBOARD_B] {msg}")


def _str_or_none(v: t.Any) -> t.Optional[str]:
    return None if v is None else str(v)


# ===== Records (chuẩn hoá tại biên fetch) =====
class Customer(BaseModel):
    id: t.Any = None

    @classmethod
    def from_raw(cls, raw: dict) -> "Customer":
        return cls(id=raw.get("id"))


class VpsInstance(BaseModel):
    id: t.Any = None

    @classmethod
    def from_raw(cls, raw: dict) -> "VpsInstance":
        return cls(id=raw.get("id"))


class Contract(BaseModel):
    id: t.Any = None
    status: t.Optional[str] = None

    @classmethod
    def from_raw(cls, raw: dict) -> "Contract":
        return cls(id=raw.get("id"), status=_str_or_none(raw.get("status")))


class Domain(BaseModel):
    id: t.Any = None
    customer_id: t.Any = None
    expiry_date: t.Optional[datetime] = None
    status: t.Optional[str] = None

    @classmethod
    def from_raw(cls, raw: dict) -> "Domain":
        return cls(
            id=raw.get("id"),
            customer_id=raw.get("customerId"),
            expiry_date=parse_timestamp(raw.get("expiryDate")),
            status=_str_or_none(raw.get("status")),
        )


class HostingInstance(BaseModel):
    id: t.Any = None
    expiry_date: t.Optional[datetime] = None
    status: t.Optional[str] = None

    @classmethod
    def from_raw(cls, raw: dict) -> "HostingInstance":
        return cls(
            id=raw.get("id"),
            expiry_date=parse_timestamp(raw.get("expiryDate")),
            status=_str_or_none(raw.get("status")),
        )


class Order(BaseModel):
    id: t.Any = None
    created_at: t.Optional[datetime] = None
    total_amount: float = 0.0
    status: t.Optional[str] = None
    payment_status: t.Optional[str] = None
    order_number: t.Optional[str] = None
    customer_name: t.Optional[str] = None

    @classmethod
    def from_raw(cls, raw: dict) -> "Order":
        return cls(
            id=raw.get("id"),
            created_at=parse_timestamp(raw.get("createdAt")),
            total_amount=parse_amount(raw.get("totalAmount")),
            status=_str_or_none(raw.get("status")),
            payment_status=_str_or_none(raw.get("paymentStatus")),
            order_number=_str_or_none(raw.get("orderNumber")),
            customer_name=_str_or_none(raw.get("customerName")),
        )


def extract_records(payload: t.Any) -> list[dict]:
    """{"data": [...]} | {"items": [...]} | [...] -> list[dict]; còn lại -> []"""
    if isinstance(payload, dict):
        payload = payload.get("data") or payload.get("items") or []
    if not isinstance(payload, list):
        return []
    records = [r for r in payload if isinstance(r, dict)]
    if len(records) != len(payload):
        _log(f"extract_records: skipped {len(payload) - len(records)} non-object records")
    return records


class DashboardCollections(BaseModel):
    customers: list[Customer] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    contracts: list[Contract] = Field(default_factory=list)
    domains: list[Domain] = Field(default_factory=list)
    hostings: list[HostingInstance] = Field(default_factory=list)
    vps_list: list[VpsInstance] = Field(default_factory=list)

    @classmethod
    def from_payloads(
        cls,
        *,
        customers: t.Any = None,
        orders: t.Any = None,
        contracts: t.Any = None,
        domains: t.Any = None,
        hostings: t.Any = None,
        vps_list: t.Any = None,
    ) -> "DashboardCollections":
        return cls(
            customers=[Customer.from_raw(r) for r in extract_records(customers)],
            orders=[Order.from_raw(r) for r in extract_records(orders)],
            contracts=[Contract.from_raw(r) for r in extract_records(contracts)],
            domains=[Domain.from_raw(r) for r in extract_records(domains)],
            hostings=[HostingInstance.from_raw(r) for r in extract_records(hostings)],
            vps_list=[VpsInstance.from_raw(r) for r in extract_records(vps_list)],
        )


# ===== Output =====
class OrderSummary(BaseModel):
    id: str
    customer: str
    amount: str
    status: str


class _AlertBase(BaseModel):
    message: str
    description: str


class WarningAlert(_AlertBase):
    type: t.Literal["warning"] = "warning"


class ErrorAlert(_AlertBase):
    type: t.Literal["error"] = "error"


class InfoAlert(_AlertBase):
    type: t.Literal["info"] = "info"


Alert = t.Annotated[t.Union[WarningAlert, ErrorAlert, InfoAlert], Field(discriminator="type")]


class DashboardStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_customers: int = 0
    monthly_orders: int = 0
    active_contracts: int = 0
    monthly_revenue: float = 0.0
    domain_count: int = 0
    hosting_count: int = 0
    vps_count: int = 0
    orders_change_pct: int = 0
    recent_orders: list[OrderSummary] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)


# ===== Aggregation =====
def _round_half_up(x: float) -> int:
    # .5 làm tròn lên (về +inf): -87.5 -> -87
    return int(math.floor(x + 0.5))


def orders_change_pct(current: int, previous: int) -> int:
    if previous > 0:
        return _round_half_up((current - previous) / previous * 100)
    return 100 if current > 0 else 0


def _summarize_order(order: Order) -> OrderSummary:
    return OrderSummary(
        id=order.order_number or f"ORD-{'' if order.id is None else order.id}",
        customer=order.customer_name or "Khách hàng",
        amount=format_vnd(order.total_amount),
        status=(order.status or "").lower() or "pending",
    )


def _is_pending_payment(order: Order) -> bool:
    return order.status == "PENDING" or (order.status == "CONFIRMED" and order.payment_status == "PENDING")


def build_alerts(
    domains: list[Domain],
    hostings: list[HostingInstance],
    orders: list[Order],
    now: datetime,
) -> list[Alert]:
    horizon = days_from(now, EXPIRY_WINDOW_DAYS)

    def _expiry(rec) -> t.Optional[datetime]:
        if rec.expiry_date is None or rec.status != "ACTIVE":
            return None
        return align_tz(rec.expiry_date, now)

    domain_expiries = [e for e in map(_expiry, domains) if e is not None]
    hosting_expiries = [e for e in map(_expiry, hostings) if e is not None]

    expiring_domains = sum(1 for e in domain_expiries if now <= e <= horizon)
    expired_domains = sum(1 for e in domain_expiries if e < now)
    expired_hosting = sum(1 for e in hosting_expiries if e < now)
    pending_payment = sum(1 for o in orders if _is_pending_payment(o))

    alerts: list[Alert] = []
    if expiring_domains:
        alerts.append(WarningAlert(
            message=f"{expiring_domains} tên miền sắp hết hạn",
            description=f"Cần gia hạn trong {EXPIRY_WINDOW_DAYS} ngày tới",
        ))
    if expired_domains:
        alerts.append(ErrorAlert(message=f"{expired_domains} tên miền đã hết hạn", description="Cần xử lý ngay"))
    if expired_hosting:
        alerts.append(ErrorAlert(message=f"{expired_hosting} hosting đã hết hạn", description="Cần xử lý ngay"))
    if pending_payment:
        alerts.append(InfoAlert(message=f"{pending_payment} đơn hàng chờ thanh toán", description="Cần theo dõi"))
    return alerts


def compute_dashboard_stats(collections: DashboardCollections, now: datetime) -> DashboardStats:
    """
    Tính DashboardStats từ các danh sách đã chuẩn hoá.
    Timestamp không có offset được hiểu theo múi giờ của `now`.
    """
    start_of_month = month_floor(now)
    start_of_last_month = month_add(start_of_month, -1)
    # "ngày 0" của tháng này = ngày cuối tháng trước, lúc 00:00
    end_of_last_month = days_from(start_of_month, -1)

    created = [
        (o, align_tz(o.created_at, now)) for o in collections.orders if o.created_at is not None
    ]
    monthly_orders = [o for o, ts in created if ts >= start_of_month]
    last_month_count = sum(1 for _, ts in created if start_of_last_month <= ts <= end_of_last_month)

    return DashboardStats(
        total_customers=len(collections.customers),
        monthly_orders=len(monthly_orders),
        active_contracts=sum(1 for c in collections.contracts if c.status == "ACTIVE"),
        monthly_revenue=sum((o.total_amount for o in monthly_orders), 0.0),
        domain_count=sum(1 for d in collections.domains if d.customer_id),
        hosting_count=len(collections.hostings),
        vps_count=len(collections.vps_list),
        orders_change_pct=orders_change_pct(len(monthly_orders), last_month_count),
        recent_orders=[_summarize_order(o) for o in collections.orders[:RECENT_ORDERS_LIMIT]],
        alerts=build_alerts(collections.domains, collections.hostings, collections.orders, now),
    )


# ===== Fetch orchestration =====
async def fetch_collections(client: BackendClientAsync, access: str | None) -> DashboardCollections:
    """
    Gọi song song 6 API. API trả non-2xx -> danh sách rỗng.
    Lỗi mạng của bất kỳ request nào sẽ được ném ra cho caller.
    """
    names = ("customers", "orders", "contracts", "domains", "hostings", "vps_list")
    results = await asyncio.gather(
        client.list_customers(access),
        client.list_orders(access),
        client.list_contracts(access),
        client.list_domains(access),
        client.list_hosting(access, purchased="all"),
        client.list_vps(access, purchased="all"),
    )

    payloads: dict[str, t.Any] = {}
    for name, (status, data) in zip(names, results):
        if is_success(status):
            payloads[name] = data
        else:
            _log(f"fetch_collections: {name} failed status={status} → empty")
            payloads[name] = None
    return DashboardCollections.from_payloads(**payloads)


def _local_now() -> datetime:
    return datetime.now(ZoneInfo(DASHBOARD_TZ))


class DashboardSession:
    """Trạng thái Dashboard cho một lần xem màn hình."""

    def __init__(
        self,
        client: BackendClientAsync,
        access: str | None,
        *,
        now_fn: t.Callable[[], datetime] | None = None,
    ):
        self.client = client
        self.access = access
        self.now_fn = now_fn or _local_now
        self.stats = DashboardStats()
        self.is_loading = True
        self.has_fetched = False

    async def load(self) -> DashboardStats:
        # chỉ fetch lần đầu
        if not self.has_fetched:
            self.has_fetched = True
            await self.fetch_dashboard_data()
        return self.stats

    async def refresh(self) -> DashboardStats:
        await self.fetch_dashboard_data()
        return self.stats

    async def fetch_dashboard_data(self) -> None:
        self.is_loading = True
        try:
            collections = await fetch_collections(self.client, self.access)
            self.stats = compute_dashboard_stats(collections, self.now_fn())
        except Exception:
            logger.exception("[DASHBOARD_B] Error fetching dashboard data")
        finally:
            self.is_loading = False


# ===== View helpers =====
ORDER_STATUS_LABELS = {
    "pending": "Chờ xử lý",
    "confirmed": "Đã xác nhận",
    "completed": "Hoàn thành",
    "cancelled": "Đã hủy",
}


def order_status_label(status: str | None) -> str:
    return ORDER_STATUS_LABELS.get((status or "").lower(), "Chờ xử lý")


def build_stat_cards(stats: DashboardStats) -> list[dict]:
    pct = stats.orders_change_pct
    return [
        {"title": "Tổng Khách Hàng", "value": format_vi_number(stats.total_customers),
         "change": "+0%", "change_type": "positive", "icon": "users"},
        {"title": "Đơn Hàng Tháng", "value": str(stats.monthly_orders),
         "change": f"{pct:+d}%", "change_type": "positive" if pct >= 0 else "negative", "icon": "cart"},
        {"title": "Hợp Đồng Hoạt Động", "value": str(stats.active_contracts),
         "change": "+0%", "change_type": "positive", "icon": "file"},
        {"title": "Doanh Thu Tháng", "value": format_vnd(stats.monthly_revenue),
         "change": "+0%", "change_type": "positive", "icon": "trending"},
    ]


def build_service_rows(stats: DashboardStats) -> list[dict]:
    return [
        {"title": "Tên Miền", "count": stats.domain_count, "icon": "globe"},
        {"title": "Hosting", "count": stats.hosting_count, "icon": "server"},
        {"title": "VPS", "count": stats.vps_count, "icon": "server"},
    ]
