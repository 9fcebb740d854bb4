# services/settings_service.py
from __future__ import annotations
import logging
import typing as t

from services.backend_client import BackendClientAsync, BackendError, is_success
from utils.config import BRAND_NAME

logger = logging.getLogger(__name__)


def _log(msg: str):
    logger.info(f"[SETTINGS_B] {msg}")


class SettingsError(BackendError):
    pass


FOOTER_DESCRIPTION_DEFAULT = (
    "Nhà cung cấp dịch vụ hosting, domain và VPS hàng đầu Việt Nam. "
    "Cam kết mang đến giải pháp công nghệ tốt nhất cho doanh nghiệp."
)

# Thứ tự hiển thị trên form
FOOTER_LINK_DEFAULTS: dict[str, str] = {
    "footerTicketSupportLink": "/support/ticket",
    "footerLiveChatLink": "/support/live-chat",
    "footerNewsLink": "/news",
    "footerHelpCenterLink": "/support/help-center",
    "footerRecruitmentLink": "/careers",
    "footerSslCertificateLink": "/services/ssl-certificate",
    "footerEmailHostingLink": "/services/email-hosting",
    "footerBackupServiceLink": "/services/backup-service",
    "footerUserGuideLink": "/support/user-guide",
    "footerFaqLink": "/support/faq",
    "footerContactLink": "/support/contact",
    "footerAboutLink": "/about",
    "footerPartnersLink": "/partners",
    "footerPrivacyPolicyLink": "/privacy-policy",
    "footerTermsLink": "/terms",
    "footerFacebookLink": "#",
    "footerTwitterLink": "#",
    "footerTiktokLink": "#",
}

FOOTER_LINK_LABELS: dict[str, str] = {
    "footerTicketSupportLink": "Link Gửi ticket hỗ trợ",
    "footerLiveChatLink": "Link Live chat",
    "footerNewsLink": "Link Tin tức",
    "footerHelpCenterLink": "Link Trung tâm hỗ trợ",
    "footerRecruitmentLink": "Link Tuyển dụng",
    "footerSslCertificateLink": "Link SSL Certificate",
    "footerEmailHostingLink": "Link Email Hosting",
    "footerBackupServiceLink": "Link Backup Service",
    "footerUserGuideLink": "Link Hướng dẫn sử dụng",
    "footerFaqLink": "Link FAQ",
    "footerContactLink": "Link Liên hệ",
    "footerAboutLink": "Link Giới thiệu",
    "footerPartnersLink": "Link Đối tác",
    "footerPrivacyPolicyLink": "Link Chính sách bảo mật",
    "footerTermsLink": "Link Điều khoản sử dụng",
    "footerFacebookLink": "Link Facebook",
    "footerTwitterLink": "Link Twitter",
    "footerTiktokLink": "Link TikTok",
}


def default_settings() -> dict[str, t.Any]:
    return {
        # General
        "companyName": BRAND_NAME,
        "companyEmail": "",
        "companyPhone": "",
        "companyAddress": "",
        "companyTaxCode": "",
        "companyAccountingEmail": "",
        "companyBankName": "",
        "companyBankAccount": "",
        "companyBankAccountName": "",
        "companyBankBranch": "",
        # Notification
        "serviceExpiryEmailNotifications": True,
        # Security
        "twoFactorAuth": False,
        "sessionTimeout": 30,
        "passwordPolicy": "strong",
        # System
        "autoBackup": True,
        "backupFrequency": "daily",
        "logRetention": 90,
        # Payment
        "defaultCurrency": "VND",
        "taxRate": 10,
        "paymentGateway": "cash",
        # Footer
        "footerDescription": FOOTER_DESCRIPTION_DEFAULT,
        **FOOTER_LINK_DEFAULTS,
    }


def merge_settings(base: dict, remote: t.Any) -> dict:
    merged = dict(base)
    if isinstance(remote, dict):
        merged.update(remote)
    return merged


def footer_links(settings: dict) -> list[dict]:
    return [
        {"key": key, "label": FOOTER_LINK_LABELS[key], "value": settings.get(key, default)}
        for key, default in FOOTER_LINK_DEFAULTS.items()
    ]


async def load_settings(client: BackendClientAsync, access: str | None, *, strict: bool = False) -> dict:
    """
    strict=False: lỗi backend -> trả defaults (để hiển thị form).
    strict=True: lỗi backend -> SettingsError, dùng trước khi PUT để không ghi đè bằng defaults.
    """
    settings = default_settings()
    st, result = await client.get_settings(access)
    ok = is_success(st) and isinstance(result, dict) and bool(result.get("success"))
    if ok and result.get("data"):
        return merge_settings(settings, result["data"])
    if strict and not ok:
        _log(f"load_settings strict: status={st} → abort")
        raise SettingsError("Không thể tải cài đặt", status_code=502)
    _log(f"load_settings: status={st} → defaults")
    return settings


async def save_settings(
    client: BackendClientAsync,
    access: str | None,
    current: dict,
    changes: dict | None = None,
) -> dict:
    """PUT toàn bộ settings (current + changes). Trả về settings sau khi lưu."""
    payload = merge_settings(current, changes)
    st, result = await client.put_settings(access, payload)
    if is_success(st) and isinstance(result, dict) and result.get("success"):
        return merge_settings(payload, result.get("data"))

    _log(f"save_settings failed status={st}")
    msg = result.get("error") if isinstance(result, dict) else None
    raise SettingsError(str(msg or "Không thể lưu cài đặt"), status_code=502)
