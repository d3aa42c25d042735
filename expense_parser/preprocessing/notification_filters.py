"""
Notification screening before anything reaches the extraction pipeline.

Decides whether a posted notification comes from a payment-capable app,
whether its content looks financial, and whether it should be processed
at all (selected app + SMS payment format).
"""

import re
from typing import Iterable, Optional

from expense_parser.extractor.sms_timestamp import matches_sms_format

FINANCIAL_PACKAGE_TOKENS = (
    "paytm", "phonepe", "googlepay", "gpay", "tez", "whatsapp", "bank", "upi",
    "amazonpay", "bhim", "cred", "mobikwik", "freecharge", "sbi", "hdfc",
    "icici", "axis", "kotak",
)

FINANCIAL_KEYWORDS = (
    "debited", "credited", "paid", "received", "sent", "payment", "transaction",
    "balance", "rs.", "rs ", "inr", "₹", "rupee",
)

DEFAULT_SELECTED_APPS = ("com.whatsapp", "com.google.android.apps.messaging")

_DECIMAL_AMOUNT_RE = re.compile(r'\d+\.\d{2}')


def is_financial_app(package_name: Optional[str]) -> bool:
    if not package_name:
        return False
    pkg = package_name.lower()
    return any(token in pkg for token in FINANCIAL_PACKAGE_TOKENS)


def is_financial_notification(title: Optional[str], text: Optional[str]) -> bool:
    combined = f"{title or ''} {text or ''}".lower()
    return any(k in combined for k in FINANCIAL_KEYWORDS) or bool(_DECIMAL_AMOUNT_RE.search(combined))


def is_app_selected(package_name: Optional[str], selected_apps: Optional[Iterable[str]] = None) -> bool:
    apps = DEFAULT_SELECTED_APPS if selected_apps is None else tuple(selected_apps)
    return bool(package_name) and package_name in apps


def notification_text(text: Optional[str], big_text: Optional[str] = None) -> str:
    """Expanded text wins over the collapsed one when present."""
    return big_text if big_text else (text or "")


def should_process_notification(package_name: Optional[str], title: Optional[str], text: Optional[str],
                                selected_apps: Optional[Iterable[str]] = None,
                                own_package: Optional[str] = None) -> bool:
    """
    A notification is processed when it comes from a selected app (never
    our own) and its text matches the SMS payment format.
    """
    if own_package and package_name == own_package:
        return False
    if not is_app_selected(package_name, selected_apps):
        return False
    return matches_sms_format(text or "")
