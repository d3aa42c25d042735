"""
Preprocessing package for notification screening.
"""

from .notification_filters import should_process_notification
from .sms_amount import extract_sms_amount

__all__ = ["should_process_notification", "extract_sms_amount"]
