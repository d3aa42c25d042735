"""
Timestamp parsing for SMS-formatted notifications such as
"Rs.350.00 spent at SWIGGY (2025:01:14 19:32:05)".
"""

import re
from datetime import datetime
from typing import Optional

SMS_TIMESTAMP_RE = re.compile(r'\((\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})\)')
SMS_AMOUNT_RE = re.compile(r'Rs\.\d+\.\d{2}')


def parse_sms_timestamp(text: str) -> Optional[datetime]:
    """Return the (YYYY:MM:DD HH:MM:SS) timestamp, or None if absent/invalid."""
    if not text:
        return None
    match = SMS_TIMESTAMP_RE.search(text)
    if not match:
        return None
    try:
        return datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def matches_sms_format(text: str) -> bool:
    """True when text carries both an Rs.<d>.<dd> amount and a parenthesised timestamp."""
    if not text:
        return False
    return bool(SMS_AMOUNT_RE.search(text)) and bool(SMS_TIMESTAMP_RE.search(text))
