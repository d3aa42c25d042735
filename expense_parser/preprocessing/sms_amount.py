"""Quick amount hint for incoming SMS bodies."""

import re
from typing import Optional

from expense_parser.utils.text_utils import parse_amount_safe

SMS_CURRENCY_RE = re.compile(r'(?:rs\.?|inr|₹)\s*(\d[\d,]*(?:\.\d{2})?)', re.IGNORECASE)


def extract_sms_amount(message: str) -> Optional[float]:
    """First currency-marked amount in the message, or None."""
    if not message:
        return None
    match = SMS_CURRENCY_RE.search(message)
    if not match:
        return None
    value = parse_amount_safe(match.group(1))
    return value if value > 0 else None
