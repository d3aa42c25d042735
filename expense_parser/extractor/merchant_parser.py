"""
Merchant / payee extraction.

Ordered strategies, first success wins:
    1. "To" / "Paid to" lines (UPI apps); name may sit on the next line
    2. "Received from" lines (credits)
    3. Product name right above "Add item" / a price (food delivery, e-commerce)
    4. ALL-CAPS recipient names (bank transfers)
    5. Known brands
    6. First meaningful line
"""

import logging
import re
from typing import List, Optional

from expense_parser.utils.text_utils import split_lines, strip_phone_numbers

logger = logging.getLogger(__name__)

UNKNOWN_MERCHANT = "Unknown Merchant"

KNOWN_MERCHANTS = [
    "Swiggy", "Zomato", "Uber", "Ola", "Amazon", "Flipkart",
    "Myntra", "BigBasket", "Dunzo", "Blinkit", "Zepto",
    "Starbucks", "McDonald", "KFC", "Domino", "Pizza Hut",
]

CAPS_EXCLUDED_TOKENS = ("BANK", "UPI", "GOOGLE", "PHONEPE", "PAYTM", "PAY")
COMMERCE_KEYWORDS = ("add item", "add to cart", "buy now")

PAID_TO_LINE_RE = re.compile(r'^(?:paid\s+)?to\b|\bpaid\s+to\b', re.IGNORECASE)
PAID_TO_PREFIX_RE = re.compile(r'^.*?\b(?:paid\s+)?to\b[:\s]*', re.IGNORECASE)
RECEIVED_FROM_LINE_RE = re.compile(r'\breceived\s+from\b', re.IGNORECASE)
RECEIVED_FROM_PREFIX_RE = re.compile(r'^.*?\breceived\s+from\b[:\s]*', re.IGNORECASE)

# "Nisha Sharma on Google Pay" -> "Nisha Sharma"
APP_SUFFIX_RE = re.compile(
    r'\s+(?:on|via|using|through)\s+(?:google\s*pay|gpay|phonepe|paytm|bhim|amazon\s*pay|upi)\b.*$',
    re.IGNORECASE,
)

PRICE_RE = re.compile(r'₹.*\d')
LONG_DIGITS_RE = re.compile(r'\d{10,}')
YEAR_RE = re.compile(r'202\d')
ALL_CAPS_RE = re.compile(r'^[A-Z ]{3,}$')
ONLY_DIGITS_RE = re.compile(r'^\d+$')


def _clean_candidate(candidate: str) -> str:
    return APP_SUFFIX_RE.sub("", strip_phone_numbers(candidate)).strip(" :-,")


def _usable(candidate: str) -> bool:
    return bool(candidate) and "..." not in candidate and "…" not in candidate and len(candidate) > 2


def _after_keyword(lines: List[str], line_re: re.Pattern, prefix_re: re.Pattern) -> Optional[str]:
    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        if not line_re.search(line):
            continue

        candidate = _clean_candidate(prefix_re.sub("", line, count=1))
        if _usable(candidate):
            return candidate

        # Line was just "To:" or the name got truncated; try the next one.
        if i + 1 < len(lines):
            next_line = _clean_candidate(lines[i + 1].strip())
            if _usable(next_line):
                return next_line
    return None


def _paid_to(lines: List[str]) -> Optional[str]:
    return _after_keyword(lines, PAID_TO_LINE_RE, PAID_TO_PREFIX_RE)


def _received_from(lines: List[str]) -> Optional[str]:
    return _after_keyword(lines, RECEIVED_FROM_LINE_RE, RECEIVED_FROM_PREFIX_RE)


def _product_name(lines: List[str]) -> Optional[str]:
    for i in range(len(lines) - 1):
        line = lines[i].strip()
        next_line = lines[i + 1].lower()
        if not (any(k in next_line for k in COMMERCE_KEYWORDS) or PRICE_RE.search(next_line)):
            continue
        if 3 <= len(line) <= 50 and not LONG_DIGITS_RE.search(line) and not YEAR_RE.search(line):
            return line
    return None


def _all_caps_name(lines: List[str]) -> Optional[str]:
    for line in lines:
        trimmed = line.strip()
        if ALL_CAPS_RE.match(trimmed) and not any(token in trimmed for token in CAPS_EXCLUDED_TOKENS):
            return trimmed
    return None


def _known_brand(lines: List[str]) -> Optional[str]:
    for line in lines:
        lowered = line.lower()
        for merchant in KNOWN_MERCHANTS:
            if merchant.lower() in lowered:
                return merchant
    return None


def _first_meaningful_line(lines: List[str]) -> Optional[str]:
    for line in lines:
        trimmed = line.strip()
        lowered = trimmed.lower()
        if (len(trimmed) >= 3
                and not ONLY_DIGITS_RE.match(trimmed)
                and not LONG_DIGITS_RE.search(trimmed)
                and "payment" not in lowered
                and "success" not in lowered):
            return trimmed
    return None


MERCHANT_STRATEGIES = [
    ("paid_to", _paid_to),
    ("received_from", _received_from),
    ("product_name", _product_name),
    ("all_caps", _all_caps_name),
    ("known_brand", _known_brand),
    ("first_line", _first_meaningful_line),
]


def extract_merchant(text: str) -> str:
    """
    Extract the payee / merchant name.

    Returns:
        Merchant name, or "Unknown Merchant" when every strategy fails
    """
    if not text:
        return UNKNOWN_MERCHANT

    lines = split_lines(text)
    for name, strategy in MERCHANT_STRATEGIES:
        merchant = strategy(lines)
        if merchant:
            logger.debug("Merchant %r found by %s strategy", merchant, name)
            return merchant

    logger.debug("No merchant found, using default")
    return UNKNOWN_MERCHANT
