"""
Text normalization and cleaning utilities for payment OCR / notification text.
Removes the high-cardinality numeric noise (phone numbers, reference IDs,
years, account numbers) that Indian payment screenshots are full of, and
rebuilds reading order from OCR block geometry.
"""

import re
from typing import List, Optional, Sequence

from expense_parser.schemas import TextBlock


# Indian mobile numbers: optional +91 / leading 0, ten digits starting 6-9,
# optionally split 5+5 by a space or hyphen. Never crosses a line break.
PHONE_RE = re.compile(r'(?:\+91[ \-]?|0)?[6-9]\d{4}[ \-]?\d{5}')

# A phone match plus any digits glued to it, so no fragment of the number
# survives as a stray amount.
PHONE_RUN_RE = re.compile(r'\d*' + PHONE_RE.pattern + r'\d*')

# Transaction / reference IDs
LONG_ID_RE = re.compile(r'\b\d{12,}\b')

# Calendar years misread as amounts; skips "₹2025", "2025.00", "2,025"
YEAR_RE = re.compile(r'(?<![₹.,])\b202\d\b(?![.,]\d)')

# "A/c 1234", "A/c XX1234", "Account 998877"
ACCOUNT_RE = re.compile(r'\b(?:A/c|Account)\s*(?:no\.?\s*)?[Xx*]*\d+', re.IGNORECASE)

# Blocks whose tops are within this many pixels sit on the same line
SAME_LINE_TOLERANCE = 20


def normalize(raw: str) -> str:
    """
    Remove numeric distractors from raw OCR / notification text.

    Order matters: later patterns assume earlier noise is gone.
        1. Indian mobile numbers
        2. 12+ digit transaction/reference IDs
        3. bare years 2020-2029
        4. A/c / Account number fragments

    Each match is replaced by a single space so neighbouring tokens
    never fuse into a new number.

    Args:
        raw: Text as produced by the OCR engine or notification listener

    Returns:
        Cleaned text with line structure preserved
    """
    if not isinstance(raw, str):
        raise TypeError(f"normalize() expects str, got {type(raw).__name__}")
    if not raw:
        return ""

    text = PHONE_RUN_RE.sub(" ", raw)
    text = LONG_ID_RE.sub(" ", text)
    text = YEAR_RE.sub(" ", text)
    text = ACCOUNT_RE.sub(" ", text)
    return text


def strip_phone_numbers(text: str) -> str:
    """Remove phone numbers from a single candidate string and trim it."""
    if not text:
        return ""
    return re.sub(r'\s{2,}', ' ', PHONE_RUN_RE.sub("", text)).strip()


def order_text_blocks(blocks: Optional[Sequence[TextBlock]], tolerance: int = SAME_LINE_TOLERANCE) -> str:
    """
    Rebuild reading order from OCR text blocks.

    Blocks are grouped into horizontal bands (a block joins the current band
    when its top is within `tolerance` pixels of the band's first block),
    bands are read top-to-bottom and blocks left-to-right inside a band.
    Blocks without geometry keep their relative order after positioned ones.

    Returns:
        Block texts joined by newlines, empty blocks dropped
    """
    if not blocks:
        return ""

    positioned = [b for b in blocks if b.bounding_box is not None]
    unpositioned = [b for b in blocks if b.bounding_box is None]

    positioned.sort(key=lambda b: (b.bounding_box.top, b.bounding_box.left))

    bands: List[List[TextBlock]] = []
    anchor_top = None
    for block in positioned:
        top = block.bounding_box.top
        if anchor_top is None or top - anchor_top > tolerance:
            bands.append([block])
            anchor_top = top
        else:
            bands[-1].append(block)

    ordered: List[TextBlock] = []
    for band in bands:
        ordered.extend(sorted(band, key=lambda b: b.bounding_box.left))
    ordered.extend(unpositioned)

    return "\n".join(b.text.strip() for b in ordered if b.text and b.text.strip())


def split_lines(text: str) -> List[str]:
    return text.split("\n") if text else []


def parse_amount_safe(value: str) -> float:
    """Parse '1,250.50' style strings; 0.0 when unparseable."""
    if not value or not isinstance(value, str):
        return 0.0
    try:
        return float(value.replace(",", "").strip())
    except ValueError:
        return 0.0
