"""
Deterministic local parser: the fallback whenever the remote tier fails.
Has no error path; an inconclusive text yields a zero-amount record.
"""

import logging
from datetime import datetime
from typing import Optional

from expense_parser.extractor.amount_parser import AmountExtractor, extract_amount_match
from expense_parser.extractor.direction import classify_direction
from expense_parser.extractor.merchant_parser import extract_merchant
from expense_parser.schemas import ExpenseRecord, ParseSource

logger = logging.getLogger(__name__)


def parse_local(text: str,
                raw_text: Optional[str] = None,
                now: Optional[datetime] = None,
                amount_extractor: Optional[AmountExtractor] = None) -> ExpenseRecord:
    """
    Build an ExpenseRecord from normalized + enhanced text.

    Args:
        text: Prepared text (normalized and currency-enhanced)
        raw_text: Original observation text kept for audit; defaults to `text`
        now: Capture time; defaults to datetime.now()
        amount_extractor: Extractor with a custom best-guess band

    Returns:
        ExpenseRecord with confidence taken from the matched amount tier
    """
    text = text or ""
    match = extract_amount_match(text, amount_extractor)
    merchant = extract_merchant(text)
    direction = classify_direction(text)

    logger.info(
        "Local parse - amount: %s (%s), merchant: %s, type: %s",
        match.value, match.tier.value, merchant, direction.value,
    )

    return ExpenseRecord(
        amount=match.value,
        merchant=merchant,
        direction=direction,
        confidence=match.tier.confidence,
        raw_text=raw_text if raw_text is not None else text,
        timestamp=now or datetime.now(),
        source=ParseSource.LOCAL,
        strategy=match.tier.value,
    )
