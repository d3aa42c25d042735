"""
Tiered amount extraction for payment screenshots and notifications.

Strategies run in reliability order and the first one that yields a value
wins; candidates from different tiers are never compared with each other.

    tier          confidence   example
    currency          95       "₹1 +Add item ₹245"  -> 245 (max on the line)
    commerce          90       "Buy now 1299"
    keyword           85       "Paid: 500", "Debited 1,200.00"
    standalone        70       "1"  (UPI amount alone on its line)
    best_guess        50       largest bare number in [10, 100000]
"""

import logging
import re
from typing import Callable, List, Optional

from expense_parser.schemas import AmountMatch, AmountTier
from expense_parser.utils.text_utils import normalize, parse_amount_safe, split_lines

logger = logging.getLogger(__name__)

# Exclusive upper bound for any extracted amount
MAX_AMOUNT = 1_000_000

DEFAULT_BEST_GUESS_MIN = 10.0
DEFAULT_BEST_GUESS_MAX = 100000.0

_NUMBER = r'(\d[\d,]*(?:\.\d{1,2})?)'

CURRENCY_AMOUNT_RE = re.compile(r'(?:₹|\bRs\.?|\bINR)\s*' + _NUMBER, re.IGNORECASE)
COMMERCE_AMOUNT_RE = re.compile(
    r'\b(?:Add item|Add to cart|Add|Buy now|Order now|Pay now)\s*(?:₹|Rs\.?)?\s*' + _NUMBER,
    re.IGNORECASE,
)
KEYWORD_AMOUNT_RE = re.compile(
    r'\b(?:Paid|Sent|Grand Total|Subtotal|Total|Amount|Price|Pay|Debited|Credited)'
    r'\s*[:\-]?\s*(?:₹|Rs\.?)?\s*' + _NUMBER,
    re.IGNORECASE,
)
STANDALONE_AMOUNT_RE = re.compile(r'^\d[\d,]*(?:\.\d{1,2})?$')
ANY_NUMBER_RE = re.compile(r'\b(\d{1,6}(?:\.\d{2})?)\b')


def _in_range(value: float) -> bool:
    return 0 < value < MAX_AMOUNT


def _currency_tier(lines: List[str]) -> Optional[float]:
    # Max across every currency-marked value: a small default ("₹1") shown
    # next to the real total must not win.
    best = 0.0
    for line in lines:
        for match in CURRENCY_AMOUNT_RE.finditer(line):
            value = parse_amount_safe(match.group(1))
            if _in_range(value) and value > best:
                best = value
    return best or None


def _first_valid(pattern: re.Pattern, lines: List[str]) -> Optional[float]:
    for line in lines:
        for match in pattern.finditer(line):
            value = parse_amount_safe(match.group(1))
            if _in_range(value):
                return value
    return None


def _commerce_tier(lines: List[str]) -> Optional[float]:
    return _first_valid(COMMERCE_AMOUNT_RE, lines)


def _keyword_tier(lines: List[str]) -> Optional[float]:
    return _first_valid(KEYWORD_AMOUNT_RE, lines)


def _standalone_tier(lines: List[str]) -> Optional[float]:
    # Even ₹1 is a real UPI payment, so no plausibility floor here.
    for line in lines:
        trimmed = line.strip()
        if STANDALONE_AMOUNT_RE.match(trimmed):
            value = parse_amount_safe(trimmed)
            if _in_range(value):
                return value
    return None


def _best_guess_tier(lines: List[str], low: float, high: float) -> Optional[float]:
    best = 0.0
    for line in lines:
        for match in ANY_NUMBER_RE.finditer(line):
            value = parse_amount_safe(match.group(1))
            if low <= value <= high and _in_range(value) and value > best:
                best = value
    return best or None


class AmountExtractor:
    """
    Ordered strategy list for amount extraction.

    The best-guess band is tunable; other tiers accept any value in
    (0, 1_000_000).
    """

    def __init__(self, best_guess_min: float = DEFAULT_BEST_GUESS_MIN,
                 best_guess_max: float = DEFAULT_BEST_GUESS_MAX):
        self.best_guess_min = best_guess_min
        self.best_guess_max = best_guess_max
        self.strategies: List[tuple] = [
            (AmountTier.CURRENCY, _currency_tier),
            (AmountTier.COMMERCE, _commerce_tier),
            (AmountTier.KEYWORD, _keyword_tier),
            (AmountTier.STANDALONE, _standalone_tier),
            (AmountTier.BEST_GUESS, self._best_guess),
        ]

    def _best_guess(self, lines: List[str]) -> Optional[float]:
        return _best_guess_tier(lines, self.best_guess_min, self.best_guess_max)

    def extract(self, text: str) -> AmountMatch:
        if not text:
            return AmountMatch()

        # Normalizing twice is harmless; direct callers get the ID/phone
        # exclusion too.
        lines = split_lines(normalize(text))

        for tier, strategy in self.strategies:
            value = strategy(lines)
            if value is not None:
                logger.debug("Amount %s found by %s tier (%d%% confidence)", value, tier.value, tier.confidence)
                return AmountMatch(value=value, tier=tier)

        logger.debug("No amount found")
        return AmountMatch()


_default_extractor = AmountExtractor()


def extract_amount_match(text: str, extractor: AmountExtractor = None) -> AmountMatch:
    """Amount plus the tier that produced it."""
    return (extractor or _default_extractor).extract(text)


def extract_amount(text: str) -> float:
    """
    Extract the transaction amount from payment text.

    Returns:
        The amount, or 0.0 when no tier matched
    """
    return _default_extractor.extract(text).value
