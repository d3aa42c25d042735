"""
Currency marker recovery.

OCR engines regularly drop the ₹ glyph from payment screenshots. The amount
cascade gives its highest tier to currency-marked numbers, so putting the
marker back in front of numbers that sit next to commerce/payment keywords
raises recall without touching the extraction logic.
"""

import logging
import re

logger = logging.getLogger(__name__)

CURRENCY_MARKER = "₹"

# (pattern, replacement) applied in order. Every pattern requires the number
# to follow whitespace or a keyword directly, so numbers already carrying the
# marker are never rewritten again.
_REWRITES = [
    # "Add item 245" -> "Add item ₹245", "Buy now 1299" -> "Buy now ₹1299"
    (re.compile(r'\b(Add item|Add to cart|Add|Buy now|Order now|Item)[ \t]+(\d+)', re.IGNORECASE),
     r'\1 ₹\2'),
    # "Total 245" / "Amount: 500" -> "Total ₹245" / "Amount ₹500"
    (re.compile(r'\b(Grand Total|Subtotal|Total|Price|Amount|Paid|Pay|Sent)[ \t]*:?[ \t]*(\d+)', re.IGNORECASE),
     r'\1 ₹\2'),
    # "Rs245", "Rs. 245" -> "₹245"
    (re.compile(r'\bRs\.?[ \t]*(\d+)', re.IGNORECASE), r'₹\1'),
    # "INR 500" -> "₹500"
    (re.compile(r'\bINR[ \t]*(\d+)', re.IGNORECASE), r'₹\1'),
    # UPI layouts: amount alone on its line, 2-6 digits
    (re.compile(r'^[ \t]*(\d{2,6}(?:\.\d{2})?)[ \t]*$', re.MULTILINE), r'₹\1'),
    # "Total\n245" -> "Total\n₹245"
    (re.compile(r'\b(Total|Price|Amount|Pay|Subtotal)[ \t]*\n[ \t]*(\d+)', re.IGNORECASE),
     '\\1\n₹\\2'),
    # "Debited 500" -> "Debited ₹500"
    (re.compile(r'\b(Debited|Credited|Received|Refund)[ \t]+(\d+)', re.IGNORECASE), r'\1 ₹\2'),
]


def enhance(text: str) -> str:
    """
    Re-insert currency markers lost during OCR.

    Pure and idempotent: enhance(enhance(t)) == enhance(t).

    Args:
        text: Normalized OCR / notification text

    Returns:
        Text with ₹ in front of likely amounts; Rs./INR rewritten to ₹
    """
    if not text:
        return text

    enhanced = text
    for pattern, replacement in _REWRITES:
        enhanced = pattern.sub(replacement, enhanced)

    if enhanced != text:
        logger.debug("Enhanced text with currency markers:\n%s", enhanced)
    return enhanced
