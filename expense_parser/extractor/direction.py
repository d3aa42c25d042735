"""Transaction direction from keywords."""

from expense_parser.schemas import Direction

CREDIT_KEYWORDS = ("credited", "received", "refund", "cashback")
DEBIT_KEYWORDS = ("debited", "paid", "sent", "payment successful")


def classify_direction(text: str) -> Direction:
    """
    Credit keywords are checked first, so "Refund of ₹100 you paid" is a
    credit. Anything without a keyword defaults to debit.
    """
    if not text:
        return Direction.DEBIT

    lowered = text.lower()
    if any(k in lowered for k in CREDIT_KEYWORDS):
        return Direction.CREDIT
    if any(k in lowered for k in DEBIT_KEYWORDS):
        return Direction.DEBIT
    return Direction.DEBIT
