"""
Local heuristic parser: direction keywords and end-to-end text scenarios.
"""

import sys
import unittest
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from expense_parser.extractor.amount_parser import AmountExtractor
from expense_parser.extractor.currency import enhance
from expense_parser.extractor.direction import classify_direction
from expense_parser.extractor.local_parser import parse_local
from expense_parser.schemas import Direction, ParseSource
from expense_parser.utils.text_utils import normalize


def _prepared(text):
    return enhance(normalize(text))


class TestDirection(unittest.TestCase):

    def test_credit_keywords(self):
        self.assertEqual(classify_direction("₹500 credited to your account"), Direction.CREDIT)
        self.assertEqual(classify_direction("Received from Amit"), Direction.CREDIT)

    def test_credit_wins_over_debit(self):
        self.assertEqual(classify_direction("Refund of ₹100 you paid"), Direction.CREDIT)

    def test_debit_keywords(self):
        self.assertEqual(classify_direction("Debited ₹200"), Direction.DEBIT)
        self.assertEqual(classify_direction("Paid to Swiggy"), Direction.DEBIT)

    def test_default_is_debit(self):
        self.assertEqual(classify_direction("hello"), Direction.DEBIT)
        self.assertEqual(classify_direction(""), Direction.DEBIT)


class TestParseLocal(unittest.TestCase):
    """Full local parse over normalized and enhanced text."""

    def test_upi_next_line_recipient(self):
        record = parse_local(_prepared("To\nRAHUL SHARMA\n₹1 +Add item ₹245"))
        self.assertEqual(record.amount, 245.0)
        self.assertEqual(record.merchant, "RAHUL SHARMA")
        self.assertEqual(record.direction, Direction.DEBIT)
        self.assertEqual(record.confidence, 95)
        self.assertEqual(record.strategy, "currency")
        self.assertEqual(record.source, ParseSource.LOCAL)

    def test_transaction_id_ignored(self):
        raw = "Paytm\nPaid to Swiggy\nRs.350.00\nTransaction ID 400812345678"
        record = parse_local(_prepared(raw), raw_text=raw)
        self.assertEqual(record.amount, 350.0)
        self.assertEqual(record.merchant, "Swiggy")
        self.assertEqual(record.direction, Direction.DEBIT)
        self.assertEqual(record.raw_text, raw)

    def test_one_rupee_payment_with_phone_number(self):
        record = parse_local(_prepared("+91 98765 43210\n1\nTo Nisha Sharma on Google Pay"))
        self.assertEqual(record.amount, 1.0)
        self.assertEqual(record.strategy, "standalone")
        self.assertEqual(record.confidence, 70)
        self.assertEqual(record.merchant, "Nisha Sharma")

    def test_no_indicators(self):
        record = parse_local(_prepared("Thank you for visiting"))
        self.assertEqual(record.amount, 0.0)
        self.assertEqual(record.merchant, "Thank you for visiting")
        self.assertEqual(record.direction, Direction.DEBIT)
        self.assertEqual(record.confidence, 0)
        self.assertEqual(record.strategy, "none")

    def test_empty_text(self):
        record = parse_local("")
        self.assertEqual(record.amount, 0.0)
        self.assertEqual(record.merchant, "Unknown Merchant")

    def test_timestamp_and_extractor_passed_through(self):
        now = datetime(2025, 1, 14, 19, 32, 5)
        record = parse_local("Order 5 items", now=now, amount_extractor=AmountExtractor(best_guess_min=1))
        self.assertEqual(record.timestamp, now)
        self.assertEqual(record.amount, 5.0)
        self.assertEqual(record.strategy, "best_guess")


if __name__ == "__main__":
    unittest.main(verbosity=2)
