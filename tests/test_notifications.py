"""
Notification screening, SMS timestamp and SMS amount helpers.
"""

import sys
import unittest
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from expense_parser.extractor.sms_timestamp import matches_sms_format, parse_sms_timestamp
from expense_parser.preprocessing.notification_filters import (
    is_app_selected,
    is_financial_app,
    is_financial_notification,
    notification_text,
    should_process_notification,
)
from expense_parser.preprocessing.sms_amount import extract_sms_amount

SMS = "Rs.350.00 spent at SWIGGY (2025:01:14 19:32:05)"


class TestSmsTimestamp(unittest.TestCase):

    def test_parse(self):
        self.assertEqual(parse_sms_timestamp(SMS), datetime(2025, 1, 14, 19, 32, 5))

    def test_missing_or_invalid(self):
        self.assertIsNone(parse_sms_timestamp("Rs.350.00 spent at SWIGGY"))
        self.assertIsNone(parse_sms_timestamp("(2025:13:40 25:00:00)"))
        self.assertIsNone(parse_sms_timestamp(""))

    def test_sms_format(self):
        self.assertTrue(matches_sms_format(SMS))
        self.assertFalse(matches_sms_format("₹350 spent (2025:01:14 19:32:05)"))
        self.assertFalse(matches_sms_format("Rs.350.00 spent at SWIGGY"))


class TestNotificationFilters(unittest.TestCase):

    def test_financial_app(self):
        self.assertTrue(is_financial_app("com.phonepe.app"))
        self.assertTrue(is_financial_app("net.one97.paytm"))
        self.assertFalse(is_financial_app("com.spotify.music"))
        self.assertFalse(is_financial_app(None))

    def test_financial_notification(self):
        self.assertTrue(is_financial_notification("Payment received", None))
        self.assertTrue(is_financial_notification("Offer", "Flat 40.00 off today"))
        self.assertFalse(is_financial_notification("Hi", "see you tomorrow"))

    def test_app_selection(self):
        self.assertTrue(is_app_selected("com.whatsapp"))
        self.assertFalse(is_app_selected("com.phonepe.app"))
        self.assertTrue(is_app_selected("com.phonepe.app", ["com.phonepe.app"]))
        self.assertFalse(is_app_selected(None))

    def test_notification_text_prefers_big_text(self):
        self.assertEqual(notification_text("short", "long"), "long")
        self.assertEqual(notification_text("short", None), "short")
        self.assertEqual(notification_text(None, None), "")

    def test_should_process(self):
        self.assertTrue(should_process_notification("com.whatsapp", "HDFC", SMS))
        self.assertFalse(should_process_notification("com.whatsapp", "Chat", "see you at 5"))
        self.assertFalse(should_process_notification("com.spotify.music", "HDFC", SMS))
        self.assertFalse(should_process_notification(
            "com.whatsapp", "HDFC", SMS, selected_apps=["com.whatsapp"], own_package="com.whatsapp"
        ))


class TestSmsAmount(unittest.TestCase):

    def test_amounts(self):
        self.assertEqual(extract_sms_amount(SMS), 350.0)
        self.assertEqual(extract_sms_amount("INR 1,250 debited from A/c"), 1250.0)
        self.assertEqual(extract_sms_amount("₹ 99 sent"), 99.0)

    def test_no_amount(self):
        self.assertIsNone(extract_sms_amount("hello there"))
        self.assertIsNone(extract_sms_amount(""))


if __name__ == "__main__":
    unittest.main(verbosity=2)
