"""
Remote parser adapter tests. The HTTP session is mocked; no network access.
"""

import json
import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from expense_parser.config import PipelineConfig
from expense_parser.exceptions import (
    RemoteResponseError,
    RemoteTimeoutError,
    RemoteUnavailableError,
)
from expense_parser.extractor.remote_parser import (
    DEFAULT_CHAT_MODEL,
    RemoteParser,
    expense_from_payload,
    strip_code_fences,
)
from expense_parser.schemas import Direction, ParseSource


def _session_returning(body=None, status_code=200, json_error=None):
    response = MagicMock()
    response.__enter__.return_value = response
    response.status_code = status_code
    response.text = json.dumps(body) if body is not None else ""
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    session = MagicMock()
    session.post.return_value = response
    return session


def _session_raising(exc):
    session = MagicMock()
    session.post.side_effect = exc
    return session


class TestRequestBuilding(unittest.TestCase):

    def test_structured_payload(self):
        parser = RemoteParser("http://parser.local/api/ocr/parse", timeout=3.0, session=MagicMock())
        kwargs = parser.build_request("Paid to Swiggy ₹350")
        self.assertEqual(kwargs["json"], {"text": "Paid to Swiggy ₹350"})
        self.assertEqual(kwargs["timeout"], 3.0)
        self.assertIsNone(kwargs["params"])

    def test_gemini_key_in_query(self):
        parser = RemoteParser("http://gen.local", mode="gemini", api_key="k123", session=MagicMock())
        kwargs = parser.build_request("₹245")
        self.assertEqual(kwargs["params"], {"key": "k123"})
        prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
        self.assertIn("₹245", prompt)
        self.assertNotIn("Authorization", kwargs["headers"])

    def test_chat_bearer_and_default_model(self):
        parser = RemoteParser("http://chat.local", mode="chat", api_key="k123", session=MagicMock())
        kwargs = parser.build_request("₹245")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer k123")
        self.assertEqual(kwargs["json"]["model"], DEFAULT_CHAT_MODEL)
        self.assertEqual(kwargs["json"]["messages"][1]["content"], "₹245")

    def test_invalid_construction(self):
        with self.assertRaises(ValueError):
            RemoteParser("")
        with self.assertRaises(ValueError):
            RemoteParser("http://x", mode="soap", session=MagicMock())

    def test_from_config(self):
        self.assertIsNone(RemoteParser.from_config(PipelineConfig()))
        parser = RemoteParser.from_config(PipelineConfig(remote_url="http://x", remote_timeout=4.0))
        self.assertEqual(parser.endpoint, "http://x")
        self.assertEqual(parser.timeout, 4.0)
        parser.close()


class TestResponseHandling(unittest.TestCase):

    def test_structured_success(self):
        body = {"success": True, "data": {"amount": 350.0, "merchant": "Swiggy", "type": "debit", "confidence": 92}}
        parser = RemoteParser("http://x", session=_session_returning(body))
        record = parser.parse("Paid to Swiggy ₹350")
        self.assertEqual(record.amount, 350.0)
        self.assertEqual(record.merchant, "Swiggy")
        self.assertEqual(record.direction, Direction.DEBIT)
        self.assertEqual(record.confidence, 92)
        self.assertEqual(record.source, ParseSource.REMOTE)

    def test_structured_success_false(self):
        parser = RemoteParser("http://x", session=_session_returning({"success": False}))
        with self.assertRaises(RemoteResponseError):
            parser.parse("text")

    def test_gemini_fenced_reply(self):
        reply = '```json\n{"amount": 245, "merchant": "RAHUL SHARMA", "type": "debit", "confidence": 88}\n```'
        body = {"candidates": [{"content": {"parts": [{"text": reply}]}}]}
        parser = RemoteParser("http://x", mode="gemini", session=_session_returning(body))
        record = parser.parse("To\nRAHUL SHARMA\n₹245")
        self.assertEqual(record.amount, 245.0)
        self.assertEqual(record.merchant, "RAHUL SHARMA")

    def test_chat_reply(self):
        reply = json.dumps({"amount": 500, "merchant": "Amit", "type": "credit", "confidence": 80})
        body = {"choices": [{"message": {"content": reply}}]}
        parser = RemoteParser("http://x", mode="chat", session=_session_returning(body))
        record = parser.parse("Received ₹500 from Amit")
        self.assertEqual(record.direction, Direction.CREDIT)
        self.assertEqual(record.amount, 500.0)

    def test_generative_reply_with_string_amount_rejected(self):
        reply = json.dumps({"amount": "500", "merchant": "Amit", "type": "credit"})
        body = {"choices": [{"message": {"content": reply}}]}
        parser = RemoteParser("http://x", mode="chat", session=_session_returning(body))
        with self.assertRaises(RemoteResponseError):
            parser.parse("text")

    def test_generative_reply_without_amount_rejected(self):
        reply = json.dumps({"merchant": "Amit", "type": "credit"})
        for mode, body in [
            ("chat", {"choices": [{"message": {"content": reply}}]}),
            ("gemini", {"candidates": [{"content": {"parts": [{"text": reply}]}}]}),
        ]:
            with self.subTest(mode=mode):
                parser = RemoteParser("http://x", mode=mode, session=_session_returning(body))
                with self.assertRaises(RemoteResponseError):
                    parser.parse("text")

    def test_empty_candidates(self):
        parser = RemoteParser("http://x", mode="gemini", session=_session_returning({"candidates": []}))
        with self.assertRaises(RemoteResponseError):
            parser.parse("text")

    def test_non_json_reply(self):
        body = {"choices": [{"message": {"content": "I could not find an amount."}}]}
        parser = RemoteParser("http://x", mode="chat", session=_session_returning(body))
        with self.assertRaises(RemoteResponseError):
            parser.parse("text")

    def test_server_error(self):
        parser = RemoteParser("http://x", session=_session_returning({"error": "boom"}, status_code=502))
        with self.assertRaises(RemoteUnavailableError) as ctx:
            parser.parse("text")
        self.assertEqual(ctx.exception.status_code, 502)

    def test_malformed_json_body(self):
        parser = RemoteParser("http://x", session=_session_returning(json_error=ValueError("bad json")))
        with self.assertRaises(RemoteResponseError):
            parser.parse("text")

    def test_without_session_each_call_opens_its_own_connection(self):
        body = {"success": True, "data": {"amount": 350.0, "merchant": "Swiggy", "type": "debit"}}
        response = _session_returning(body).post.return_value
        parser = RemoteParser("http://x")
        self.assertIsNone(parser.session)
        with patch("expense_parser.extractor.remote_parser.requests.post", return_value=response) as post:
            parser.parse("one")
            parser.parse("two")
        self.assertEqual(post.call_count, 2)
        self.assertEqual(post.call_args.kwargs["json"], {"text": "two"})
        parser.close()

    def test_timeout(self):
        parser = RemoteParser("http://x", session=_session_raising(requests.exceptions.Timeout("slow")))
        with self.assertRaises(RemoteTimeoutError):
            parser.parse("text")

    def test_connection_error(self):
        parser = RemoteParser("http://x", session=_session_raising(requests.exceptions.ConnectionError("refused")))
        with self.assertRaises(RemoteUnavailableError):
            parser.parse("text")

    def test_zero_amount_passes_with_warning(self):
        body = {"success": True, "data": {"amount": 0, "merchant": "Payment", "type": "debit"}}
        parser = RemoteParser("http://x", session=_session_returning(body))
        with self.assertLogs("expense_parser.extractor.remote_parser", level="WARNING"):
            record = parser.parse("text")
        self.assertEqual(record.amount, 0.0)


class TestPayloadHelpers(unittest.TestCase):

    def test_strip_code_fences(self):
        self.assertEqual(strip_code_fences('```json\n{"a": 1}\n```'), '{"a": 1}')
        self.assertEqual(strip_code_fences('{"a": 1}'), '{"a": 1}')

    def test_payload_coercion(self):
        record = expense_from_payload({"amount": "1,250", "merchant": "", "type": "CREDIT"}, "t")
        self.assertEqual(record.amount, 1250.0)
        self.assertEqual(record.merchant, "Unknown")
        self.assertEqual(record.direction, Direction.CREDIT)

    def test_unknown_type_defaults_to_debit(self):
        record = expense_from_payload({"amount": 10, "merchant": "X", "type": "transfer"}, "t")
        self.assertEqual(record.direction, Direction.DEBIT)

    def test_invalid_payloads(self):
        for data in [None, {"amount": -5}, {"amount": True}, {"amount": 5, "merchant": 12}, {"amount": 5, "type": 1}]:
            with self.subTest(data=data):
                with self.assertRaises(RemoteResponseError):
                    expense_from_payload(data, "t")


if __name__ == "__main__":
    unittest.main(verbosity=2)
