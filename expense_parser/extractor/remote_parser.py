"""
Client adapter for the remote text-to-expense endpoint.

Three wire shapes are supported:
    structured  POST {"text": ...} -> {"success": true, "data": {amount, merchant, type}}
    gemini      generateContent envelope -> candidates[0].content.parts[0].text (JSON, maybe fenced)
    chat        OpenAI-compatible chat completions -> choices[0].message.content (JSON)

One attempt per call, no retries: every failure raises a RemoteParseError
and the pipeline falls back to the local parser.
"""

import json
import logging
import re
from concurrent.futures import Executor, Future
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from expense_parser.exceptions import (
    RemoteParseError,
    RemoteResponseError,
    RemoteTimeoutError,
    RemoteUnavailableError,
)
from expense_parser.extractor.prompts import SYSTEM_PROMPT, build_generative_prompt
from expense_parser.schemas import Direction, ExpenseRecord, ParseSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_CHAT_MODEL = "llama-3.3-70b-versatile"

_FENCE_RE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove ```json ... ``` markers around a model reply."""
    return _FENCE_RE.sub("", text.strip()).strip()


def _loads_object(raw: str, what: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise RemoteResponseError(f"{what} is not valid JSON: {e}")
    if not isinstance(parsed, dict):
        raise RemoteResponseError(f"{what} is not a JSON object")
    return parsed


def _coerce_amount(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise RemoteResponseError("amount must be a number")
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.replace(",", "").replace("₹", "").strip())
        except ValueError:
            raise RemoteResponseError(f"amount is not numeric: {value!r}")
    else:
        raise RemoteResponseError("amount must be a number")
    if amount < 0:
        raise RemoteResponseError(f"amount is negative: {amount}")
    return amount


def _coerce_direction(value: Any) -> Direction:
    if value is None:
        return Direction.DEBIT
    if not isinstance(value, str):
        raise RemoteResponseError("type must be a string")
    try:
        return Direction(value.strip().lower())
    except ValueError:
        logger.warning("Unknown transaction type %r from remote parser, using debit", value)
        return Direction.DEBIT


def _coerce_confidence(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(0, min(100, int(value)))


def expense_from_payload(data: Dict[str, Any], text: str) -> ExpenseRecord:
    """Turn a {amount, merchant, type, ...} object into an ExpenseRecord."""
    if not isinstance(data, dict):
        raise RemoteResponseError("expense payload is not an object")

    merchant = data.get("merchant")
    if merchant is not None and not isinstance(merchant, str):
        raise RemoteResponseError("merchant must be a string")
    category = data.get("category")

    amount = _coerce_amount(data.get("amount"))
    if amount <= 0:
        logger.warning("Remote parser returned amount 0 or missing")

    return ExpenseRecord(
        amount=amount,
        merchant=merchant or "Unknown",
        direction=_coerce_direction(data.get("type")),
        category=category if isinstance(category, str) and category.strip() else None,
        confidence=_coerce_confidence(data.get("confidence")),
        raw_text=text,
        timestamp=datetime.now(),
        source=ParseSource.REMOTE,
    )


class RemoteParser:
    """
    Single-attempt HTTP client for structured expense parsing.

    Args:
        endpoint: Full URL to POST to
        timeout: Connect/read timeout in seconds
        mode: "structured", "gemini" or "chat"
        api_key: Key for gemini (query param) or chat (bearer token)
        model: Model name for chat mode
        session: Optional requests.Session reused by every call; it must be safe
            to share across the pipeline's worker threads. Without one each
            call opens and closes its own connection.
    """

    def __init__(self, endpoint: str, timeout: float = DEFAULT_TIMEOUT, mode: str = "structured",
                 api_key: Optional[str] = None, model: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        if not endpoint:
            raise ValueError("endpoint is required")
        if mode not in ("structured", "gemini", "chat"):
            raise ValueError(f"Unsupported remote mode: {mode}")
        self.endpoint = endpoint
        self.timeout = timeout
        self.mode = mode
        self.api_key = api_key
        self.model = model
        self.session = session

    @classmethod
    def from_config(cls, config) -> Optional["RemoteParser"]:
        if not config.remote_enabled:
            return None
        return cls(
            endpoint=config.remote_url,
            timeout=config.remote_timeout,
            mode=config.remote_mode,
            api_key=config.api_key,
            model=config.model,
        )

    # --- request building ---

    def build_request(self, text: str) -> Dict[str, Any]:
        """Keyword arguments for session.post()."""
        headers = {"Content-Type": "application/json"}
        params = None

        if self.mode == "structured":
            payload = {"text": text}
        elif self.mode == "gemini":
            payload = {
                "contents": [{"parts": [{"text": build_generative_prompt(text)}]}],
                "generationConfig": {"temperature": 0.1},
            }
            if self.api_key:
                params = {"key": self.api_key}
        else:
            payload = {
                "model": self.model or DEFAULT_CHAT_MODEL,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": text},
                ],
                "response_format": {"type": "json_object"},
                "temperature": 0.1,
            }
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"

        return {"json": payload, "headers": headers, "params": params, "timeout": self.timeout}

    # --- response parsing ---

    def parse_response(self, body: Dict[str, Any], text: str) -> ExpenseRecord:
        if self.mode == "structured":
            if not body.get("success", False):
                raise RemoteResponseError("Server returned success=false")
            return expense_from_payload(body.get("data"), text)

        try:
            if self.mode == "gemini":
                candidates = body.get("candidates") or []
                if not candidates:
                    raise RemoteResponseError("Empty candidates in generative response")
                content = candidates[0]["content"]["parts"][0]["text"]
            else:
                choices = body.get("choices") or []
                if not choices:
                    raise RemoteResponseError("Empty choices in chat response")
                content = choices[0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise RemoteResponseError(f"Unexpected response layout: {e}")

        if not isinstance(content, str) or not content.strip():
            raise RemoteResponseError("Model returned empty content")

        data = _loads_object(strip_code_fences(content), "Model reply")
        if "amount" not in data or not isinstance(data["amount"], (int, float)) or isinstance(data["amount"], bool):
            raise RemoteResponseError("Invalid response structure: amount missing or not a number")
        if not isinstance(data.get("merchant", ""), str) or not isinstance(data.get("type", ""), str):
            raise RemoteResponseError("Invalid response structure: merchant/type not strings")
        return expense_from_payload(data, text)

    # --- calls ---

    def _post(self, text: str) -> requests.Response:
        if self.session is not None:
            return self.session.post(self.endpoint, **self.build_request(text))
        return requests.post(self.endpoint, **self.build_request(text))

    def parse(self, text: str) -> ExpenseRecord:
        """
        Parse text with the remote endpoint.

        Raises:
            RemoteTimeoutError, RemoteUnavailableError, RemoteResponseError
        """
        logger.debug("Calling remote parser (%s): %s", self.mode, self.endpoint)
        try:
            with self._post(text) as response:
                if not 200 <= response.status_code < 300:
                    body = response.text[:200] if response.text else ""
                    raise RemoteUnavailableError(
                        f"Server error {response.status_code}: {body}", status_code=response.status_code
                    )
                try:
                    body = response.json()
                except ValueError as e:
                    raise RemoteResponseError(f"Response is not valid JSON: {e}")
        except requests.exceptions.Timeout as e:
            raise RemoteTimeoutError(f"Remote parser timed out after {self.timeout}s: {e}")
        except requests.exceptions.RequestException as e:
            raise RemoteUnavailableError(f"Remote parser unreachable: {e}")

        if not isinstance(body, dict):
            raise RemoteResponseError("Response is not a JSON object")

        record = self.parse_response(body, text)
        logger.info(
            "Remote parse - amount: %s, merchant: %s, type: %s",
            record.amount, record.merchant, record.direction.value,
        )
        return record

    def submit(self, text: str, executor: Executor) -> "Future[ExpenseRecord]":
        """Run parse() on `executor`; wait with future.result(timeout=...)."""
        return executor.submit(self.parse, text)

    def close(self):
        if self.session is not None:
            self.session.close()


__all__ = [
    "RemoteParser",
    "RemoteParseError",
    "expense_from_payload",
    "strip_code_fences",
]
