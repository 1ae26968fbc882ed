from __future__ import annotations

import json
import re
import threading
from datetime import date
from typing import Any, Callable, Optional

import httpx
from loguru import logger

from .config import (
    DAILY_QUERY_LIMIT,
    HTTP_CONNECT_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_USER_AGENT,
    LLM_BASE_URL,
    LLM_MAX_TOKENS,
    LLM_MODEL,
    LLM_TEMPERATURE,
    OPENAI_API_KEY,
)
from .prompts import SYSTEM_PROMPT


class QueryBudget:
    """
    Daily cap on remote calls, shared by every request in the process.

    A call first reserve()s a slot, then commit()s it on success or
    release()s it on failure, so concurrent callers can never overspend.
    The counter resets when `today()` changes.
    """

    def __init__(self, limit: int = DAILY_QUERY_LIMIT, today: Callable[[], date] = date.today):
        self.limit = int(limit)
        self._today = today
        self._day = today()
        self._count = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    def _roll_day(self) -> None:
        # caller holds the lock
        d = self._today()
        if d != self._day:
            logger.info("Query budget reset for {} (used {} on {})", d, self._count, self._day)
            self._day = d
            self._count = 0

    @property
    def count(self) -> int:
        with self._lock:
            self._roll_day()
            return self._count

    def remaining(self) -> int:
        with self._lock:
            self._roll_day()
            return max(0, self.limit - self._count - self._in_flight)

    def has_room(self) -> bool:
        return self.remaining() > 0

    def reserve(self) -> bool:
        with self._lock:
            self._roll_day()
            if self._count + self._in_flight >= self.limit:
                return False
            self._in_flight += 1
            return True

    def commit(self) -> None:
        with self._lock:
            self._in_flight = max(0, self._in_flight - 1)
            self._count += 1

    def release(self) -> None:
        with self._lock:
            self._in_flight = max(0, self._in_flight - 1)


class ReasoningClient:
    """
    Thin OpenAI-compatible chat-completions client.

    `complete` never raises: every failure (no key, no budget, transport,
    auth, non-2xx, malformed body) is logged and returned as "".
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        budget: Optional[QueryBudget] = None,
        base_url: str = LLM_BASE_URL,
        model: str = LLM_MODEL,
        max_tokens: int = LLM_MAX_TOKENS,
        temperature: float = LLM_TEMPERATURE,
        connect_timeout: float = HTTP_CONNECT_TIMEOUT,
        read_timeout: float = HTTP_READ_TIMEOUT,
    ):
        self.api_key = OPENAI_API_KEY if api_key is None else api_key
        self.budget = budget if budget is not None else QueryBudget()
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = httpx.Timeout(read_timeout, connect=connect_timeout)

        if not self.enabled:
            logger.info("No API key configured; remote reasoning disabled (local-only mode)")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def can_call(self) -> bool:
        return self.enabled and self.budget.has_room()

    def _payload(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def complete(self, prompt: str) -> str:
        if not self.enabled:
            return ""
        if not self.budget.reserve():
            logger.warning("Daily query limit of {} reached; skipping remote call", self.budget.limit)
            return ""

        ok = False
        try:
            text = self._post(prompt)
            ok = bool(text)
            return text
        finally:
            if ok:
                self.budget.commit()
            else:
                self.budget.release()

    def _post(self, prompt: str) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": HTTP_USER_AGENT,
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                r = client.post(url, headers=headers, json=self._payload(prompt))
        except httpx.TimeoutException:
            logger.warning("Remote reasoning timeout for {}", url)
            return ""
        except httpx.HTTPError as e:
            logger.warning("Remote reasoning transport error: {}", e)
            return ""
        except UnicodeError as e:
            # header values must be ASCII; a bad key fails while building the request
            logger.warning("Remote reasoning request could not be encoded: {}", e)
            return ""

        if r.status_code in (401, 403):
            logger.warning("Remote reasoning auth failed: HTTP {}", r.status_code)
            return ""
        if not 200 <= r.status_code < 300:
            logger.warning("Remote reasoning: HTTP {} from {}", r.status_code, url)
            return ""

        try:
            content = r.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("Remote reasoning returned a malformed body: {}", e)
            return ""
        return (content or "").strip()


# ---------------------------
# Response cleaning
# ---------------------------

_FENCE_OPEN_RX = re.compile(r"^\s*```[A-Za-z0-9_+-]*[ \t]*\n?")
_FENCE_CLOSE_RX = re.compile(r"\n?```\s*$")


def clean_json_envelope(text: str) -> str:
    """Drop ```json ... ``` fences and surrounding whitespace."""
    if not text:
        return ""
    t = text.strip()
    t = _FENCE_OPEN_RX.sub("", t)
    t = _FENCE_CLOSE_RX.sub("", t)
    return t.strip()


def parse_json_payload(text: str) -> Optional[Any]:
    """Cleaned JSON value, or None when the text does not parse."""
    cleaned = clean_json_envelope(text)
    if not cleaned:
        return None
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("Could not parse remote JSON ({}): {!r}", e, cleaned[:120])
        return None
