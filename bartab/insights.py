"""Advisory business insights generated from dashboard statistics."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import requests

from bartab.config import GEMINI_API_BASE, GEMINI_API_KEY, INSIGHT_MODEL, INSIGHT_TIMEOUT_SECONDS
from bartab.stats import DashboardStats

logger = logging.getLogger(__name__)

FALLBACK_INSIGHT = "Insights are not available right now."

_PROMPT = (
    "Analyse the following data from my bar and give 3 practical management tips "
    "(sales, stock or customer loyalty). Answer in Markdown and be concise.\n"
    "Data: {data}"
)


class InsightProvider(Protocol):
    def generate(self, stats: dict[str, Any]) -> str: ...


class GeminiInsightProvider:
    """Calls the Gemini generateContent REST endpoint."""

    def __init__(
        self,
        api_key: str = GEMINI_API_KEY,
        model: str = INSIGHT_MODEL,
        timeout: float = INSIGHT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def generate(self, stats: dict[str, Any]) -> str:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is not set")
        url = f"{GEMINI_API_BASE}/models/{self.model}:generateContent"
        body = {"contents": [{"parts": [{"text": _PROMPT.format(data=json.dumps(stats))}]}]}
        resp = self.session.post(url, params={"key": self.api_key}, json=body, timeout=self.timeout)
        resp.raise_for_status()
        payload = resp.json()
        parts = payload["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts).strip()


def business_insights(stats: DashboardStats, provider: InsightProvider | None) -> str:
    """Return provider text for ``stats``, or the fallback message on any failure."""
    if provider is None:
        return FALLBACK_INSIGHT
    try:
        text = provider.generate(stats.to_dict())
    except Exception as exc:
        # Provider failures never reach the caller.
        logger.warning("insight_failed error=%r", exc)
        return FALLBACK_INSIGHT
    return text or FALLBACK_INSIGHT
