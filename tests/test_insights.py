from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests

from bartab.insights import FALLBACK_INSIGHT, GeminiInsightProvider, business_insights


@pytest.fixture
def stats(bar, beer):
    return bar.stats.summarize()


def test_no_provider_returns_fallback(stats):
    assert business_insights(stats, None) == FALLBACK_INSIGHT


def test_provider_text_is_returned(stats):
    provider = Mock()
    provider.generate.return_value = "- Promote beer on Fridays"

    assert business_insights(stats, provider) == "- Promote beer on Fridays"
    sent = provider.generate.call_args.args[0]
    assert sent["open_tab_count"] == 0


@pytest.mark.parametrize("side_effect, text", [(RuntimeError("boom"), None), (None, "")])
def test_failures_degrade_to_fallback(bar, stats, side_effect, text):
    provider = Mock()
    provider.generate.side_effect = side_effect
    provider.generate.return_value = text
    before = bar.catalog.list()

    assert business_insights(stats, provider) == FALLBACK_INSIGHT
    assert bar.catalog.list() == before


def test_gemini_provider_posts_stats(stats):
    response = Mock()
    response.json.return_value = {"candidates": [{"content": {"parts": [{"text": "Tip 1"}, {"text": " Tip 2"}]}}]}
    session = Mock()
    session.post.return_value = response

    provider = GeminiInsightProvider(api_key="k", model="m", timeout=3, session=session)

    assert provider.generate(stats.to_dict()) == "Tip 1 Tip 2"
    url = session.post.call_args.args[0]
    assert url.endswith("/models/m:generateContent")
    assert session.post.call_args.kwargs["params"] == {"key": "k"}
    assert session.post.call_args.kwargs["timeout"] == 3
    response.raise_for_status.assert_called_once()


def test_gemini_http_error_falls_back(stats):
    response = Mock()
    response.raise_for_status.side_effect = requests.HTTPError("503")
    session = Mock()
    session.post.return_value = response

    provider = GeminiInsightProvider(api_key="k", session=session)

    assert business_insights(stats, provider) == FALLBACK_INSIGHT


def test_gemini_without_key_falls_back(stats):
    session = Mock()
    assert business_insights(stats, GeminiInsightProvider(api_key="", session=session)) == FALLBACK_INSIGHT
    session.post.assert_not_called()
