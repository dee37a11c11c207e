"""Shared fixtures for the pick scanner tests"""

import pytest

from pick_scanner.config import ScannerConfig
from pick_scanner.models import MoversSnapshot, Quote, SentimentAnalysis, SentimentSource
from pick_scanner.providers.fixtures import StaticQuoteProvider, StaticSentimentProvider

THRESHOLD = 1_000_000


@pytest.fixture
def config():
    """Default scanner config with a 1M volume threshold and no confidence floor"""
    return ScannerConfig(min_confidence_score=0.0, min_volume_threshold=THRESHOLD)


@pytest.fixture
def make_quote():
    def _make(symbol="TEST", change_percent=0.0, volume=0, price=100.0, company_name=None):
        return Quote(
            symbol=symbol,
            price=price,
            change=price * change_percent / 100,
            change_percent=change_percent,
            volume=volume,
            company_name=company_name,
        )
    return _make


@pytest.fixture
def make_sentiment():
    def _make(symbol="TEST", overall_score=0.0, trending=False, sources=None, keywords=()):
        if sources is None:
            sources = (SentimentSource("twitter", overall_score, 100, tuple(keywords)),)
        return SentimentAnalysis(
            symbol=symbol,
            overall_score=overall_score,
            sources=tuple(sources),
            trending=trending,
        )
    return _make


@pytest.fixture
def make_providers(make_quote, make_sentiment):
    """Build fixture providers from {symbol: (change %, volume, sentiment, trending)}"""
    def _make(universe, gainers=(), losers=(), volume_spikes=(), trending=(), failing_quotes=(), failing_sentiment=()):
        quotes = {
            symbol: make_quote(symbol, change, volume, company_name=f"{symbol} Corp")
            for symbol, (change, volume, _, _) in universe.items()
        }
        analyses = {
            symbol: make_sentiment(symbol, score, is_trending)
            for symbol, (_, _, score, is_trending) in universe.items()
        }

        def quotes_for(symbols):
            return tuple(quotes.get(s) or make_quote(s) for s in symbols)

        movers = MoversSnapshot(
            gainers=quotes_for(gainers),
            losers=quotes_for(losers),
            volume_spikes=quotes_for(volume_spikes),
        )
        return (
            StaticQuoteProvider(quotes, movers, failing=failing_quotes),
            StaticSentimentProvider(analyses, trending=trending, failing=failing_sentiment),
        )
    return _make
