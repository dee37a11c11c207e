"""
Fixture Providers

Deterministic in-memory providers. Used by the test-suite and by
`run_scanner --offline` in place of live market and sentiment feeds.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from ..errors import ProviderUnavailableError, SymbolNotFoundError
from ..models import MoversSnapshot, Quote, SentimentAnalysis, SentimentSource
from ..sentiment import SentimentWeights, build_analysis
from .base import QuoteProvider, SentimentProvider

logger = logging.getLogger(__name__)


class StaticQuoteProvider(QuoteProvider):
    """Quotes served from a dict keyed by symbol"""

    name = "static_quotes"

    def __init__(
        self,
        quotes: Dict[str, Quote],
        movers: Optional[MoversSnapshot] = None,
        failing: Iterable[str] = (),
        movers_error: Optional[Exception] = None,
    ):
        self.quotes = dict(quotes)
        self.movers = movers or MoversSnapshot()
        self.failing = set(failing)
        self.movers_error = movers_error
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def get_quote(self, symbol: str) -> Quote:
        with self._lock:
            self.calls.append(symbol)
        if symbol in self.failing:
            raise ProviderUnavailableError(f"Quote feed unavailable for {symbol}", self.name, symbol)
        if symbol not in self.quotes:
            raise SymbolNotFoundError(f"No quote for {symbol}", self.name, symbol)
        return self.quotes[symbol]

    def get_movers(self) -> MoversSnapshot:
        if self.movers_error is not None:
            raise self.movers_error
        return self.movers


class StaticSentimentProvider(SentimentProvider):
    """Sentiment served from a dict keyed by symbol"""

    name = "static_sentiment"

    def __init__(
        self,
        analyses: Dict[str, SentimentAnalysis],
        trending: Iterable[str] = (),
        failing: Iterable[str] = (),
        trending_error: Optional[Exception] = None,
    ):
        self.analyses = dict(analyses)
        self.trending = list(trending)
        self.failing = set(failing)
        self.trending_error = trending_error
        self.trending_limits: List[int] = []

    def analyze(self, symbol: str) -> SentimentAnalysis:
        if symbol in self.failing:
            raise ProviderUnavailableError(f"Sentiment feed unavailable for {symbol}", self.name, symbol)
        if symbol not in self.analyses:
            raise SymbolNotFoundError(f"No sentiment for {symbol}", self.name, symbol)
        return self.analyses[symbol]

    def trending_symbols(self, limit: int = 10) -> List[str]:
        self.trending_limits.append(limit)
        if self.trending_error is not None:
            raise self.trending_error
        return self.trending[:limit]


# Offline demo universe: symbol -> (price, change %, volume, sources)
_SAMPLE_UNIVERSE: Dict[str, Tuple[float, float, int, Tuple[Tuple[str, float, int, Tuple[str, ...]], ...]]] = {
    "NVDA": (912.40, 11.8, 48_200_000, (
        ("twitter", 0.82, 1450, ("earnings", "breakout", "bullish")),
        ("reddit", 0.64, 610, ("earnings", "moon")),
        ("news", 0.55, 140, ("revenue beat", "guidance")),
    )),
    "TSLA": (182.10, -7.4, 96_500_000, (
        ("twitter", -0.35, 1320, ("bearish", "recall")),
        ("reddit", 0.10, 540, ("support", "hold")),
        ("news", -0.20, 90, ("deliveries",)),
    )),
    "AMD": (164.30, 6.2, 31_000_000, (
        ("twitter", 0.48, 380, ("breakout", "bullish")),
        ("reddit", 0.40, 220, ("buy",)),
        ("news", 0.30, 75, ("partnership",)),
    )),
    "AAPL": (189.50, 1.1, 52_000_000, (
        ("twitter", 0.15, 420, ("hold",)),
        ("reddit", 0.05, 180, ()),
        ("news", 0.20, 160, ("services",)),
    )),
    "PLTR": (24.60, 14.5, 88_000_000, (
        ("twitter", 0.71, 980, ("merger", "bullish", "moon")),
        ("reddit", 0.77, 820, ("moon", "breakout")),
        ("news", 0.45, 60, ("new contract",)),
    )),
    "BA": (201.75, -3.1, 7_800_000, (
        ("twitter", -0.52, 300, ("lawsuit", "bearish")),
        ("reddit", -0.40, 150, ("sell",)),
        ("news", -0.61, 110, ("SEC investigation",)),
    )),
    "F": (12.05, 2.6, 4_200_000, (
        ("twitter", 0.22, 90, ()),
        ("reddit", 0.18, 70, ("hold",)),
        ("news", 0.10, 40, ()),
    )),
    "MRNA": (108.90, 9.3, 12_600_000, (
        ("twitter", 0.58, 700, ("FDA approval", "bullish")),
        ("reddit", 0.49, 260, ("FDA approval",)),
        ("news", 0.66, 130, ("FDA approval", "guidance")),
    )),
}

_SAMPLE_GAINERS = ("PLTR", "NVDA", "MRNA", "AMD")
_SAMPLE_LOSERS = ("TSLA", "BA")
_SAMPLE_VOLUME_SPIKES = ("TSLA", "PLTR", "AAPL")
_SAMPLE_TRENDING = ("NVDA", "TSLA", "AAPL", "PLTR", "F")


def sample_quotes() -> Dict[str, Quote]:
    """Quotes for the offline demo universe"""
    quotes = {}
    for symbol, (price, change_pct, volume, _) in _SAMPLE_UNIVERSE.items():
        change = round(price * change_pct / (100 + change_pct), 2)
        quotes[symbol] = Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_pct,
            volume=volume,
            company_name=f"{symbol} Inc.",
        )
    return quotes


def sample_analyses(weights: Optional[SentimentWeights] = None) -> Dict[str, SentimentAnalysis]:
    """Sentiment for the offline demo universe"""
    analyses = {}
    for symbol, (_, _, _, sources) in _SAMPLE_UNIVERSE.items():
        analyses[symbol] = build_analysis(
            symbol,
            [SentimentSource(name, score, mentions, keywords) for name, score, mentions, keywords in sources],
            weights,
        )
    return analyses


def sample_providers(weights: Optional[SentimentWeights] = None) -> Tuple[StaticQuoteProvider, StaticSentimentProvider]:
    """Quote and sentiment providers over the offline demo universe"""
    quotes = sample_quotes()
    movers = MoversSnapshot(
        gainers=tuple(quotes[s] for s in _SAMPLE_GAINERS),
        losers=tuple(quotes[s] for s in _SAMPLE_LOSERS),
        volume_spikes=tuple(quotes[s] for s in _SAMPLE_VOLUME_SPIKES),
    )
    logger.info("Using offline fixture providers (%d symbols)", len(quotes))
    return (
        StaticQuoteProvider(quotes, movers),
        StaticSentimentProvider(sample_analyses(weights), trending=_SAMPLE_TRENDING),
    )
