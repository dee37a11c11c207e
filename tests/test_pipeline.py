"""Tests for the scan pipeline"""

import threading
import time

import pytest

from pick_scanner.config import ScannerConfig
from pick_scanner.errors import InvalidConfigError, ProviderUnavailableError, ScanCancelledError
from pick_scanner.models import MoversSnapshot, Quote
from pick_scanner.pipeline import ScanPipeline
from pick_scanner.providers.fixtures import StaticQuoteProvider, StaticSentimentProvider

M = 1_000_000

# symbol: (change %, volume, sentiment, trending)
UNIVERSE = {
    "NVDA": (12.0, 3 * M, 0.6, True),     # 0.88
    "TSLA": (-7.0, 3 * M, 0.1, True),     # 0.05 + 0.25 + 0.15 + 0.20 = 0.65
    "AAPL": (1.0, M // 2, -0.5, False),   # 0.0
    "AMD": (3.0, int(1.5 * M), 0.3, False),  # 0.15 + 0.15 + 0.10 = 0.40
    "F": (6.0, 5 * M, 0.0, False),        # 0.25 + 0.15 = 0.40
}


@pytest.fixture
def providers(make_providers):
    return make_providers(
        UNIVERSE,
        gainers=("NVDA", "AMD", "F"),
        losers=("TSLA",),
        volume_spikes=("TSLA", "NVDA"),
        trending=("AAPL", "NVDA"),
    )


def test_picks_sorted_by_confidence(providers, config):
    pipeline = ScanPipeline(*providers)
    picks = pipeline.scan(config)

    assert [p.symbol for p in picks] == ["NVDA", "TSLA", "AMD", "F", "AAPL"]
    assert [p.confidence_score for p in picks] == pytest.approx([0.88, 0.65, 0.40, 0.40, 0.0])
    scores = [p.confidence_score for p in picks]
    assert scores == sorted(scores, reverse=True)


def test_ties_keep_candidate_order(make_providers, config):
    same = (3.0, int(1.5 * M), 0.3, False)
    quotes, sentiment = make_providers(
        {"ZZZ": same, "AAA": same, "MMM": same},
        gainers=("ZZZ", "AAA"),
        trending=("MMM",),
    )
    picks = ScanPipeline(quotes, sentiment, max_workers=3).scan(config)

    assert [p.symbol for p in picks] == ["ZZZ", "AAA", "MMM"]


def test_min_confidence_filter_is_inclusive(providers):
    config = ScannerConfig(min_confidence_score=0.4, min_volume_threshold=M)
    picks = ScanPipeline(*providers).scan(config)

    assert [p.symbol for p in picks] == ["NVDA", "TSLA", "AMD", "F"]
    assert all(p.confidence_score >= 0.4 for p in picks)


def test_no_survivors_is_an_empty_list(providers):
    config = ScannerConfig(min_confidence_score=0.95, min_volume_threshold=M)
    pipeline = ScanPipeline(*providers)

    assert pipeline.scan(config) == []
    assert pipeline.last_report.filtered_out == 5


def test_pick_fields(providers, config):
    picks = ScanPipeline(*providers).scan(config)
    nvda = picks[0]

    assert nvda.company_name == "NVDA Corp"
    assert nvda.sentiment_score == 0.6
    assert nvda.price == 100.0
    assert nvda.volume == 3 * M
    assert nvda.price_change_percent == 12.0
    assert nvda.data_sources == ("twitter", "market_data")
    assert nvda.is_premarket is True
    assert nvda.pick_date
    assert nvda.reasoning == (
        "Strong price movement: +12.00%",
        "Very positive sentiment (60%)",
        "Trending on social media",
    )


def test_zero_confidence_pick_has_no_reasoning(providers, config):
    picks = ScanPipeline(*providers).scan(config)
    aapl = next(p for p in picks if p.symbol == "AAPL")

    assert aapl.confidence_score == 0.0
    assert aapl.reasoning == ()


def test_company_name_falls_back_to_symbol(make_sentiment, config):
    quote = Quote("XYZ", 5.0, 0.1, 2.0, 100)
    quotes = StaticQuoteProvider({"XYZ": quote}, MoversSnapshot(gainers=(quote,)))
    sentiment = StaticSentimentProvider({"XYZ": make_sentiment("XYZ")})

    picks = ScanPipeline(quotes, sentiment).scan(config)
    assert picks[0].company_name == "XYZ"


def test_failed_symbol_is_skipped_and_reported(make_providers, config):
    quotes, sentiment = make_providers(
        UNIVERSE,
        gainers=("NVDA", "TSLA", "AMD"),
        trending=("GHOST",),
        failing_quotes=("TSLA",),
        failing_sentiment=("AMD",),
    )
    pipeline = ScanPipeline(quotes, sentiment)
    picks = pipeline.scan(config)

    assert [p.symbol for p in picks] == ["NVDA"]
    report = pipeline.last_report
    assert report.candidates == 4
    assert report.analyzed == 1
    assert set(report.skipped) == {"TSLA", "AMD", "GHOST"}
    assert "ProviderUnavailableError" in report.skipped["TSLA"]
    assert "SymbolNotFoundError" in report.skipped["GHOST"]


def test_aggregation_failure_is_fatal(make_providers, config):
    quotes, sentiment = make_providers(UNIVERSE, gainers=("NVDA",))
    quotes.movers_error = ProviderUnavailableError("movers down")

    with pytest.raises(ProviderUnavailableError):
        ScanPipeline(quotes, sentiment).scan(config)


def test_invalid_config_rejected_before_fetching(providers):
    quotes, sentiment = providers
    config = ScannerConfig(min_confidence_score=1.01)

    with pytest.raises(InvalidConfigError):
        ScanPipeline(quotes, sentiment).scan(config)
    assert quotes.calls == []


def test_each_candidate_fetched_once(providers, config):
    quotes, sentiment = providers
    ScanPipeline(quotes, sentiment, max_workers=2).scan(config)

    assert sorted(quotes.calls) == sorted(UNIVERSE)


def test_sequential_and_parallel_agree(make_providers, config):
    results = []
    for workers in (1, 8):
        quotes, sentiment = make_providers(
            UNIVERSE, gainers=tuple(UNIVERSE), trending=("NVDA",)
        )
        picks = ScanPipeline(quotes, sentiment, max_workers=workers).scan(config)
        results.append([(p.symbol, p.confidence_score) for p in picks])

    assert results[0] == results[1]


class SlowQuoteProvider(StaticQuoteProvider):
    def __init__(self, *args, delay=0.2, **kwargs):
        super().__init__(*args, **kwargs)
        self.delay = delay

    def get_quote(self, symbol):
        if symbol != "NVDA":
            time.sleep(self.delay)
        return super().get_quote(symbol)


def test_timeout_raises_with_partial_picks(providers, config):
    fast_quotes, sentiment = providers
    slow = SlowQuoteProvider(fast_quotes.quotes, fast_quotes.movers, delay=1.0)
    pipeline = ScanPipeline(slow, sentiment, max_workers=5)

    with pytest.raises(ScanCancelledError) as excinfo:
        pipeline.scan(config, timeout=0.3)

    err = excinfo.value
    assert err.reason == "timeout"
    assert [p.symbol for p in err.partial_picks] == ["NVDA"]
    assert err.pending == 4
    assert pipeline.last_report.cancelled == "timeout"


def test_zero_timeout_launches_nothing(providers, config):
    quotes, sentiment = providers

    with pytest.raises(ScanCancelledError) as excinfo:
        ScanPipeline(quotes, sentiment).scan(config, timeout=0)

    assert excinfo.value.partial_picks == []
    assert excinfo.value.pending == 5
    assert quotes.calls == []


def test_cancel_event_stops_scan(providers, config):
    quotes, sentiment = providers
    event = threading.Event()
    event.set()

    with pytest.raises(ScanCancelledError) as excinfo:
        ScanPipeline(quotes, sentiment).scan(config, cancel_event=event)

    assert excinfo.value.reason == "cancelled"


def test_default_timeout_from_constructor(providers, config):
    quotes, sentiment = providers
    with pytest.raises(ScanCancelledError):
        ScanPipeline(quotes, sentiment, timeout_seconds=0).scan(config)


def test_max_workers_must_be_positive(providers):
    with pytest.raises(ValueError):
        ScanPipeline(*providers, max_workers=0)
