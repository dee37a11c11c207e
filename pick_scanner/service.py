"""
Pick Service

Caller-facing wrapper around the scan pipeline: applies the confidence
override, truncates to the requested limit and hands the final picks to
optional sinks (storage, notifications) after the scan returns.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

import pandas as pd

from .aggregator import CandidateAggregator
from .config import AppConfig, MAX_PICK_LIMIT, ScannerConfig
from .errors import InvalidConfigError
from .models import Pick, utc_timestamp
from .pipeline import ScanPipeline
from .providers.base import QuoteProvider, SentimentProvider

logger = logging.getLogger(__name__)

PickSink = Callable[[List[Pick]], None]


@dataclass
class PickResult:
    """Truncated picks returned to the caller"""
    picks: List[Pick]
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def count(self) -> int:
        return len(self.picks)

    def to_dict(self) -> Dict:
        return {
            "picks": [p.to_dict() for p in self.picks],
            "count": self.count,
            "timestamp": self.timestamp,
        }


class PickService:
    """Runs scans on behalf of callers"""

    def __init__(self, pipeline: ScanPipeline, sinks: Optional[List[PickSink]] = None):
        self.pipeline = pipeline
        self.sinks = list(sinks or [])
        self.last_result: Optional[PickResult] = None

    @classmethod
    def from_config(
        cls,
        app_config: AppConfig,
        quote_provider: QuoteProvider,
        sentiment_provider: SentimentProvider,
        sinks: Optional[List[PickSink]] = None,
    ) -> "PickService":
        """Wire a pipeline from application config and providers"""
        aggregator = CandidateAggregator(
            quote_provider,
            sentiment_provider,
            trending_limit=app_config.sentiment.trending_limit,
        )
        pipeline = ScanPipeline(
            quote_provider,
            sentiment_provider,
            aggregator=aggregator,
            max_workers=app_config.pipeline.max_workers,
            timeout_seconds=app_config.pipeline.timeout_seconds,
        )
        return cls(pipeline, sinks)

    def get_picks(
        self,
        config: ScannerConfig,
        limit: int = 10,
        min_confidence: Optional[float] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> PickResult:
        """
        Scan and return the top `limit` picks.

        Args:
            config: Scanner thresholds
            limit: Number of picks to return (1-20)
            min_confidence: Replaces config.min_confidence_score when given
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_PICK_LIMIT:
            raise InvalidConfigError(f"limit must be an integer within [1, {MAX_PICK_LIMIT}], got {limit!r}")

        if min_confidence is not None:
            config = config.with_min_confidence(min_confidence)
        config.validate()

        picks = self.pipeline.scan(config, timeout=timeout, cancel_event=cancel_event)
        result = PickResult(picks=picks[:limit])
        self.last_result = result

        for sink in self.sinks:
            try:
                sink(result.picks)
            except Exception as e:
                logger.error(f"Pick sink {getattr(sink, '__name__', sink)!r} failed: {e}")

        return result


def picks_to_dataframe(picks: List[Pick]) -> pd.DataFrame:
    """Picks as a display DataFrame"""
    if not picks:
        return pd.DataFrame()

    data = []
    for rank, p in enumerate(picks, 1):
        data.append({
            'Rank': rank,
            'Symbol': p.symbol,
            'Company': p.company_name,
            'Confidence': f"{p.confidence_score * 100:.0f}%",
            'Sentiment': round(p.sentiment_score, 2),
            'Price': f"${p.price:.2f}",
            'Change': f"{p.price_change_percent:+.2f}%",
            'Volume': f"{p.volume / 1e6:.1f}M",
            'Sources': ", ".join(p.data_sources),
        })

    return pd.DataFrame(data)


def format_results(picks: List[Pick]) -> str:
    """Format picks for console display"""
    output = f"\n{'='*60}\nPREMARKET PICKS - {datetime.now().strftime('%Y-%m-%d %H:%M')}\n{'='*60}\n\n"

    if not picks:
        return output + "No picks met the confidence threshold.\n"

    for rank, p in enumerate(picks, 1):
        output += f"{rank}. {p.symbol} ({p.company_name}) - {p.confidence_score * 100:.0f}% confidence\n"
        output += f"   ${p.price:.2f} ({p.price_change_percent:+.2f}%) | sentiment {p.sentiment_score:+.2f}\n"
        for reason in p.reasoning:
            output += f"   - {reason}\n"
        output += "\n"

    return output
