"""
Scan Pipeline

Aggregates candidates, analyzes each one in parallel (quote + sentiment
fetch, scoring, reasoning), drops picks below the confidence floor and
ranks the rest by confidence.
"""

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .aggregator import CandidateAggregator
from .config import ScannerConfig
from .errors import ScanCancelledError
from .models import MARKET_DATA_SOURCE, Pick, utc_timestamp
from .providers.base import QuoteProvider, SentimentProvider
from .reasoning import ReasoningGenerator
from .scoring import ConfidenceScorer

logger = logging.getLogger(__name__)

# Upper bound on how long the fan-out loop blocks before re-checking cancellation
POLL_INTERVAL_SECONDS = 0.1


@dataclass
class ScanReport:
    """Diagnostics from the most recent scan"""
    candidates: int = 0
    analyzed: int = 0
    kept: int = 0
    filtered_out: int = 0
    skipped: Dict[str, str] = field(default_factory=dict)
    cancelled: Optional[str] = None
    elapsed_seconds: float = 0.0


class ScanPipeline:
    """Orchestrates aggregation -> scoring/reasoning -> filter -> sort"""

    def __init__(
        self,
        quote_provider: QuoteProvider,
        sentiment_provider: SentimentProvider,
        aggregator: Optional[CandidateAggregator] = None,
        scorer: Optional[ConfidenceScorer] = None,
        reasoning: Optional[ReasoningGenerator] = None,
        max_workers: int = 8,
        timeout_seconds: Optional[float] = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.quote_provider = quote_provider
        self.sentiment_provider = sentiment_provider
        self.aggregator = aggregator or CandidateAggregator(quote_provider, sentiment_provider)
        self.scorer = scorer or ConfidenceScorer()
        self.reasoning = reasoning or ReasoningGenerator()
        self.max_workers = max_workers
        self.timeout_seconds = timeout_seconds
        self.last_report = ScanReport()

    def analyze_symbol(self, symbol: str, config: ScannerConfig) -> Pick:
        """Analyze a single stock and build its pick"""
        quote = self.quote_provider.get_quote(symbol)
        sentiment = self.sentiment_provider.analyze(symbol)

        return Pick(
            symbol=symbol,
            company_name=quote.company_name or symbol,
            confidence_score=self.scorer.score(quote, sentiment, config),
            sentiment_score=sentiment.overall_score,
            price=quote.price,
            volume=quote.volume,
            price_change_percent=quote.change_percent,
            reasoning=tuple(self.reasoning.reasons(quote, sentiment)),
            data_sources=sentiment.source_names + (MARKET_DATA_SOURCE,),
            is_premarket=True,
            pick_date=utc_timestamp(),
        )

    def scan(
        self,
        config: ScannerConfig,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Pick]:
        """
        Run the scanner and return picks sorted by confidence (highest first).

        Args:
            config: Scan thresholds; validated before anything is fetched
            timeout: Seconds before the scan is abandoned (defaults to the
                pipeline's timeout_seconds)
            cancel_event: Set by the caller to abandon the scan

        Raises:
            InvalidConfigError: config out of bounds
            ProviderError: candidate aggregation failed
            ScanCancelledError: timeout or cancellation; carries partial picks
        """
        config.validate()
        start = time.monotonic()
        timeout = self.timeout_seconds if timeout is None else timeout
        deadline = start + timeout if timeout is not None else None

        report = ScanReport()
        self.last_report = report

        symbols = self.aggregator.aggregate_ordered()
        report.candidates = len(symbols)

        results: List[Optional[Pick]] = [None] * len(symbols)
        try:
            self._analyze_all(symbols, config, results, report, deadline, cancel_event)
        except ScanCancelledError as e:
            report.cancelled = e.reason
            e.partial_picks = self._rank(results, config, report)
            report.elapsed_seconds = time.monotonic() - start
            logger.warning(
                f"Scan {e.reason} after {report.elapsed_seconds:.1f}s: "
                f"{report.analyzed}/{report.candidates} analyzed, {e.pending} dropped"
            )
            raise

        picks = self._rank(results, config, report)
        report.elapsed_seconds = time.monotonic() - start
        logger.info(
            f"Scan complete in {report.elapsed_seconds:.1f}s: {report.kept} picks from "
            f"{report.candidates} candidates ({report.filtered_out} below confidence, "
            f"{len(report.skipped)} skipped)"
        )
        return picks

    def _analyze_all(self, symbols, config, results, report, deadline, cancel_event):
        """Fan out per-symbol analysis with at most max_workers in flight"""
        queue = list(enumerate(symbols))
        queue.reverse()
        in_flight: Dict[Future, tuple] = {}
        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        stopped = False

        try:
            while queue or in_flight:
                reason = self._stop_reason(deadline, cancel_event)
                if reason:
                    stopped = True
                    for future in in_flight:
                        future.cancel()
                    raise ScanCancelledError(reason, pending=len(queue) + len(in_flight))

                while queue and len(in_flight) < self.max_workers:
                    index, symbol = queue.pop()
                    in_flight[executor.submit(self.analyze_symbol, symbol, config)] = (index, symbol)

                done, _ = wait(in_flight, timeout=self._wait_slice(deadline, cancel_event), return_when=FIRST_COMPLETED)
                for future in done:
                    index, symbol = in_flight.pop(future)
                    try:
                        results[index] = future.result()
                        report.analyzed += 1
                    except Exception as e:
                        report.skipped[symbol] = f"{type(e).__name__}: {e}"
                        logger.warning(f"Skipping {symbol}: {e}")
        finally:
            executor.shutdown(wait=not stopped, cancel_futures=stopped)

    @staticmethod
    def _stop_reason(deadline, cancel_event) -> Optional[str]:
        if cancel_event is not None and cancel_event.is_set():
            return "cancelled"
        if deadline is not None and time.monotonic() >= deadline:
            return "timeout"
        return None

    @staticmethod
    def _wait_slice(deadline, cancel_event) -> Optional[float]:
        if deadline is None and cancel_event is None:
            return None
        if deadline is None:
            return POLL_INTERVAL_SECONDS
        return max(0.0, min(POLL_INTERVAL_SECONDS, deadline - time.monotonic()))

    @staticmethod
    def _rank(results: List[Optional[Pick]], config: ScannerConfig, report: ScanReport) -> List[Pick]:
        """Filter by minimum confidence and sort; ties keep candidate order"""
        analyzed = [p for p in results if p is not None]
        picks = [p for p in analyzed if p.confidence_score >= config.min_confidence_score]
        report.filtered_out = len(analyzed) - len(picks)
        report.kept = len(picks)

        # list.sort is stable, so equal scores stay in candidate order
        picks.sort(key=lambda p: p.confidence_score, reverse=True)
        return picks
