"""
Candidate Aggregation

Collects every symbol worth scoring: premarket movers (gainers, losers,
volume spikes) plus the trending sentiment universe. No filtering here;
filtering is confidence-based and happens in the pipeline.
"""

import logging
from typing import List, Set

from .providers.base import QuoteProvider, SentimentProvider

logger = logging.getLogger(__name__)


class CandidateAggregator:
    """Unions movers and trending symbols into a candidate set"""

    def __init__(self, quote_provider: QuoteProvider, sentiment_provider: SentimentProvider, trending_limit: int = 10):
        self.quote_provider = quote_provider
        self.sentiment_provider = sentiment_provider
        self.trending_limit = trending_limit

    def aggregate_ordered(self) -> List[str]:
        """Candidates deduplicated in first-seen order.

        Order: gainers, losers, volume spikes, then trending. Provider
        failures propagate; there is no partial aggregation.
        """
        movers = self.quote_provider.get_movers()
        trending = self.sentiment_provider.trending_symbols(self.trending_limit)

        candidates = dict.fromkeys(
            [q.symbol for q in movers.gainers]
            + [q.symbol for q in movers.losers]
            + [q.symbol for q in movers.volume_spikes]
            + list(trending)
        )

        logger.info(
            f"Aggregated {len(candidates)} candidates "
            f"({len(movers.gainers)} gainers, {len(movers.losers)} losers, "
            f"{len(movers.volume_spikes)} volume spikes, {len(trending)} trending)"
        )
        return list(candidates)

    def aggregate(self) -> Set[str]:
        """Deduplicated candidate symbols"""
        return set(self.aggregate_ordered())
