"""
Sentiment Aggregation

Combines per-source sentiment into a SentimentAnalysis. Source weights live
in an explicit table so each source's share is visible and testable.
"""

from typing import Dict, Iterable, Optional, Sequence

from .config import DEFAULT_SOURCE_WEIGHTS, SentimentConfig
from .models import SentimentAnalysis, SentimentSource, utc_timestamp

TRENDING_MENTION_THRESHOLD = 500


class SentimentWeights:
    """Source name -> weight table with a fallback for unknown sources"""

    def __init__(self, weights: Optional[Dict[str, float]] = None, fallback: float = 0.33):
        self.weights = dict(DEFAULT_SOURCE_WEIGHTS if weights is None else weights)
        self.fallback = fallback

    @classmethod
    def from_config(cls, config: SentimentConfig) -> "SentimentWeights":
        return cls(config.weights, config.fallback_weight)

    def weight_for(self, name: str) -> float:
        return self.weights.get(name, self.fallback)

    def is_known(self, name: str) -> bool:
        return name in self.weights

    def combine(self, sources: Iterable[SentimentSource]) -> float:
        """Weighted average of source scores, 0.0 when the total weight is 0"""
        total_score = 0.0
        total_weight = 0.0

        for source in sources:
            weight = self.weight_for(source.name)
            total_score += source.score * weight
            total_weight += weight

        if total_weight <= 0:
            return 0.0
        # Guard against float drift past the score range
        return min(max(total_score / total_weight, -1.0), 1.0)

    def as_dict(self) -> Dict[str, float]:
        return dict(self.weights)


def is_trending(sources: Iterable[SentimentSource], threshold: int = TRENDING_MENTION_THRESHOLD) -> bool:
    """True when any source has more than `threshold` mentions"""
    return any(s.mentions > threshold for s in sources)


def build_analysis(
    symbol: str,
    sources: Sequence[SentimentSource],
    weights: Optional[SentimentWeights] = None,
    trending_threshold: int = TRENDING_MENTION_THRESHOLD,
    timestamp: Optional[str] = None,
) -> SentimentAnalysis:
    """Assemble a SentimentAnalysis from already-scored sources"""
    weights = weights or SentimentWeights()
    sources = tuple(sources)

    return SentimentAnalysis(
        symbol=symbol,
        overall_score=weights.combine(sources),
        sources=sources,
        trending=is_trending(sources, trending_threshold),
        timestamp=timestamp or utc_timestamp(),
    )
