"""
Confidence Scoring

Additive point model on a 0-100 scale, normalized to [0, 1]:

- Sentiment (0-30): positive sentiment increases confidence
- Volume    (0-25): volume above the configured threshold
- Momentum  (0-25): strong moves in either direction
- Trending  (0-20): social media buzz

The thresholds below are fixed; only the volume threshold comes from
ScannerConfig.
"""

from dataclasses import dataclass

from .config import ScannerConfig
from .models import Quote, SentimentAnalysis

SENTIMENT_STRONG_THRESHOLD = 0.3
MOMENTUM_TIERS = ((10.0, 25.0), (5.0, 15.0), (2.0, 10.0))
TRENDING_POINTS = 20.0


@dataclass(frozen=True)
class ScoreBreakdown:
    """Points awarded per factor"""
    sentiment: float
    volume: float
    momentum: float
    trending: float

    @property
    def total(self) -> float:
        return self.sentiment + self.volume + self.momentum + self.trending

    @property
    def confidence(self) -> float:
        return min(max(self.total / 100.0, 0.0), 1.0)


class ConfidenceScorer:
    """Scores a symbol from its quote and sentiment"""

    def sentiment_points(self, overall_score: float) -> float:
        # 0.3 itself falls in the lower branch (15 points); just above it is 30 * score
        if overall_score > SENTIMENT_STRONG_THRESHOLD:
            return 30.0 * (overall_score / 1.0)
        if overall_score > 0:
            return 15.0 * (overall_score / SENTIMENT_STRONG_THRESHOLD)
        return 0.0

    def volume_points(self, volume: int, min_volume_threshold: int) -> float:
        if volume > min_volume_threshold * 2:
            return 25.0
        if volume > min_volume_threshold:
            return 15.0
        return 0.0

    def momentum_points(self, change_percent: float) -> float:
        abs_change = abs(change_percent)
        for threshold, points in MOMENTUM_TIERS:
            if abs_change > threshold:
                return points
        return 0.0

    def trending_points(self, trending: bool) -> float:
        return TRENDING_POINTS if trending else 0.0

    def breakdown(self, quote: Quote, sentiment: SentimentAnalysis, config: ScannerConfig) -> ScoreBreakdown:
        return ScoreBreakdown(
            sentiment=self.sentiment_points(sentiment.overall_score),
            volume=self.volume_points(quote.volume, config.min_volume_threshold),
            momentum=self.momentum_points(quote.change_percent),
            trending=self.trending_points(sentiment.trending),
        )

    def score(self, quote: Quote, sentiment: SentimentAnalysis, config: ScannerConfig) -> float:
        """Confidence in [0, 1]"""
        return self.breakdown(quote, sentiment, config).confidence
