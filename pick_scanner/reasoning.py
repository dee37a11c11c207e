"""
Pick Reasoning

Human-readable justification lines for a pick. Rules are applied in a
fixed order and each adds at most one line.
"""

import math
from typing import List

from .models import Quote, SentimentAnalysis

STRONG_MOVE_PERCENT = 5.0
HIGH_VOLUME_SHARES = 5_000_000
VERY_POSITIVE_SENTIMENT = 0.5
POSITIVE_SENTIMENT = 0.2
MAX_TOPICS = 3


def _percent(score: float) -> int:
    """Score as a whole percentage, halves rounded up"""
    return int(math.floor(score * 100 + 0.5))


class ReasoningGenerator:
    """Builds the reasoning lines for a pick"""

    def reasons(self, quote: Quote, sentiment: SentimentAnalysis) -> List[str]:
        reasons = []

        # Price movement
        if abs(quote.change_percent) > STRONG_MOVE_PERCENT:
            sign = '+' if quote.change_percent > 0 else ''
            reasons.append(f"Strong price movement: {sign}{quote.change_percent:.2f}%")

        # Volume
        if quote.volume > HIGH_VOLUME_SHARES:
            reasons.append(f"High volume: {quote.volume / 1_000_000:.1f}M shares")

        # Sentiment
        if sentiment.overall_score > VERY_POSITIVE_SENTIMENT:
            reasons.append(f"Very positive sentiment ({_percent(sentiment.overall_score)}%)")
        elif sentiment.overall_score > POSITIVE_SENTIMENT:
            reasons.append(f"Positive sentiment ({_percent(sentiment.overall_score)}%)")

        # Trending
        if sentiment.trending:
            reasons.append("Trending on social media")

        # Keywords
        topics = self.unique_keywords(sentiment)
        if topics:
            reasons.append(f"Key topics: {', '.join(topics[:MAX_TOPICS])}")

        return reasons

    @staticmethod
    def unique_keywords(sentiment: SentimentAnalysis) -> List[str]:
        """All source keywords, deduplicated in first-seen order"""
        return list(dict.fromkeys(kw for source in sentiment.sources for kw in source.keywords))
