"""
Market and sentiment providers consumed by the scan pipeline.
"""

from .base import QuoteProvider, SentimentProvider
from .fixtures import StaticQuoteProvider, StaticSentimentProvider, sample_providers

__all__ = [
    "QuoteProvider",
    "SentimentProvider",
    "StaticQuoteProvider",
    "StaticSentimentProvider",
    "sample_providers",
]
