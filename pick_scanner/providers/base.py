"""
Provider Contracts

The scan pipeline depends only on these two interfaces. Implementations
raise ProviderError subclasses on failure and never return partial data.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import MoversSnapshot, Quote, SentimentAnalysis


class QuoteProvider(ABC):
    """Supplies quotes and the movers snapshot"""

    name = "quotes"

    @abstractmethod
    def get_quote(self, symbol: str) -> Quote:
        """Current quote for `symbol`"""

    @abstractmethod
    def get_movers(self) -> MoversSnapshot:
        """Top gainers, top losers and volume spikes"""


class SentimentProvider(ABC):
    """Supplies per-source sentiment and the trending universe"""

    name = "sentiment"

    @abstractmethod
    def analyze(self, symbol: str) -> SentimentAnalysis:
        """Combined sentiment for `symbol`"""

    @abstractmethod
    def trending_symbols(self, limit: int = 10) -> List[str]:
        """Most-discussed symbols, most active first"""
