"""
Scanner Data Model

Snapshots produced by providers (Quote, MoversSnapshot, SentimentAnalysis)
and the Pick records produced by a scan. All of them are immutable and
rebuilt on every scan.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

MARKET_DATA_SOURCE = "market_data"


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string"""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Quote:
    """Price/volume snapshot for one symbol"""
    symbol: str
    price: float
    change: float
    change_percent: float
    volume: int
    company_name: Optional[str] = None

    def __post_init__(self):
        if not self.symbol or len(self.symbol) > 10:
            raise ValueError(f"Invalid symbol {self.symbol!r}: expected 1-10 characters")
        if self.price < 0:
            raise ValueError(f"{self.symbol}: price must be >= 0, got {self.price}")
        if self.volume < 0:
            raise ValueError(f"{self.symbol}: volume must be >= 0, got {self.volume}")

    def to_dict(self) -> Dict:
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change": self.change,
            "changePercent": self.change_percent,
            "volume": self.volume,
            "companyName": self.company_name,
        }


@dataclass(frozen=True)
class MoversSnapshot:
    """Top gainers, top losers and volume spikes"""
    gainers: Tuple[Quote, ...] = ()
    losers: Tuple[Quote, ...] = ()
    volume_spikes: Tuple[Quote, ...] = ()
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict:
        return {
            "topGainers": [q.to_dict() for q in self.gainers],
            "topLosers": [q.to_dict() for q in self.losers],
            "volumeSpikes": [q.to_dict() for q in self.volume_spikes],
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SentimentSource:
    """Sentiment from a single source (twitter, reddit, news, ...)"""
    name: str
    score: float  # -1.0 to 1.0
    mentions: int
    keywords: Tuple[str, ...] = ()

    def __post_init__(self):
        if not -1.0 <= self.score <= 1.0:
            raise ValueError(f"{self.name}: score must be in [-1, 1], got {self.score}")
        if self.mentions < 0:
            raise ValueError(f"{self.name}: mentions must be >= 0, got {self.mentions}")


@dataclass(frozen=True)
class SentimentAnalysis:
    """Combined sentiment for a symbol across all sources"""
    symbol: str
    overall_score: float
    sources: Tuple[SentimentSource, ...]
    trending: bool
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self):
        if not self.sources:
            raise ValueError(f"{self.symbol}: sentiment analysis needs at least one source")
        if not -1.0 <= self.overall_score <= 1.0:
            raise ValueError(f"{self.symbol}: overall score must be in [-1, 1], got {self.overall_score}")

    @property
    def source_names(self) -> Tuple[str, ...]:
        return tuple(s.name for s in self.sources)

    def to_dict(self) -> Dict:
        return {
            "symbol": self.symbol,
            "overallScore": self.overall_score,
            "sources": [
                {
                    "name": s.name,
                    "score": s.score,
                    "mentions": s.mentions,
                    "keywords": list(s.keywords),
                }
                for s in self.sources
            ],
            "trending": self.trending,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Pick:
    """A scored, reasoned pick for one symbol"""
    symbol: str
    company_name: str
    confidence_score: float  # 0 to 1
    sentiment_score: float  # -1 to 1
    price: float
    volume: int
    price_change_percent: float
    reasoning: Tuple[str, ...] = ()
    data_sources: Tuple[str, ...] = (MARKET_DATA_SOURCE,)
    is_premarket: bool = True
    pick_date: str = field(default_factory=utc_timestamp)

    def __post_init__(self):
        if not 0.0 <= self.confidence_score <= 1.0:
            raise ValueError(f"{self.symbol}: confidence must be in [0, 1], got {self.confidence_score}")
        if not -1.0 <= self.sentiment_score <= 1.0:
            raise ValueError(f"{self.symbol}: sentiment must be in [-1, 1], got {self.sentiment_score}")

    def to_dict(self) -> Dict:
        return {
            "symbol": self.symbol,
            "companyName": self.company_name,
            "confidenceScore": self.confidence_score,
            "sentimentScore": self.sentiment_score,
            "price": self.price,
            "volume": self.volume,
            "priceChangePercent": self.price_change_percent,
            "reasoning": list(self.reasoning),
            "dataSources": list(self.data_sources),
            "isPremarket": self.is_premarket,
            "pickDate": self.pick_date,
        }
