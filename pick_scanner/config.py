"""
Scanner Configuration

Scan thresholds, sentiment weighting, pipeline and schedule settings.
All of them are configurable via YAML or programmatically.
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import List, Dict, Optional

from .errors import InvalidConfigError

MAX_PICK_LIMIT = 20

DEFAULT_SOURCE_WEIGHTS = {
    "twitter": 0.4,
    "reddit": 0.3,
    "news": 0.3,
}


@dataclass
class ScannerConfig:
    """Per-scan thresholds handed to the pipeline"""
    min_confidence_score: float = 0.6
    min_volume_threshold: int = 1_000_000
    # Informational for callers; the scorer does not read these
    sentiment_sources: List[str] = field(default_factory=lambda: ["twitter", "reddit", "news"])
    sectors: List[str] = field(default_factory=lambda: ["Technology", "Healthcare", "Finance"])
    keywords: List[str] = field(default_factory=lambda: ["earnings", "merger", "FDA approval"])

    def validate(self) -> "ScannerConfig":
        """Raise InvalidConfigError for out-of-range values (never clamps)"""
        score = self.min_confidence_score
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise InvalidConfigError(f"min_confidence_score must be a number, got {score!r}")
        if not 0.0 <= score <= 1.0:
            raise InvalidConfigError(f"min_confidence_score must be within [0, 1], got {score}")

        volume = self.min_volume_threshold
        if isinstance(volume, bool) or not isinstance(volume, int):
            raise InvalidConfigError(f"min_volume_threshold must be an integer, got {volume!r}")
        if volume < 0:
            raise InvalidConfigError(f"min_volume_threshold must be >= 0, got {volume}")

        return self

    def with_min_confidence(self, min_confidence: float) -> "ScannerConfig":
        """Copy of this config with a different confidence floor"""
        return ScannerConfig(
            min_confidence_score=min_confidence,
            min_volume_threshold=self.min_volume_threshold,
            sentiment_sources=list(self.sentiment_sources),
            sectors=list(self.sectors),
            keywords=list(self.keywords),
        )


@dataclass
class SentimentConfig:
    """Sentiment aggregation and keyword scoring settings"""
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SOURCE_WEIGHTS))
    fallback_weight: float = 0.33
    trending_mention_threshold: int = 500
    # Live feeds return tens of items per symbol, not hundreds
    live_trending_mention_threshold: int = 40
    trending_limit: int = 10
    positive_keywords: List[str] = field(default_factory=lambda: [
        "bullish", "breakout", "earnings beat", "beat estimates", "upgrade",
        "upgraded", "acquisition", "merger", "FDA approval", "FDA approved",
        "revenue beat", "raised guidance", "buyback", "record revenue",
        "partnership", "new contract", "moon"
    ])
    negative_keywords: List[str] = field(default_factory=lambda: [
        "bearish", "downgrade", "downgraded", "missed estimates", "lawsuit",
        "bankruptcy", "SEC investigation", "fraud", "layoffs",
        "profit warning", "guidance cut", "sell-off", "dilution"
    ])
    news_lookback_hours: int = 72


@dataclass
class PipelineConfig:
    """Fan-out settings for per-candidate fetches"""
    max_workers: int = 8
    timeout_seconds: Optional[float] = None


@dataclass
class ScheduleConfig:
    """Premarket schedule and caller-side settings"""
    premarket_scan_time: str = "08:30"  # HH:MM in `timezone`
    timezone: str = "US/Eastern"
    default_limit: int = 10
    # Carried for callers that publish picks; the scanner never posts
    tweet_enabled: bool = False


@dataclass
class AppConfig:
    """Main application configuration"""
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    sentiment: SentimentConfig = field(default_factory=SentimentConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)

    def to_dict(self) -> Dict:
        """Convert config to dictionary"""
        return {
            "scanner": {
                "min_confidence_score": self.scanner.min_confidence_score,
                "min_volume_threshold": self.scanner.min_volume_threshold,
                "sentiment_sources": self.scanner.sentiment_sources,
                "sectors": self.scanner.sectors,
                "keywords": self.scanner.keywords,
            },
            "sentiment": {
                "weights": self.sentiment.weights,
                "fallback_weight": self.sentiment.fallback_weight,
                "trending_mention_threshold": self.sentiment.trending_mention_threshold,
                "live_trending_mention_threshold": self.sentiment.live_trending_mention_threshold,
                "trending_limit": self.sentiment.trending_limit,
                "positive_keywords": self.sentiment.positive_keywords,
                "negative_keywords": self.sentiment.negative_keywords,
                "news_lookback_hours": self.sentiment.news_lookback_hours,
            },
            "pipeline": {
                "max_workers": self.pipeline.max_workers,
                "timeout_seconds": self.pipeline.timeout_seconds,
            },
            "schedule": {
                "premarket_scan_time": self.schedule.premarket_scan_time,
                "timezone": self.schedule.timezone,
                "default_limit": self.schedule.default_limit,
                "tweet_enabled": self.schedule.tweet_enabled,
            },
        }

    def save(self, path: str):
        """Save config to YAML file"""
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, data: Dict) -> "AppConfig":
        """Create config from dictionary"""
        config = cls()
        data = data or {}

        if "scanner" in data:
            s = data["scanner"] or {}
            defaults = ScannerConfig()
            config.scanner = ScannerConfig(
                min_confidence_score=s.get("min_confidence_score", defaults.min_confidence_score),
                min_volume_threshold=s.get("min_volume_threshold", defaults.min_volume_threshold),
                sentiment_sources=s.get("sentiment_sources", defaults.sentiment_sources),
                sectors=s.get("sectors", defaults.sectors),
                keywords=s.get("keywords", defaults.keywords),
            )

        if "sentiment" in data:
            se = data["sentiment"] or {}
            config.sentiment = SentimentConfig(
                weights=se.get("weights", config.sentiment.weights),
                fallback_weight=se.get("fallback_weight", 0.33),
                trending_mention_threshold=se.get("trending_mention_threshold", 500),
                live_trending_mention_threshold=se.get("live_trending_mention_threshold", 40),
                trending_limit=se.get("trending_limit", 10),
                positive_keywords=se.get("positive_keywords", config.sentiment.positive_keywords),
                negative_keywords=se.get("negative_keywords", config.sentiment.negative_keywords),
                news_lookback_hours=se.get("news_lookback_hours", 72),
            )

        if "pipeline" in data:
            p = data["pipeline"] or {}
            config.pipeline = PipelineConfig(
                max_workers=p.get("max_workers", 8),
                timeout_seconds=p.get("timeout_seconds"),
            )

        if "schedule" in data:
            sc = data["schedule"] or {}
            config.schedule = ScheduleConfig(
                premarket_scan_time=str(sc.get("premarket_scan_time", "08:30")),
                timezone=sc.get("timezone", "US/Eastern"),
                default_limit=sc.get("default_limit", 10),
                tweet_enabled=sc.get("tweet_enabled", False),
            )

        return config

    def validate(self) -> "AppConfig":
        """Validate every section; raises InvalidConfigError"""
        self.scanner.validate()

        if self.sentiment.fallback_weight < 0:
            raise InvalidConfigError("sentiment.fallback_weight must be >= 0")
        for name, weight in self.sentiment.weights.items():
            if weight < 0:
                raise InvalidConfigError(f"sentiment weight for {name!r} must be >= 0, got {weight}")
        if self.sentiment.trending_mention_threshold < 0:
            raise InvalidConfigError("sentiment.trending_mention_threshold must be >= 0")
        if self.sentiment.live_trending_mention_threshold < 0:
            raise InvalidConfigError("sentiment.live_trending_mention_threshold must be >= 0")

        if self.pipeline.max_workers < 1:
            raise InvalidConfigError(f"pipeline.max_workers must be >= 1, got {self.pipeline.max_workers}")
        if self.pipeline.timeout_seconds is not None and self.pipeline.timeout_seconds <= 0:
            raise InvalidConfigError("pipeline.timeout_seconds must be positive when set")

        parse_scan_time(self.schedule.premarket_scan_time)
        if not 1 <= self.schedule.default_limit <= MAX_PICK_LIMIT:
            raise InvalidConfigError(
                f"schedule.default_limit must be within [1, {MAX_PICK_LIMIT}], got {self.schedule.default_limit}"
            )

        return self


def parse_scan_time(value: str):
    """Parse 'HH:MM' into (hour, minute)"""
    try:
        hour_text, minute_text = str(value).split(":")
        hour, minute = int(hour_text), int(minute_text)
    except ValueError:
        raise InvalidConfigError(f"premarket_scan_time must look like HH:MM, got {value!r}")
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise InvalidConfigError(f"premarket_scan_time out of range: {value!r}")
    return hour, minute


def load_config(path: str = None) -> AppConfig:
    """Load config from YAML file or return defaults"""
    if path is None:
        # Default path
        path = os.path.join(os.path.dirname(__file__), "scanner_config.yaml")

    if os.path.exists(path):
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
            return AppConfig.from_dict(data).validate()

    return AppConfig()
