"""
Premarket Pick Scanner

Ranks equity symbols by a multi-factor confidence score:
1. Candidate aggregation (premarket movers + trending sentiment)
2. Per-symbol scoring and reasoning (parallel fetch)
3. Confidence filter and ranking
"""

from .config import AppConfig, ScannerConfig, load_config
from .errors import (
    InvalidConfigError,
    ProviderError,
    ProviderUnavailableError,
    ScanCancelledError,
    ScannerError,
    SymbolNotFoundError,
)
from .models import MoversSnapshot, Pick, Quote, SentimentAnalysis, SentimentSource
from .sentiment import SentimentWeights
from .aggregator import CandidateAggregator
from .scoring import ConfidenceScorer
from .reasoning import ReasoningGenerator
from .pipeline import ScanPipeline, ScanReport
from .service import PickResult, PickService

__all__ = [
    "AppConfig",
    "ScannerConfig",
    "load_config",
    "ScannerError",
    "ProviderError",
    "ProviderUnavailableError",
    "SymbolNotFoundError",
    "InvalidConfigError",
    "ScanCancelledError",
    "Quote",
    "MoversSnapshot",
    "SentimentSource",
    "SentimentAnalysis",
    "Pick",
    "SentimentWeights",
    "CandidateAggregator",
    "ConfidenceScorer",
    "ReasoningGenerator",
    "ScanPipeline",
    "ScanReport",
    "PickResult",
    "PickService",
]
