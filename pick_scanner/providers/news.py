"""
News & Social Sentiment Provider

Aggregates headlines from free sources and scores each source by keyword
matching (no LLM needed for speed):

- news:   Yahoo Finance RSS, Google News RSS, Finnhub (with FINNHUB_API_KEY)
- reddit: r/stocks, r/wallstreetbets, r/investing search

Trending symbols come from ticker mentions in the r/wallstreetbets hot list.
"""

import logging
import os
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

import feedparser
import requests

from ..config import SentimentConfig
from ..errors import ProviderUnavailableError
from ..models import SentimentAnalysis, SentimentSource
from ..sentiment import SentimentWeights, build_analysis
from .base import SentimentProvider

logger = logging.getLogger(__name__)

HEADERS = {'User-Agent': 'PickScanner/1.0'}

REDDIT_SUBREDDITS = ('stocks', 'wallstreetbets', 'investing')

# Uppercase words that look like tickers but are not
TICKER_STOPWORDS = {
    'THE', 'AND', 'FOR', 'ARE', 'BUT', 'NOT', 'YOU', 'ALL', 'CAN', 'HAD', 'HER',
    'WAS', 'ONE', 'OUR', 'OUT', 'HAS', 'HIS', 'HOW', 'NEW', 'NOW', 'OLD', 'SEE',
    'WAY', 'WHO', 'DID', 'GET', 'HIM', 'LET', 'PUT', 'SAY', 'SHE', 'TOO', 'USE',
    'WSB', 'DD', 'IMO', 'YOLO', 'FD', 'OTM', 'ITM', 'ATM', 'EOD', 'EOW', 'IV',
    'DTE', 'CEO', 'CFO', 'IPO', 'ETF', 'USA', 'GDP', 'CPI', 'FED', 'SEC', 'LOL',
}

_TICKER_PATTERN = re.compile(r'\$([A-Z]{1,5})\b|\b([A-Z]{2,5})\b')


class NewsItem:
    """Single headline or post"""

    __slots__ = ('title', 'summary', 'published')

    def __init__(self, title: str, summary: str = "", published: Optional[datetime] = None):
        self.title = title or ""
        self.summary = summary or ""
        # Naive timestamps are taken as UTC
        if published is not None and published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        self.published = published

    @property
    def text(self) -> str:
        return f"{self.title} {self.summary}"


class NewsSentimentProvider(SentimentProvider):
    """Keyword-scored sentiment from news feeds and Reddit"""

    name = "news_sentiment"

    def __init__(
        self,
        config: Optional[SentimentConfig] = None,
        sources: Optional[List[str]] = None,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or SentimentConfig()
        self.weights = SentimentWeights.from_config(self.config)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(HEADERS)
        self.finnhub_key = os.getenv('FINNHUB_API_KEY', '')

        handlers: Dict[str, List[Callable[[str], List[NewsItem]]]] = {
            'news': [self.fetch_yahoo_rss, self.fetch_google_rss, self.fetch_finnhub],
            'reddit': [self.fetch_reddit],
        }
        requested = sources or list(handlers)
        unsupported = [s for s in requested if s not in handlers]
        if unsupported:
            logger.warning(f"No fetcher for sentiment source(s) {unsupported}; skipping them")

        self.source_handlers = {s: handlers[s] for s in requested if s in handlers}
        if not self.source_handlers:
            raise ValueError(f"None of the sentiment sources {requested} are supported")

        # Compile regex patterns for keywords
        self.positive_patterns = self._compile(self.config.positive_keywords)
        self.negative_patterns = self._compile(self.config.negative_keywords)

    @staticmethod
    def _compile(keywords: List[str]) -> List[Tuple[str, re.Pattern]]:
        return [
            (kw, re.compile(r'\b' + re.escape(kw) + r'\b', re.IGNORECASE))
            for kw in keywords
        ]

    # ---- fetchers -------------------------------------------------------

    def _get(self, url: str, **kwargs) -> requests.Response:
        response = self.session.get(url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response

    def _get_listing(self, url: str) -> List[Dict]:
        """Post payloads from a Reddit listing; malformed listings raise ProviderUnavailableError"""
        data = self._get(url).json()
        listing = data.get('data') if isinstance(data, dict) else None
        children = listing.get('children') if isinstance(listing, dict) else None
        if not isinstance(children, list):
            raise ProviderUnavailableError(f"Unexpected Reddit payload from {url}", self.name)
        return [post['data'] for post in children if isinstance(post, dict) and isinstance(post.get('data'), dict)]

    def _parse_feed(self, url: str, limit: int = 10) -> List[NewsItem]:
        feed = feedparser.parse(self._get(url).content)
        items = []
        for entry in feed.entries[:limit]:
            published = None
            if getattr(entry, 'published_parsed', None):
                published = datetime(*entry.published_parsed[:6], tzinfo=timezone.utc)
            items.append(NewsItem(entry.get('title', ''), entry.get('summary', ''), published))
        return items

    def fetch_yahoo_rss(self, symbol: str) -> List[NewsItem]:
        """Fetch news from Yahoo Finance RSS"""
        url = f"https://feeds.finance.yahoo.com/rss/2.0/headline?s={symbol}&region=US&lang=en-US"
        return self._parse_feed(url)

    def fetch_google_rss(self, symbol: str) -> List[NewsItem]:
        """Fetch news from Google News RSS"""
        url = f"https://news.google.com/rss/search?q={symbol}+stock&hl=en-US&gl=US&ceid=US:en"
        return self._parse_feed(url)

    def fetch_finnhub(self, symbol: str) -> List[NewsItem]:
        """Fetch news from Finnhub (free tier: 60 requests/min)"""
        if not self.finnhub_key:
            return []

        end_date = datetime.now(timezone.utc)
        start_date = end_date - timedelta(days=7)
        params = {
            'symbol': symbol,
            'from': start_date.strftime('%Y-%m-%d'),
            'to': end_date.strftime('%Y-%m-%d'),
            'token': self.finnhub_key,
        }
        data = self._get("https://finnhub.io/api/v1/company-news", params=params).json()
        if not isinstance(data, list):
            raise ProviderUnavailableError(f"Unexpected Finnhub payload for {symbol}", self.name, symbol)

        items = []
        for article in data[:10]:
            if not isinstance(article, dict):
                continue
            published = None
            if article.get('datetime'):
                published = datetime.fromtimestamp(article['datetime'], tz=timezone.utc)
            items.append(NewsItem(article.get('headline', ''), article.get('summary', ''), published))
        return items

    def fetch_reddit(self, symbol: str) -> List[NewsItem]:
        """Fetch mentions from Reddit (r/stocks, r/wallstreetbets, r/investing)"""
        items = []
        for subreddit in REDDIT_SUBREDDITS:
            url = f"https://www.reddit.com/r/{subreddit}/search.json?q={symbol}&restrict_sr=1&sort=new&limit=25"
            for post_data in self._get_listing(url):
                published = None
                if post_data.get('created_utc'):
                    published = datetime.fromtimestamp(post_data['created_utc'], tz=timezone.utc)
                items.append(NewsItem(post_data.get('title', ''), (post_data.get('selftext') or '')[:500], published))
        return items

    # ---- scoring --------------------------------------------------------

    def match_keywords(self, text: str) -> Tuple[List[str], int, int]:
        """Matched keywords (positive first, in list order) and pos/neg counts"""
        matched = []
        positive = negative = 0

        for kw, pattern in self.positive_patterns:
            if pattern.search(text):
                positive += 1
                matched.append(kw)

        for kw, pattern in self.negative_patterns:
            if pattern.search(text):
                negative += 1
                matched.append(kw)

        return matched, positive, negative

    def score_source(self, name: str, items: List[NewsItem]) -> SentimentSource:
        """Turn fetched items into a SentimentSource"""
        cutoff = datetime.now(timezone.utc) - timedelta(hours=self.config.news_lookback_hours)
        recent = [i for i in items if not (i.published and i.published < cutoff)]

        keywords: List[str] = []
        total_positive = total_negative = 0
        for item in recent:
            matched, pos, neg = self.match_keywords(item.text)
            total_positive += pos
            total_negative += neg
            for kw in matched:
                if kw not in keywords:
                    keywords.append(kw)

        hits = total_positive + total_negative
        score = (total_positive - total_negative) / hits if hits else 0.0

        return SentimentSource(name=name, score=score, mentions=len(recent), keywords=tuple(keywords))

    # ---- contract -------------------------------------------------------

    def analyze(self, symbol: str) -> SentimentAnalysis:
        """Fetch and score every configured source for a symbol"""
        sources = []
        failures = []

        for name, fetchers in self.source_handlers.items():
            items: List[NewsItem] = []
            for fetch in fetchers:
                fetcher = getattr(fetch, "__name__", name)
                try:
                    items.extend(fetch(symbol))
                except (requests.RequestException, ValueError, ProviderUnavailableError) as e:
                    failures.append(f"{fetcher}: {e}")
                    logger.debug(f"{symbol}: {fetcher} failed: {e}")
            sources.append(self.score_source(name, items))

        total_fetchers = sum(len(f) for f in self.source_handlers.values())
        if len(failures) == total_fetchers:
            raise ProviderUnavailableError(
                f"All sentiment fetches failed for {symbol}: {'; '.join(failures)}", self.name, symbol
            )

        return build_analysis(symbol, sources, self.weights, self.config.live_trending_mention_threshold)

    def trending_symbols(self, limit: int = 10) -> List[str]:
        """Most mentioned tickers in the r/wallstreetbets hot listing"""
        try:
            posts = self._get_listing("https://www.reddit.com/r/wallstreetbets/hot.json?limit=50")
        except (requests.RequestException, ValueError) as e:
            raise ProviderUnavailableError(f"Reddit trending request failed: {e}", self.name) from e

        ticker_counts: Dict[str, int] = {}
        for post_data in posts:
            text = f"{post_data.get('title', '')} {(post_data.get('selftext') or '')[:500]}"
            for match in _TICKER_PATTERN.findall(text):
                ticker = match[0] or match[1]
                if ticker and ticker not in TICKER_STOPWORDS:
                    ticker_counts[ticker] = ticker_counts.get(ticker, 0) + 1

        # At least 2 mentions; ties keep first-seen order
        ranked = sorted(ticker_counts.items(), key=lambda x: x[1], reverse=True)
        return [ticker for ticker, count in ranked if count >= 2][:limit]
