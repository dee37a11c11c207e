"""
Yahoo Finance Quote Provider

Quotes come from yfinance; movers (gainers, losers, most active) are scraped
from the Yahoo Finance screener pages.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

import requests
import yfinance as yf
from bs4 import BeautifulSoup

from ..errors import ProviderUnavailableError, SymbolNotFoundError
from ..models import MoversSnapshot, Quote
from .base import QuoteProvider

logger = logging.getLogger(__name__)

# User agent to avoid blocks
HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
}

MOVER_PAGES = {
    'gainers': "https://finance.yahoo.com/markets/stocks/gainers/",
    'losers': "https://finance.yahoo.com/markets/stocks/losers/",
    'volume_spikes': "https://finance.yahoo.com/markets/stocks/most-active/",
}

_VOLUME_SUFFIXES = {'K': 1_000, 'M': 1_000_000, 'B': 1_000_000_000, 'T': 1_000_000_000_000}


def parse_number(text: str) -> Optional[float]:
    """Parse '1,234.50', '+3.2%' or '$12' into a float; None when unparsable"""
    cleaned = re.sub(r'[,$€£%+\s]', '', text or '')
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_volume(text: str) -> Optional[int]:
    """Parse '12.5M' / '830K' / '1,204,300' into an integer share count"""
    cleaned = re.sub(r'[,\s]', '', text or '').upper()
    if not cleaned:
        return None
    multiplier = _VOLUME_SUFFIXES.get(cleaned[-1])
    if multiplier:
        cleaned = cleaned[:-1]
    try:
        return int(round(float(cleaned) * (multiplier or 1)))
    except ValueError:
        return None


class YahooQuoteProvider(QuoteProvider):
    """Live quotes and movers from Yahoo Finance"""

    name = "yahoo"

    def __init__(self, movers_limit: int = 5, timeout: int = 15, session: Optional[requests.Session] = None):
        self.movers_limit = movers_limit
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(HEADERS)

    def get_quote(self, symbol: str) -> Quote:
        """Fetch a quote for a single stock"""
        try:
            info = yf.Ticker(symbol).info
        except Exception as e:
            raise ProviderUnavailableError(f"yfinance lookup failed for {symbol}: {e}", self.name, symbol) from e

        if not info:
            raise SymbolNotFoundError(f"No quote data for {symbol}", self.name, symbol)

        price = info.get('currentPrice') or info.get('regularMarketPrice') or info.get('preMarketPrice')
        if price is None:
            raise SymbolNotFoundError(f"No price for {symbol}", self.name, symbol)

        previous_close = info.get('regularMarketPreviousClose') or info.get('previousClose')
        change = info.get('regularMarketChange')
        if change is None and previous_close:
            change = price - previous_close

        change_pct = info.get('regularMarketChangePercent')
        if change_pct is None and previous_close:
            change_pct = (price - previous_close) / previous_close * 100

        volume = info.get('regularMarketVolume') or info.get('volume') or 0

        return Quote(
            symbol=symbol,
            price=float(price),
            change=float(change or 0.0),
            change_percent=float(change_pct or 0.0),
            volume=int(volume),
            company_name=info.get('shortName') or info.get('longName'),
        )

    def get_movers(self) -> MoversSnapshot:
        """Scrape top gainers, top losers and most active stocks"""
        lists: Dict[str, Tuple[Quote, ...]] = {}
        for key, url in MOVER_PAGES.items():
            lists[key] = tuple(self._scrape_table(url)[:self.movers_limit])
            logger.info(f"{key}: {len(lists[key])} stocks")

        return MoversSnapshot(
            gainers=lists['gainers'],
            losers=lists['losers'],
            volume_spikes=lists['volume_spikes'],
        )

    def _scrape_table(self, url: str) -> List[Quote]:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ProviderUnavailableError(f"Yahoo movers request failed ({url}): {e}", self.name) from e

        return self.parse_movers_table(response.text, url)

    def parse_movers_table(self, html: str, url: str = "") -> List[Quote]:
        """Parse a Yahoo screener table into quotes.

        Expected columns: symbol, name, (chart), price, change, change %,
        volume. The optional chart column is detected by an empty cell.
        """
        soup = BeautifulSoup(html, 'html.parser')
        table = soup.find('table')
        if table is None:
            raise ProviderUnavailableError(f"No movers table found at {url or 'page'}", self.name)

        quotes = []
        for row in table.find_all('tr')[1:]:
            cols = [td.get_text(" ", strip=True) for td in row.find_all('td')]
            # Drop empty sparkline cells
            cols = [c for c in cols if c]
            if len(cols) < 6:
                continue

            symbol = cols[0].split()[0].upper()
            price = parse_number(cols[2].split()[0])
            change = parse_number(cols[3])
            change_pct = parse_number(cols[4])
            volume = parse_volume(cols[5])

            if not symbol or len(symbol) > 10 or price is None or volume is None:
                logger.debug(f"Skipping unparsable movers row: {cols}")
                continue

            quotes.append(Quote(
                symbol=symbol,
                price=price,
                change=change or 0.0,
                change_percent=change_pct or 0.0,
                volume=volume,
                company_name=cols[1],
            ))

        return quotes
