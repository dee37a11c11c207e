#!/usr/bin/env python3
"""
Premarket Pick Scanner - Run from command line

Usage:
    python -m pick_scanner.run_scanner                     # Single scan with live data
    python -m pick_scanner.run_scanner --offline           # Fixture data, no network
    python -m pick_scanner.run_scanner --limit 5 --min-confidence 0.7
    python -m pick_scanner.run_scanner --scheduled         # Every weekday at scan time
"""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from .config import load_config
from .errors import ScanCancelledError, ScannerError
from .providers.fixtures import sample_providers
from .scheduler import ScanScheduler
from .sentiment import SentimentWeights
from .service import PickService, format_results, picks_to_dataframe


def build_service(config, offline: bool = False) -> PickService:
    """Wire providers and the pick service"""
    if offline:
        quotes, sentiment = sample_providers(SentimentWeights.from_config(config.sentiment))
    else:
        from .providers.news import NewsSentimentProvider
        from .providers.yahoo import YahooQuoteProvider

        quotes = YahooQuoteProvider()
        sentiment = NewsSentimentProvider(config.sentiment, sources=config.scanner.sentiment_sources)

    return PickService.from_config(config, quotes, sentiment)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Premarket Pick Scanner")
    parser.add_argument("--config", help="Path to config YAML file")
    parser.add_argument("--limit", type=int, help="Number of picks to return (1-20)")
    parser.add_argument("--min-confidence", type=float, help="Minimum confidence score (0-1)")
    parser.add_argument("--timeout", type=float, help="Abandon the scan after this many seconds")
    parser.add_argument("--offline", action="store_true", help="Use built-in fixture data")
    parser.add_argument("--scheduled", action="store_true", help="Run every weekday at the premarket scan time")
    parser.add_argument("--json", action="store_true", help="Print picks as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = load_config(args.config)
        service = build_service(config, offline=args.offline)

        if args.scheduled:
            ScanScheduler(
                service,
                config,
                limit=args.limit,
                min_confidence=args.min_confidence,
                timeout=args.timeout,
            ).run_scheduled()
            return 0

        limit = args.limit if args.limit is not None else config.schedule.default_limit
        result = service.get_picks(
            config.scanner,
            limit=limit,
            min_confidence=args.min_confidence,
            timeout=args.timeout,
        )
    except ScanCancelledError as e:
        print(f"Scan stopped early ({e.reason}); {len(e.partial_picks)} partial pick(s):", file=sys.stderr)
        print(format_results(e.partial_picks))
        return 2
    except ScannerError as e:
        print(f"Scan failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_results(result.picks))
        df = picks_to_dataframe(result.picks)
        if not df.empty:
            print(df.to_string(index=False))

    return 0


if __name__ == "__main__":
    sys.exit(main())
