"""
Scanner Scheduler - one premarket scan per trading day
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytz

from .config import AppConfig, MAX_PICK_LIMIT, parse_scan_time
from .errors import InvalidConfigError, ScannerError
from .service import PickResult, PickService, format_results

logger = logging.getLogger(__name__)

# Saturday, Sunday
WEEKEND_DAYS = (5, 6)


class ScanScheduler:
    """Runs the pick service at the configured premarket scan time"""

    def __init__(
        self,
        service: PickService,
        config: AppConfig,
        sleep: Callable[[float], None] = time.sleep,
        limit: Optional[int] = None,
        min_confidence: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        self.service = service
        self.config = config
        self.limit = config.schedule.default_limit if limit is None else limit
        self.min_confidence = min_confidence
        self.timeout = timeout
        if not 1 <= self.limit <= MAX_PICK_LIMIT:
            raise InvalidConfigError(f"limit must be within [1, {MAX_PICK_LIMIT}], got {self.limit}")
        if min_confidence is not None:
            config.scanner.with_min_confidence(min_confidence).validate()
        self.tz = pytz.timezone(config.schedule.timezone)
        self.scan_hour, self.scan_minute = parse_scan_time(config.schedule.premarket_scan_time)
        self.sleep = sleep

    def next_run_time(self, now: Optional[datetime] = None) -> datetime:
        """Next weekday occurrence of the scan time, in the schedule timezone"""
        if now is None:
            now = datetime.now(pytz.UTC)
        elif now.tzinfo is None:
            now = pytz.UTC.localize(now)
        local_now = now.astimezone(self.tz)

        day = local_now.date()
        while True:
            candidate = self.tz.localize(
                datetime(day.year, day.month, day.day, self.scan_hour, self.scan_minute)
            )
            if candidate.weekday() not in WEEKEND_DAYS and candidate > local_now:
                return candidate
            day += timedelta(days=1)

    def run_scan(self) -> PickResult:
        """Run a single scan with the scheduler's limit and overrides"""
        print(f"\n{'#'*60}")
        print(f"PREMARKET SCAN STARTED - {datetime.now(self.tz).strftime('%Y-%m-%d %H:%M:%S %Z')}")
        print(f"{'#'*60}")

        result = self.service.get_picks(
            self.config.scanner,
            limit=self.limit,
            min_confidence=self.min_confidence,
            timeout=self.timeout,
        )
        print(format_results(result.picks))
        return result

    def run_scheduled(self, max_runs: Optional[int] = None):
        """Run scanner on schedule (blocking)"""
        print(
            f"Starting premarket scanner (weekdays at {self.config.schedule.premarket_scan_time} "
            f"{self.config.schedule.timezone})"
        )
        print("Press Ctrl+C to stop\n")

        runs = 0
        while max_runs is None or runs < max_runs:
            try:
                next_run = self.next_run_time()
                wait_seconds = (next_run - datetime.now(pytz.UTC)).total_seconds()
                print(f"Next scan at {next_run.strftime('%Y-%m-%d %H:%M %Z')}")
                self.sleep(max(0.0, wait_seconds))
                self.run_scan()
            except KeyboardInterrupt:
                print("\nScanner stopped")
                break
            except ScannerError as e:
                print(f"Scan error: {e}")
            except Exception as e:
                logger.exception(f"Unexpected error in scheduled scan: {e}")
                print(f"Scan error: {e}")
            runs += 1
