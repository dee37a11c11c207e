"""Tests for the premarket scheduler"""

from datetime import datetime

import pytest
import pytz

from pick_scanner.config import AppConfig
from pick_scanner.errors import InvalidConfigError, ProviderUnavailableError
from pick_scanner.pipeline import ScanPipeline
from pick_scanner.scheduler import ScanScheduler
from pick_scanner.service import PickResult, PickService

EASTERN = pytz.timezone("US/Eastern")


class RecordingService:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def get_picks(self, config, limit=10, **kwargs):
        self.calls.append(limit)
        if self.error:
            raise self.error
        return PickResult(picks=[])


def make_scheduler(service=None, sleeps=None, **schedule):
    config = AppConfig()
    for key, value in schedule.items():
        setattr(config.schedule, key, value)
    sleeps = sleeps if sleeps is not None else []
    return ScanScheduler(service or RecordingService(), config, sleep=sleeps.append)


def test_next_run_same_day():
    scheduler = make_scheduler()
    # Monday 08:00 EDT
    now = datetime(2024, 5, 13, 12, 0, tzinfo=pytz.UTC)

    next_run = scheduler.next_run_time(now)
    assert next_run == EASTERN.localize(datetime(2024, 5, 13, 8, 30))


def test_next_run_after_scan_time_moves_to_next_day():
    scheduler = make_scheduler()
    # Monday 08:30 EDT exactly
    now = datetime(2024, 5, 13, 12, 30, tzinfo=pytz.UTC)

    assert scheduler.next_run_time(now).date() == datetime(2024, 5, 14).date()


def test_next_run_skips_weekend():
    scheduler = make_scheduler()
    # Friday 10:00 EDT
    now = datetime(2024, 5, 10, 14, 0, tzinfo=pytz.UTC)

    next_run = scheduler.next_run_time(now)
    assert next_run == EASTERN.localize(datetime(2024, 5, 13, 8, 30))
    assert next_run.weekday() == 0


def test_naive_now_is_treated_as_utc():
    scheduler = make_scheduler()
    naive = datetime(2024, 5, 13, 12, 0)
    aware = datetime(2024, 5, 13, 12, 0, tzinfo=pytz.UTC)

    assert scheduler.next_run_time(naive) == scheduler.next_run_time(aware)


def test_custom_time_and_timezone():
    scheduler = make_scheduler(premarket_scan_time="07:15", timezone="Asia/Kolkata")
    now = datetime(2024, 5, 13, 0, 0, tzinfo=pytz.UTC)  # 05:30 IST

    next_run = scheduler.next_run_time(now)
    assert (next_run.hour, next_run.minute) == (7, 15)
    assert next_run.tzinfo.zone == "Asia/Kolkata"


def test_run_scan_uses_default_limit(capsys):
    service = RecordingService()
    scheduler = make_scheduler(service, default_limit=5)

    scheduler.run_scan()

    assert service.calls == [5]
    assert "PREMARKET SCAN STARTED" in capsys.readouterr().out


def test_run_scheduled_stops_after_max_runs(make_providers, capsys):
    quotes, sentiment = make_providers({"NVDA": (12.0, 3_000_000, 0.6, True)}, gainers=("NVDA",))
    sleeps = []
    scheduler = make_scheduler(PickService(ScanPipeline(quotes, sentiment)), sleeps)

    scheduler.run_scheduled(max_runs=2)

    assert len(sleeps) == 2
    assert all(s >= 0 for s in sleeps)
    assert quotes.calls == ["NVDA", "NVDA"]
    assert "NVDA" in capsys.readouterr().out


def test_scan_errors_do_not_stop_schedule(capsys):
    service = RecordingService(error=ProviderUnavailableError("movers down"))
    scheduler = make_scheduler(service)

    scheduler.run_scheduled(max_runs=3)

    assert len(service.calls) == 3
    assert "Scan error: movers down" in capsys.readouterr().out


def test_unexpected_errors_do_not_stop_schedule(capsys):
    service = RecordingService(error=AttributeError("'list' object has no attribute 'get'"))
    scheduler = make_scheduler(service)

    scheduler.run_scheduled(max_runs=2)

    assert len(service.calls) == 2
    assert "Scan error:" in capsys.readouterr().out


def test_keyboard_interrupt_stops_schedule(capsys):
    service = RecordingService()

    def interrupt(seconds):
        raise KeyboardInterrupt

    config = AppConfig()
    ScanScheduler(service, config, sleep=interrupt).run_scheduled()

    assert service.calls == []
    assert "Scanner stopped" in capsys.readouterr().out


def test_overrides_are_passed_to_every_scan():
    class KwargsService(RecordingService):
        def get_picks(self, config, limit=10, **kwargs):
            self.calls.append((limit, kwargs))
            return PickResult(picks=[])

    service = KwargsService()
    config = AppConfig()
    scheduler = ScanScheduler(service, config, sleep=lambda s: None, limit=3, min_confidence=0.8, timeout=30.0)

    scheduler.run_scheduled(max_runs=1)

    assert service.calls == [(3, {"min_confidence": 0.8, "timeout": 30.0})]


def test_invalid_overrides_rejected_up_front():
    for kwargs in ({"limit": 0}, {"limit": 21}, {"min_confidence": 1.5}):
        with pytest.raises(InvalidConfigError):
            ScanScheduler(RecordingService(), AppConfig(), **kwargs)
