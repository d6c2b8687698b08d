import threading
import time

from airtracker.exceptions import StorageError
from airtracker.ingestion.base import RawObservation
from airtracker.ingestion.pipeline import FetchOutcome, FetchStatus
from airtracker.ingestion.scheduler import IngestionScheduler, SchedulerState
from airtracker.services.tracker import TrackerService


class BlockingOrchestrator:
    """Holds each cycle open until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.runs = 0

    def run(self):
        self.runs += 1
        self.started.set()
        self.release.wait(5)
        return FetchOutcome(FetchStatus.UPDATED, provider_used="opensky", count=1)


class SlowOrchestrator:
    """Each cycle outlasts several ticks."""

    def __init__(self, duration):
        self.duration = duration
        self.runs = 0

    def run(self):
        self.runs += 1
        time.sleep(self.duration)
        return FetchOutcome(FetchStatus.NO_DATA)


class FailingOrchestrator:
    def __init__(self):
        self.runs = 0

    def run(self):
        self.runs += 1
        raise StorageError("Failed to store aircraft data")


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_tick_during_fetch_is_skipped():
    orchestrator = BlockingOrchestrator()
    scheduler = IngestionScheduler(orchestrator, interval=60)

    assert scheduler.trigger() is True
    assert orchestrator.started.wait(5)
    assert scheduler.state is SchedulerState.FETCHING

    assert scheduler.trigger() is False
    assert scheduler.stats["skipped_count"] == 1

    orchestrator.release.set()
    scheduler.wait(5)

    assert orchestrator.runs == 1
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.stats["fetch_count"] == 1
    assert scheduler.stats["last_outcome"] == {
        "status": "updated",
        "provider_used": "opensky",
        "count": 1,
    }


def test_failed_cycle_does_not_stop_scheduling():
    orchestrator = FailingOrchestrator()
    scheduler = IngestionScheduler(orchestrator, interval=60)

    assert scheduler.trigger() is True
    scheduler.wait(5)
    assert scheduler.trigger() is True
    scheduler.wait(5)

    assert orchestrator.runs == 2
    assert scheduler.stats["error_count"] == 2
    assert scheduler.state is SchedulerState.IDLE


def test_start_fetches_immediately():
    orchestrator = BlockingOrchestrator()
    orchestrator.release.set()
    scheduler = IngestionScheduler(orchestrator, interval=60)

    scheduler.start()
    try:
        assert orchestrator.started.wait(5)
        assert wait_for(lambda: scheduler.stats["fetch_count"] == 1)
        assert scheduler.stats["running"] is True

        # Second start is a no-op
        scheduler.start()
    finally:
        scheduler.stop(timeout=5)

    assert orchestrator.runs == 1
    assert scheduler.stats["running"] is False


def test_periodic_ticks_skip_while_fetching():
    orchestrator = SlowOrchestrator(duration=0.25)
    scheduler = IngestionScheduler(orchestrator, interval=0.05)

    scheduler.start()
    try:
        assert wait_for(lambda: orchestrator.runs >= 2, timeout=5.0)
    finally:
        scheduler.stop(timeout=5)

    stats = scheduler.stats
    assert stats["skipped_count"] > 0
    assert stats["error_count"] == 0
    assert stats["last_outcome"] == {"status": "no_data", "provider_used": None, "count": 0}


def test_tracker_service_ingests_on_start(store, fake_adapter):
    adapter = fake_adapter("opensky", [RawObservation(icao24="abc123", latitude=1.0, longitude=2.0, altitude=500.0)])
    service = TrackerService(store, [adapter], interval=60)

    service.start()
    try:
        assert wait_for(lambda: service.scheduler.stats["fetch_count"] == 1)
    finally:
        service.stop()

    assert store.get("abc123").provider == "opensky"
    assert [n.aircraft.icao24 for n in service.proximity.nearby(1.0, 2.0, 10.0)] == ["abc123"]
