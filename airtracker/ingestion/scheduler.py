"""
Scheduler for periodic ingestion cycles.

A ticker thread fires every `interval` seconds; each tick runs one
orchestrator cycle on a worker thread. At most one cycle is in flight:
a tick that fires while the previous cycle is still fetching is skipped,
not queued, so a slow provider can never pile up outbound requests.

State machine: IDLE -> FETCHING -> IDLE
"""

import logging
import threading
import time
from enum import Enum
from typing import Optional

from airtracker.config import config
from airtracker.ingestion.pipeline import FetchOrchestrator, FetchOutcome

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = 'idle'
    FETCHING = 'fetching'


class IngestionScheduler:
    """
    Runs the fetch orchestrator at a fixed interval with single-flight
    guarding.

    On start() one cycle is triggered immediately so the first queries
    are not served against an empty store.
    """

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        interval: Optional[float] = None,
    ):
        self.orchestrator = orchestrator
        self.interval = interval or config.ingestion.update_interval

        self._in_flight = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._worker: Optional[threading.Thread] = None

        # State tracking
        self._state = SchedulerState.IDLE
        self._running = False
        self._fetch_count = 0
        self._error_count = 0
        self._skipped_count = 0
        self._last_fetch_time: float = 0
        self._last_outcome: Optional[FetchOutcome] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    def trigger(self) -> bool:
        """
        Start one ingestion cycle in the background.

        Returns False (and does nothing) if a cycle is already in flight.
        """
        if not self._in_flight.acquire(blocking=False):
            self._skipped_count += 1
            logger.info('Previous fetch still in flight, skipping this tick')
            return False

        self._state = SchedulerState.FETCHING
        self._worker = threading.Thread(
            target=self._run_cycle,
            name='aircraft-fetch',
            daemon=True,
        )
        self._worker.start()
        return True

    def _run_cycle(self) -> None:
        """Run one cycle. Errors are logged; the next tick tries again."""
        try:
            outcome = self.orchestrator.run()
            self._last_outcome = outcome
            self._fetch_count += 1
            self._last_fetch_time = time.time()
        except Exception as e:
            self._error_count += 1
            logger.exception(f'Ingestion cycle failed: {e}')
        finally:
            self._state = SchedulerState.IDLE
            self._in_flight.release()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the in-flight cycle (if any) finishes."""
        worker = self._worker
        if worker is not None:
            worker.join(timeout)

    def run_continuous(self) -> None:
        """
        Tick forever until stop() is called.

        This method blocks - use start() for non-blocking.
        """
        self._running = True
        logger.info(f'Starting aircraft updates (interval={self.interval}s)')

        # Initial update before the first interval elapses
        self.trigger()

        while not self._stop_event.wait(self.interval):
            self.trigger()

        self._running = False
        logger.info('Aircraft updates stopped')

    def start(self) -> None:
        """Start the ticker in a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning('Aircraft update service already running')
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_continuous,
            name='aircraft-scheduler',
            daemon=True,
        )
        self._thread.start()
        logger.info(f'Aircraft update service started (updates every {self.interval} seconds)')

    def stop(self, timeout: float = 5) -> None:
        """Stop ticking and give the in-flight cycle a moment to finish."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
        self.wait(timeout)
        self._running = False
        logger.info('Aircraft update service stopped')

    @property
    def stats(self) -> dict:
        """Get scheduler statistics."""
        return {
            'running': self._running,
            'state': self._state.value,
            'interval_seconds': self.interval,
            'fetch_count': self._fetch_count,
            'error_count': self._error_count,
            'skipped_count': self._skipped_count,
            'last_fetch_time': self._last_fetch_time,
            'last_outcome': self._last_outcome.to_dict() if self._last_outcome else None,
        }
