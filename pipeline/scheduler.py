"""Daily scheduler for the course score job.

Owns the run state (IDLE/RUNNING) of the job. A run is started either by the
daily trigger or explicitly through run_now()/trigger_async(); while one run
is in progress every further attempt is rejected, never queued.
"""

import logging
import threading
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Any, Callable, Optional

from pipeline.control import JobRunLock

logger = logging.getLogger(__name__)

DEFAULT_RUN_AT = time(1, 0)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


def next_run_after(now: datetime, run_at: time) -> datetime:
    """First occurrence of run_at strictly after now."""
    candidate = now.replace(
        hour=run_at.hour,
        minute=run_at.minute,
        second=0,
        microsecond=0
    )
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


class DailyScheduler:
    """
    Fires a job once per day at a fixed wall-clock time.

    The job is called with the scheduler's stop event so a long run can end
    early on shutdown. Any exception escaping the job is logged and the next
    daily trigger is armed as usual.
    """

    def __init__(
        self,
        job: Callable[[Optional[threading.Event]], Any],
        run_at: time = DEFAULT_RUN_AT,
        run_lock: Optional[JobRunLock] = None,
        now_fn: Callable[[], datetime] = datetime.now,
        poll_seconds: float = 5.0
    ):
        self.job = job
        self.run_at = run_at
        self.run_lock = run_lock
        self.now_fn = now_fn
        self.poll_seconds = poll_seconds

        self._state = SchedulerState.IDLE
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.next_run_at: Optional[datetime] = None
        self.last_started_at: Optional[datetime] = None
        self.last_finished_at: Optional[datetime] = None
        self.last_report: Any = None
        self.last_error: Optional[str] = None

    @property
    def state(self) -> SchedulerState:
        with self._state_lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    def start(self) -> None:
        """Arm the daily trigger in a background daemon thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name="score-job-scheduler",
            daemon=True
        )
        self._thread.start()
        logger.info(f"Score job scheduler started, daily at {self.run_at.strftime('%H:%M')}")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Score job scheduler stopped")

    def run_now(self, source: str = "manual") -> bool:
        """Run the job in the calling thread.

        Returns:
            False if a run is already in progress (or the cross-process lock
            is held elsewhere), True once the run has finished.
        """
        if not self._try_begin():
            logger.warning(f"Score job run requested by {source} rejected: already running")
            return False
        return self._execute(source)

    def trigger_async(self, source: str = "web") -> bool:
        """Start a run in a background thread; False if one is in progress."""
        if not self._try_begin():
            logger.warning(f"Score job run requested by {source} rejected: already running")
            return False
        thread = threading.Thread(
            target=self._execute,
            args=(source,),
            name=f"score-job-{source}",
            daemon=True
        )
        thread.start()
        return True

    def _try_begin(self) -> bool:
        with self._state_lock:
            if self._state is SchedulerState.RUNNING:
                return False
            self._state = SchedulerState.RUNNING
            return True

    def _execute(self, source: str) -> bool:
        try:
            if self.run_lock and not self.run_lock.acquire(source):
                owner = (self.run_lock.get_lock_info() or {}).get("source", "unknown")
                logger.warning(f"Score job run by {source} rejected: lock held by {owner}")
                return False

            try:
                self.last_started_at = self.now_fn()
                self.last_report = None
                logger.info(f"Score job run started by {source}")
                self.last_report = self.job(self._stop_event)
                self.last_error = None
            except Exception as e:
                self.last_error = str(e)
                logger.error(f"Score job run by {source} failed: {e}", exc_info=True)
            finally:
                self.last_finished_at = self.now_fn()
                if self.run_lock:
                    self.run_lock.release()
            return True
        finally:
            with self._state_lock:
                self._state = SchedulerState.IDLE

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            self.next_run_at = next_run_after(self.now_fn(), self.run_at)
            logger.info(f"Next score update at {self.next_run_at.isoformat()}")

            # Sleep in chunks to allow responsive shutdown
            while not self._stop_event.is_set():
                remaining = (self.next_run_at - self.now_fn()).total_seconds()
                if remaining <= 0:
                    break
                self._stop_event.wait(min(remaining, self.poll_seconds))

            if self._stop_event.is_set():
                break

            self.run_now(source="scheduler")
