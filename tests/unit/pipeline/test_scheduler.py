#!/usr/bin/env python3
"""
Unit tests for the daily score job scheduler.
"""

import os
import shutil
import tempfile
import threading
import time
import unittest
from datetime import datetime, time as dtime, timedelta
from unittest.mock import Mock

from pipeline.control import JobRunLock
from pipeline.scheduler import DailyScheduler, SchedulerState, next_run_after


def _wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestNextRunAfter(unittest.TestCase):

    def test_later_today(self):
        now = datetime(2024, 3, 1, 0, 30)

        self.assertEqual(next_run_after(now, dtime(1, 0)), datetime(2024, 3, 1, 1, 0))

    def test_tomorrow_when_passed(self):
        now = datetime(2024, 3, 1, 13, 0)

        self.assertEqual(next_run_after(now, dtime(1, 0)), datetime(2024, 3, 2, 1, 0))

    def test_exactly_at_run_time_moves_to_next_day(self):
        now = datetime(2024, 3, 1, 1, 0)

        self.assertEqual(next_run_after(now, dtime(1, 0)), datetime(2024, 3, 2, 1, 0))

    def test_month_rollover(self):
        now = datetime(2024, 2, 29, 23, 59, 30)

        self.assertEqual(next_run_after(now, dtime(1, 0)), datetime(2024, 3, 1, 1, 0))


class TestDailyScheduler(unittest.TestCase):

    def test_run_now_runs_job(self):
        job = Mock(return_value="report")
        scheduler = DailyScheduler(job)

        self.assertTrue(scheduler.run_now())

        job.assert_called_once()
        self.assertEqual(scheduler.last_report, "report")
        self.assertIs(scheduler.state, SchedulerState.IDLE)
        self.assertIsNotNone(scheduler.last_finished_at)

    def test_run_rejected_while_running(self):
        started = threading.Event()
        release = threading.Event()
        calls = []

        def job(stop_event):
            calls.append(1)
            started.set()
            release.wait(2)
            return "done"

        scheduler = DailyScheduler(job)

        self.assertTrue(scheduler.trigger_async())
        self.assertTrue(started.wait(2))
        self.assertIs(scheduler.state, SchedulerState.RUNNING)

        self.assertFalse(scheduler.run_now())
        self.assertFalse(scheduler.trigger_async())

        release.set()
        self.assertTrue(_wait_until(lambda: scheduler.state is SchedulerState.IDLE))
        self.assertEqual(len(calls), 1)
        self.assertEqual(scheduler.last_report, "done")

    def test_failing_job_returns_to_idle(self):
        job = Mock(side_effect=[RuntimeError("boom"), "ok"])
        scheduler = DailyScheduler(job)

        self.assertTrue(scheduler.run_now())
        self.assertIs(scheduler.state, SchedulerState.IDLE)
        self.assertEqual(scheduler.last_error, "boom")

        self.assertTrue(scheduler.run_now())
        self.assertIsNone(scheduler.last_error)
        self.assertEqual(scheduler.last_report, "ok")

    def test_failed_run_clears_previous_report(self):
        job = Mock(side_effect=["first report", RuntimeError("db down")])
        scheduler = DailyScheduler(job)

        scheduler.run_now()
        self.assertEqual(scheduler.last_report, "first report")

        scheduler.run_now()
        self.assertIsNone(scheduler.last_report)
        self.assertEqual(scheduler.last_error, "db down")

    def test_job_receives_stop_event(self):
        job = Mock(return_value=None)
        scheduler = DailyScheduler(job)

        scheduler.run_now()

        stop_event = job.call_args[0][0]
        self.assertIsInstance(stop_event, threading.Event)

    def test_fires_at_scheduled_time_and_rearms(self):
        ran = threading.Event()
        runs = []

        class FakeClock:
            """Starts at 00:30 and moves 20 minutes on every reading."""
            def __init__(self):
                self.current = datetime(2024, 3, 1, 0, 30)

            def __call__(self):
                value = self.current
                self.current += timedelta(minutes=20)
                return value

        def job(stop_event):
            runs.append(1)
            ran.set()

        scheduler = DailyScheduler(job, run_at=dtime(1, 0), now_fn=FakeClock(), poll_seconds=0.01)
        scheduler.start()
        try:
            self.assertTrue(ran.wait(2))
            self.assertTrue(_wait_until(
                lambda: scheduler.next_run_at is not None and scheduler.next_run_at >= datetime(2024, 3, 2, 1, 0)
            ))
        finally:
            scheduler.stop(timeout=2)

        self.assertGreaterEqual(len(runs), 1)

    def test_stop_before_trigger(self):
        job = Mock()
        scheduler = DailyScheduler(job, run_at=dtime(1, 0), now_fn=lambda: datetime(2024, 3, 1, 12, 0), poll_seconds=0.01)

        scheduler.start()
        self.assertTrue(_wait_until(lambda: scheduler.next_run_at is not None))
        scheduler.stop(timeout=2)

        job.assert_not_called()
        self.assertEqual(scheduler.next_run_at, datetime(2024, 3, 2, 1, 0))


class TestSchedulerWithRunLock(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.lock_path = os.path.join(self.temp_dir, "score_job.lock")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_rejected_when_lock_held_elsewhere(self):
        other = JobRunLock(self.lock_path)
        self.assertTrue(other.acquire("other-process"))
        job = Mock()
        scheduler = DailyScheduler(job, run_lock=JobRunLock(self.lock_path))

        try:
            self.assertFalse(scheduler.run_now())
        finally:
            other.release()

        job.assert_not_called()
        self.assertIs(scheduler.state, SchedulerState.IDLE)

    def test_lock_released_after_run(self):
        scheduler = DailyScheduler(Mock(), run_lock=JobRunLock(self.lock_path))

        self.assertTrue(scheduler.run_now())

        other = JobRunLock(self.lock_path)
        self.assertTrue(other.acquire("other-process"))
        other.release()


if __name__ == '__main__':
    unittest.main()
