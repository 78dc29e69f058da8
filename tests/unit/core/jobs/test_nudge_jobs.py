"""Tests for the periodic nudge check job."""

from datetime import timedelta
from unittest.mock import Mock, patch

from django.core.cache import cache
from django.test import TestCase, override_settings

from core.constants import NUDGE_TICK_LOCK_KEY
from core.jobs.nudge_jobs import (
    NUDGE_CHECK_JOB,
    cancel_scheduled_nudge_checks,
    ensure_nudge_check_scheduled,
    restart_nudge_checks,
    run_nudge_check_job,
    schedule_next_nudge_check,
    tick_lock_timeout,
)


@override_settings(NUDGE_CHECK_INTERVAL_SECONDS=900, NUDGE_CHECK_TIMEOUT_SECONDS=600)
class TestRunNudgeCheckJob(TestCase):
    """Test suite for run_nudge_check_job."""

    def setUp(self):
        """Set up test fixtures."""
        cache.clear()
        scheduler_patcher = patch("core.jobs.nudge_jobs.django_rq.get_scheduler")
        self.mock_get_scheduler = scheduler_patcher.start()
        self.addCleanup(scheduler_patcher.stop)
        self.scheduler = self.mock_get_scheduler.return_value

    @patch("core.jobs.nudge_jobs.run_inactivity_check", return_value=2)
    def test_runs_check_and_reschedules(self, mock_check):
        """Test a run checks once, releases the lock and schedules the next."""
        result = run_nudge_check_job()

        self.assertEqual(result, 2)
        mock_check.assert_called_once_with()
        self.assertIsNone(cache.get(NUDGE_TICK_LOCK_KEY))
        self.scheduler.enqueue_in.assert_called_once_with(
            timedelta(seconds=900), NUDGE_CHECK_JOB, timeout=600
        )

    @patch("core.jobs.nudge_jobs.run_inactivity_check")
    def test_skips_when_another_run_holds_the_lock(self, mock_check):
        """Test an overlapping run neither checks nor reschedules."""
        cache.add(NUDGE_TICK_LOCK_KEY, True)

        self.assertIsNone(run_nudge_check_job())

        mock_check.assert_not_called()
        self.scheduler.enqueue_in.assert_not_called()
        self.assertTrue(cache.get(NUDGE_TICK_LOCK_KEY))

    @patch(
        "core.jobs.nudge_jobs.run_inactivity_check",
        side_effect=RuntimeError("database gone"),
    )
    def test_failure_still_releases_lock_and_reschedules(self, mock_check):
        """Test the chain survives a failing run."""
        with self.assertRaises(RuntimeError):
            run_nudge_check_job()

        self.assertIsNone(cache.get(NUDGE_TICK_LOCK_KEY))
        self.scheduler.enqueue_in.assert_called_once()

    @patch("core.jobs.nudge_jobs.run_inactivity_check", return_value=0)
    @patch("core.jobs.nudge_jobs.cache")
    def test_lock_outlives_the_job_timeout(self, mock_cache, mock_check):
        """Test the lock cannot expire while rq still lets the run continue."""
        mock_cache.add.return_value = True

        run_nudge_check_job()

        mock_cache.add.assert_called_once_with(NUDGE_TICK_LOCK_KEY, True, timeout=660)
        self.assertGreater(tick_lock_timeout(), 600)


class TestSchedulingHelpers(TestCase):
    """Test suite for the scheduling helpers."""

    @patch("core.jobs.nudge_jobs.django_rq.get_scheduler")
    def test_schedule_with_explicit_delay(self, mock_get_scheduler):
        """Test an explicit delay overrides the interval."""
        schedule_next_nudge_check(30)

        mock_get_scheduler.assert_called_once_with("default")
        mock_get_scheduler.return_value.enqueue_in.assert_called_once_with(
            timedelta(seconds=30), NUDGE_CHECK_JOB, timeout=600
        )

    @patch("core.jobs.nudge_jobs.django_rq.get_scheduler")
    def test_cancel_removes_only_nudge_checks(self, mock_get_scheduler):
        """Test delivery jobs are left in the scheduler."""
        nudge_job = Mock(func_name=NUDGE_CHECK_JOB)
        delivery_job = Mock(func_name="core.jobs.delivery_jobs.deliver_push_job")
        scheduler = mock_get_scheduler.return_value
        scheduler.get_jobs.return_value = [nudge_job, delivery_job]

        removed = cancel_scheduled_nudge_checks()

        self.assertEqual(removed, 1)
        scheduler.cancel.assert_called_once_with(nudge_job)


class TestChainRecovery(TestCase):
    """Test suite for re-arming and restarting the check chain."""

    def setUp(self):
        """Set up test fixtures."""
        cache.clear()
        scheduler_patcher = patch("core.jobs.nudge_jobs.django_rq.get_scheduler")
        self.scheduler = scheduler_patcher.start().return_value
        self.addCleanup(scheduler_patcher.stop)
        self.scheduler.get_jobs.return_value = []

    def test_dead_chain_is_rearmed(self):
        """Test a chain with no scheduled run and no lock gets a new run."""
        self.assertTrue(ensure_nudge_check_scheduled())

        self.scheduler.enqueue_in.assert_called_once_with(
            timedelta(seconds=0), NUDGE_CHECK_JOB, timeout=600
        )

    def test_live_chain_is_left_alone(self):
        """Test a scheduled run or a run in flight keeps the chain as is."""
        self.scheduler.get_jobs.return_value = [Mock(func_name=NUDGE_CHECK_JOB)]
        self.assertFalse(ensure_nudge_check_scheduled())

        self.scheduler.get_jobs.return_value = []
        cache.add(NUDGE_TICK_LOCK_KEY, True)
        self.assertFalse(ensure_nudge_check_scheduled())

        self.scheduler.enqueue_in.assert_not_called()

    def test_restart_clears_stale_lock(self):
        """Test a restart removes old runs and a lock left by a killed run."""
        stale = Mock(func_name=NUDGE_CHECK_JOB)
        self.scheduler.get_jobs.return_value = [stale]
        cache.add(NUDGE_TICK_LOCK_KEY, True)

        removed = restart_nudge_checks(5)

        self.assertEqual(removed, 1)
        self.scheduler.cancel.assert_called_once_with(stale)
        self.assertIsNone(cache.get(NUDGE_TICK_LOCK_KEY))
        self.scheduler.enqueue_in.assert_called_once_with(
            timedelta(seconds=5), NUDGE_CHECK_JOB, timeout=600
        )
