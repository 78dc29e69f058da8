"""Periodic job firing inactivity nudges.

The job reschedules itself after every run. A cache lock keeps two runs
from overlapping: a run that finds the lock taken exits without doing
anything and without rescheduling, leaving the chain to the run in flight.

Each run is enqueued with ``NUDGE_CHECK_TIMEOUT_SECONDS`` as its rq job
timeout and the lock lives slightly longer, so the lock cannot expire
under a run that is still going. A run killed by that timeout never
reschedules; ``ensure_nudge_check_scheduled`` re-arms such a chain.
"""

from datetime import timedelta

from django.conf import settings
from django.core.cache import cache

import django_rq
import structlog

from core.constants import NUDGE_TICK_LOCK_KEY, NUDGE_TICK_LOCK_MARGIN_SECONDS
from core.logging import clear_job_id, set_job_id
from core.services.smart_nudge_service import run_inactivity_check

logger = structlog.get_logger(__name__)

NUDGE_CHECK_JOB = "core.jobs.nudge_jobs.run_nudge_check_job"


def tick_lock_timeout() -> int:
    """Seconds the tick lock is held before it expires on its own."""
    return settings.NUDGE_CHECK_TIMEOUT_SECONDS + NUDGE_TICK_LOCK_MARGIN_SECONDS


def run_nudge_check_job() -> int | None:
    """Run one inactivity check.

    Returns:
        Number of users nudged, or None if another run held the lock.
    """
    set_job_id("nudge-check")
    try:
        if not cache.add(NUDGE_TICK_LOCK_KEY, True, timeout=tick_lock_timeout()):
            logger.info("nudge_check_skipped_in_flight")
            return None

        try:
            return run_inactivity_check()
        finally:
            cache.delete(NUDGE_TICK_LOCK_KEY)
            schedule_next_nudge_check()
    finally:
        clear_job_id()


def schedule_next_nudge_check(delay_seconds: int | None = None) -> None:
    """Schedule the next run ``delay_seconds`` from now.

    Args:
        delay_seconds: Defaults to ``NUDGE_CHECK_INTERVAL_SECONDS``.
    """
    if delay_seconds is None:
        delay_seconds = settings.NUDGE_CHECK_INTERVAL_SECONDS

    scheduler = django_rq.get_scheduler("default")
    scheduler.enqueue_in(
        timedelta(seconds=delay_seconds),
        NUDGE_CHECK_JOB,
        timeout=settings.NUDGE_CHECK_TIMEOUT_SECONDS,
    )
    logger.info("nudge_check_scheduled", delay_seconds=delay_seconds)


def _scheduled_checks(scheduler) -> list:
    return [job for job in scheduler.get_jobs() if job.func_name == NUDGE_CHECK_JOB]


def cancel_scheduled_nudge_checks() -> int:
    """Remove every scheduled run from the scheduler.

    Returns:
        Number of runs removed.
    """
    scheduler = django_rq.get_scheduler("default")
    removed = _scheduled_checks(scheduler)
    for job in removed:
        scheduler.cancel(job)
    return len(removed)


def ensure_nudge_check_scheduled() -> bool:
    """Restart the chain if no run is scheduled and none is in flight.

    Returns:
        True when a new run was scheduled.
    """
    scheduler = django_rq.get_scheduler("default")
    if _scheduled_checks(scheduler) or cache.get(NUDGE_TICK_LOCK_KEY):
        return False

    logger.warning("nudge_check_chain_rearmed")
    schedule_next_nudge_check(0)
    return True


def restart_nudge_checks(delay_seconds: int = 0) -> int:
    """Replace every scheduled run, and any stale lock, with one fresh run.

    Returns:
        Number of scheduled runs replaced.
    """
    removed = cancel_scheduled_nudge_checks()
    cache.delete(NUDGE_TICK_LOCK_KEY)
    schedule_next_nudge_check(delay_seconds)
    return removed
