"""Celery tasks for the daily rotation."""

import logging

from celery import shared_task

from .reconciler import rollover
from .selector import stage_next_song
from .serializers import build_rollover_response, build_staging_response

logger = logging.getLogger(__name__)


@shared_task
def stage_daily_song():
    """Stage tomorrow's song on a worker. Returns the trigger response body."""
    result = stage_next_song()
    if result.success:
        logger.info(f"Staged day {result.context['heardle_day']}")
    else:
        logger.error(f"Staging failed at {result.failed_step}: {result.error.message}")
    return build_staging_response(result)


@shared_task
def rollover_daily_song():
    """Advance the day on a worker. Returns the trigger response body."""
    report = rollover()
    if not report.success:
        logger.error(f"Rollover failed at {report.result.failed_step}: {report.result.error.message}")
    elif report.partial:
        logger.warning(f"Rollover finished with {len(report.failures)} failed users")
    return build_rollover_response(report)
