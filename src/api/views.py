"""
API Views for the scheduler-triggered daily rotation.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from src.rotation.models import DailySong
from src.rotation.reconciler import rollover
from src.rotation.selector import stage_next_song
from src.rotation.serializers import build_rollover_response, build_staging_response
from src.rotation.tasks import rollover_daily_song, stage_daily_song
from .auth import CronTokenAuthentication

logger = logging.getLogger(__name__)


class CronView(APIView):
    """Base view: cron token required, errors reported as {"error": ...}."""

    authentication_classes = [CronTokenAuthentication]
    permission_classes = [IsAuthenticated]

    def handle_exception(self, exc):
        response = super().handle_exception(exc)
        if isinstance(exc, exceptions.APIException):
            response.data = {"error": str(exc.detail)}
        return response

    def should_defer(self, request) -> bool:
        return request.query_params.get("defer", "").lower() in ("1", "true", "yes")

    def queue(self, task):
        """Queue a rotation task. Returns a 202 response, or 503 if the queue is down."""
        try:
            result = task.delay()
        except Exception as e:
            logger.error(f"Failed to queue {task.name}: {e}")
            return Response(
                {"error": "Rotation worker unavailable"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        logger.info(f"Queued {task.name} as {result.id}")
        return Response(
            {"message": "Queued", "task_id": result.id},
            status=status.HTTP_202_ACCEPTED,
        )


class StageNextSongView(CronView):
    """
    Stage tomorrow's daily song.

    POST /api/cron/daily-song/stage/
    Headers: Authorization: Bearer <CRON_TOKEN>
    Query: ?defer=true to run on a Celery worker

    Returns:
        {
            "message": "Successfully uploaded new daily song! <url>",
            "link": "<url>",
            "heardle_day": 42,
            ...
        }
    """

    def post(self, request):
        if self.should_defer(request):
            return self.queue(stage_daily_song)

        result = stage_next_song()
        body = build_staging_response(result)
        if not result.success:
            return Response(body, status=result.error.status_code)
        return Response(body)


class RolloverView(CronView):
    """
    Reset streaks and promote the staged song.

    POST /api/cron/daily-song/rollover/
    Headers: Authorization: Bearer <CRON_TOKEN>

    Returns 200 on success, 207 when some users could not be reconciled.
    """

    def post(self, request):
        if self.should_defer(request):
            return self.queue(rollover_daily_song)

        report = rollover()
        body = build_rollover_response(report)
        if not report.success:
            return Response(body, status=report.result.error.status_code)
        if report.partial:
            return Response(body, status=status.HTTP_207_MULTI_STATUS)
        return Response(body)


class DailySongStatusView(CronView):
    """
    Show both daily song slots.

    GET /api/cron/daily-song/
    """

    def get(self, request):
        slots = {}
        for slot in DailySong.Slot.values:
            daily_song = DailySong.get_or_none(slot)
            slots[slot] = daily_song.as_dict() if daily_song else None
        return Response(slots)
