"""Tests for the scheduler-triggered rotation endpoints."""

from unittest.mock import MagicMock, patch

from django.test import TestCase
from rest_framework.test import APIClient

from src.rotation.exceptions import MediaFetchError, NothingStagedError, SequenceError
from src.rotation.models import DailySong
from src.rotation.pipeline import PipelineResult
from src.rotation.reconciler import RolloverReport, UserOutcome

AUTH = {"HTTP_AUTHORIZATION": "Bearer test-cron-token"}


def staged_result():
    return PipelineResult(name="stage", context={
        "link": "https://cdn/daily_song.mp3?sig=1",
        "link_source": "signed_url",
        "heardle_day": 12,
        "start_time": 33,
    })


def rollover_report(outcomes=None):
    result = PipelineResult(name="rollover", context={
        "heardle_day": 12,
        "link": "https://cdn/daily_song.mp3?sig=1",
        "streaks_reset": 2,
        "guesses_deleted": 9,
    })
    return RolloverReport(result=result, outcomes=outcomes or [])


class TestCronAuth(TestCase):

    def setUp(self):
        self.client = APIClient()

    @patch("src.api.views.stage_next_song")
    def test_missing_token_returns_401(self, mock_stage):
        response = self.client.post("/api/cron/daily-song/stage/")
        assert response.status_code == 401
        assert "error" in response.json()
        mock_stage.assert_not_called()

    @patch("src.api.views.rollover")
    def test_wrong_token_returns_401(self, mock_rollover):
        response = self.client.post(
            "/api/cron/daily-song/rollover/", HTTP_AUTHORIZATION="Bearer wrong"
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication failed"}
        mock_rollover.assert_not_called()

    def test_status_requires_token(self):
        assert self.client.get("/api/cron/daily-song/").status_code == 401


class TestStageNextSongView(TestCase):

    def setUp(self):
        self.client = APIClient()

    @patch("src.api.views.stage_next_song")
    def test_success_returns_link(self, mock_stage):
        mock_stage.return_value = staged_result()

        response = self.client.post("/api/cron/daily-song/stage/", **AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["link"] == "https://cdn/daily_song.mp3?sig=1"
        assert data["heardle_day"] == 12
        assert data["message"].startswith("Successfully uploaded new daily song!")

    @patch("src.api.views.stage_next_song")
    def test_sequence_error_returns_500_with_step(self, mock_stage):
        mock_stage.return_value = PipelineResult(
            name="stage", error=SequenceError(), failed_step="read_current"
        )

        response = self.client.post("/api/cron/daily-song/stage/", **AUTH)

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Couldn't find previous daily song or its day number"
        assert data["step"] == "read_current"

    @patch("src.api.views.stage_next_song")
    def test_media_error_returns_500(self, mock_stage):
        mock_stage.return_value = PipelineResult(
            name="stage", error=MediaFetchError("stream ended"), failed_step="fetch_clip"
        )
        response = self.client.post("/api/cron/daily-song/stage/", **AUTH)
        assert response.status_code == 500
        assert response.json()["error"] == "stream ended"

    @patch("src.api.views.stage_daily_song")
    def test_defer_queues_task(self, mock_task):
        mock_task.delay.return_value = MagicMock(id="task-123")

        response = self.client.post("/api/cron/daily-song/stage/?defer=true", **AUTH)

        assert response.status_code == 202
        assert response.json()["task_id"] == "task-123"

    @patch("src.api.views.stage_daily_song")
    def test_defer_with_queue_down_returns_503(self, mock_task):
        mock_task.delay.side_effect = ConnectionError("broker down")

        response = self.client.post("/api/cron/daily-song/stage/?defer=1", **AUTH)

        assert response.status_code == 503

    def test_get_not_allowed(self):
        response = self.client.get("/api/cron/daily-song/stage/", **AUTH)
        assert response.status_code == 405


class TestRolloverView(TestCase):

    def setUp(self):
        self.client = APIClient()

    @patch("src.api.views.rollover")
    def test_success(self, mock_rollover):
        mock_rollover.return_value = rollover_report()

        response = self.client.post("/api/cron/daily-song/rollover/", **AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Successfully reset users and set new daily song!"
        assert data["streaks_reset"] == 2
        assert "failed_users" not in data

    @patch("src.api.views.rollover")
    def test_nothing_staged_returns_404(self, mock_rollover):
        mock_rollover.return_value = RolloverReport(result=PipelineResult(
            name="rollover", error=NothingStagedError(), failed_step="check_staged"
        ))

        response = self.client.post("/api/cron/daily-song/rollover/", **AUTH)

        assert response.status_code == 404
        assert response.json()["error"] == "Error finding next daily song"

    @patch("src.api.views.rollover")
    def test_partial_rollover_returns_207(self, mock_rollover):
        mock_rollover.return_value = rollover_report(outcomes=[
            UserOutcome(user_id=1, username="alice", completed=True),
            UserOutcome(user_id=2, username="bob", error="database is locked"),
        ])

        response = self.client.post("/api/cron/daily-song/rollover/", **AUTH)

        assert response.status_code == 207
        failed = response.json()["failed_users"]
        assert [user["username"] for user in failed] == ["bob"]

    @patch("src.api.views.rollover_daily_song")
    def test_defer_queues_task(self, mock_task):
        mock_task.delay.return_value = MagicMock(id="task-456")
        response = self.client.post("/api/cron/daily-song/rollover/?defer=yes", **AUTH)
        assert response.status_code == 202
        assert response.json()["task_id"] == "task-456"


class TestDailySongStatusView(TestCase):

    def test_shows_both_slots(self):
        DailySong.upsert(DailySong.Slot.CURRENT, name="Iris", link="https://cdn/iris.mp3", heardle_day=4)

        response = APIClient().get("/api/cron/daily-song/", **AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["current"]["name"] == "Iris"
        assert data["next"] is None
