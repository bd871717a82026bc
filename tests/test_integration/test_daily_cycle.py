"""End-to-end daily cycle through the trigger API."""

from unittest.mock import patch

from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient

from src.rotation.models import DailySong, GuessedSong, Guesses, Song, Statistics
from src.tools.media import AudioClip

AUTH = {"HTTP_AUTHORIZATION": "Bearer test-cron-token"}


@patch("src.rotation.selector.signed_url", return_value="https://cdn/daily_song.mp3?sig=xyz")
@patch("src.rotation.selector.upload_clip", return_value="daily_song/daily_song.mp3")
@patch("src.rotation.selector.fetch_clip", return_value=AudioClip(content=b"mp3", start_time=0))
@patch("src.rotation.selector.probe_duration", return_value=180)
class TestDailyCycle(TestCase):

    def setUp(self):
        self.client = APIClient()
        Song.objects.create(name="Creep", album="Pablo Honey", link="https://yt/creep")
        DailySong.upsert(DailySong.Slot.CURRENT, name="Iris", link="https://cdn/iris.mp3", heardle_day=1)

        self.winner = User.objects.create_user(username="winner", password="test")
        self.loser = User.objects.create_user(username="loser", password="test")
        for user, status in ((self.winner, GuessedSong.Status.CORRECT), (self.loser, GuessedSong.Status.INCORRECT)):
            Statistics.objects.create(user=user, games_played=5, games_won=4, current_streak=4, max_streak=4)
            guesses = Guesses.objects.create(user=user)
            GuessedSong.objects.create(guesses=guesses, name="Creep", correct_status=status)

    def test_stage_then_rollover(self, *mocks):
        stage = self.client.post("/api/cron/daily-song/stage/", **AUTH)
        assert stage.status_code == 200, stage.json()
        assert stage.json()["heardle_day"] == 2

        staged = DailySong.get_or_none(DailySong.Slot.NEXT).slot_fields()

        roll = self.client.post("/api/cron/daily-song/rollover/", **AUTH)
        assert roll.status_code == 200, roll.json()

        assert DailySong.get_or_none(DailySong.Slot.CURRENT).slot_fields() == staged
        assert GuessedSong.objects.count() == 0
        assert Statistics.objects.get(user=self.winner).current_streak == 4
        loser_stats = Statistics.objects.get(user=self.loser)
        assert loser_stats.current_streak == 0
        assert loser_stats.max_streak == 4

        # Duplicate trigger before anything new is staged
        again = self.client.post("/api/cron/daily-song/rollover/", **AUTH)
        assert again.status_code == 404
        assert again.json()["step"] == "check_staged"

        # Next day
        stage = self.client.post("/api/cron/daily-song/stage/", **AUTH)
        assert stage.json()["heardle_day"] == 3
        assert self.client.post("/api/cron/daily-song/rollover/", **AUTH).status_code == 200
        assert DailySong.get_or_none(DailySong.Slot.CURRENT).heardle_day == 3

    def test_rollover_before_first_staging_fails(self, *mocks):
        response = self.client.post("/api/cron/daily-song/rollover/", **AUTH)

        assert response.status_code == 404
        assert GuessedSong.objects.count() == 2
        assert Statistics.objects.get(user=self.loser).current_streak == 4
