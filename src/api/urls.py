"""
API URL routing.
"""

from django.urls import path

from .views import DailySongStatusView, RolloverView, StageNextSongView

urlpatterns = [
    # Scheduler endpoints
    path("cron/daily-song/", DailySongStatusView.as_view(), name="daily-song-status"),
    path("cron/daily-song/stage/", StageNextSongView.as_view(), name="daily-song-stage"),
    path("cron/daily-song/rollover/", RolloverView.as_view(), name="daily-song-rollover"),
]
