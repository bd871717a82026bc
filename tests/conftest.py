from datetime import timedelta

import django
from django.conf import settings


def pytest_configure():
    """Configure Django settings before tests."""
    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY="test-secret-key-for-testing-only",
            DATABASES={
                "default": {
                    "ENGINE": "django.db.backends.sqlite3",
                    "NAME": ":memory:",
                }
            },
            INSTALLED_APPS=[
                "django.contrib.auth",
                "django.contrib.contenttypes",
                "rest_framework",
                "src.api",
                "src.rotation",
            ],
            DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
            USE_TZ=True,
            ROOT_URLCONF="config.urls",
            REST_FRAMEWORK={
                "DEFAULT_AUTHENTICATION_CLASSES": [
                    "src.api.auth.CronTokenAuthentication",
                ],
                "DEFAULT_PERMISSION_CLASSES": [],
                "UNAUTHENTICATED_USER": None,
            },
            CRON_TOKEN="test-cron-token",
            DAILY_SONG_STORAGE_NAME="daily_song/day-{day}.mp3",
            DAILY_SONG_URL_EXPIRY=timedelta(hours=48),
            DAILY_SONG_LEAD_IN_SECONDS=7,
            DAILY_SONG_CLIP_WINDOW_SECONDS=6,
            DAILY_SONG_MEDIA_TIMEOUT=5,
            MEDIA_ROOT="/tmp/test_media",
            MEDIA_URL="media/",
        )
    django.setup()


def pytest_sessionstart(session):
    """Create database tables for in-memory SQLite test DB."""
    from django.core.management import call_command

    call_command("migrate", "--run-syncdb", verbosity=0)
