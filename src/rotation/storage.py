"""
Daily song blob storage.

Uses Django's storage backend, so the clip lands on the local filesystem in
development and in S3 (django-storages) when AWS_STORAGE_BUCKET_NAME is set.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from storages.backends.s3boto3 import S3Boto3Storage

from .exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_NAME = "daily_song/day-{day}.mp3"
DEFAULT_URL_EXPIRY = timedelta(hours=48)


def storage_name(heardle_day: int) -> str:
    """Blob name for a day's clip, from the DAILY_SONG_STORAGE_NAME template."""
    template = getattr(settings, "DAILY_SONG_STORAGE_NAME", DEFAULT_STORAGE_NAME)
    return template.format(day=heardle_day)


def upload_clip(content: bytes, name: str, storage=None) -> str:
    """
    Upload the clip, replacing any earlier blob with the same name.

    Returns:
        The storage path the clip was saved under
    """
    storage = storage or default_storage
    try:
        if storage.exists(name):
            storage.delete(name)
        saved_path = storage.save(name, ContentFile(content))
    except Exception as e:
        raise StorageError(f"Error uploading {name}: {e}")

    logger.info(f"Uploaded {len(content)} bytes to {saved_path}")
    return saved_path


def signed_url(name: str, expiry: timedelta | None = None, storage=None) -> str:
    """
    Get a time-limited URL for a stored blob.

    S3 storage presigns the URL for `expiry`; other backends return their
    plain URL.
    """
    storage = storage or default_storage
    expiry = expiry or getattr(settings, "DAILY_SONG_URL_EXPIRY", DEFAULT_URL_EXPIRY)
    try:
        if isinstance(storage, S3Boto3Storage):
            url = storage.url(name, expire=int(expiry.total_seconds()))
        else:
            url = storage.url(name)
    except Exception as e:
        raise StorageError(f"Error getting signed url for {name}: {e}")

    if not url:
        raise StorageError(f"Storage returned no url for {name}")
    return url
