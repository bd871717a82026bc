"""Media lookup and clip download for catalog songs."""

import io
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

import yt_dlp
from django.conf import settings

from src.rotation.exceptions import MediaFetchError, MediaLookupError

logger = logging.getLogger(__name__)

CLIP_FORMAT = "mp3"
CLIP_MIME_TYPE = "audio/mpeg"
CLIP_BITRATE = "192k"


@dataclass
class AudioClip:
    """Trimmed, encoded audio ready for upload."""

    content: bytes
    start_time: int
    mime_type: str = CLIP_MIME_TYPE
    extension: str = f".{CLIP_FORMAT}"

    @property
    def size(self) -> int:
        return len(self.content)


def _ydl_options(**overrides) -> dict:
    options = {
        "quiet": True,
        "no_warnings": True,
        "noplaylist": True,
        "socket_timeout": getattr(settings, "DAILY_SONG_MEDIA_TIMEOUT", 30),
    }
    options.update(overrides)
    return options


def probe_duration(locator: str) -> int:
    """
    Look up a song's total duration without downloading it.

    Args:
        locator: Source media URL from the catalog

    Returns:
        Duration in whole seconds

    Raises:
        MediaLookupError: If the locator can't be resolved or has no duration
    """
    try:
        with yt_dlp.YoutubeDL(_ydl_options(skip_download=True)) as ydl:
            info = ydl.extract_info(locator, download=False)
    except Exception as e:
        raise MediaLookupError(f"Could not look up {locator}: {e}")

    duration = info.get("duration") if isinstance(info, dict) else None
    if not duration:
        raise MediaLookupError(f"No duration reported for {locator}")
    try:
        return int(duration)
    except (TypeError, ValueError):
        raise MediaLookupError(f"Unusable duration {duration!r} reported for {locator}")


def trim_to_clip(source: Path | io.BytesIO, start_time: int) -> AudioClip:
    """Cut everything before start_time and encode the rest as MP3 using pydub/ffmpeg."""
    from pydub import AudioSegment

    segment = AudioSegment.from_file(source)
    buffer = io.BytesIO()
    segment[start_time * 1000:].export(buffer, format=CLIP_FORMAT, bitrate=CLIP_BITRATE)
    return AudioClip(content=buffer.getvalue(), start_time=start_time)


def fetch_clip(locator: str, start_time: int) -> AudioClip:
    """
    Download the best audio-only stream for a song and trim it.

    Nothing is returned unless the whole download and encode succeeded, so a
    failure mid-stream never yields a partial clip.

    Raises:
        MediaFetchError: On download, decode or encode failure
    """
    from pydub.exceptions import CouldntDecodeError, CouldntEncodeError

    with tempfile.TemporaryDirectory(prefix="daily_song_") as tmp_dir:
        options = _ydl_options(
            format="bestaudio/best",
            outtmpl=str(Path(tmp_dir) / "source.%(ext)s"),
        )
        try:
            with yt_dlp.YoutubeDL(options) as ydl:
                info = ydl.extract_info(locator, download=True)
                source_path = Path(ydl.prepare_filename(info))
        except yt_dlp.utils.DownloadError as e:
            raise MediaFetchError(f"Error downloading {locator}: {e}")

        if not source_path.exists():
            raise MediaFetchError(f"Download of {locator} produced no file")

        logger.info(f"Downloaded {locator} ({source_path.stat().st_size} bytes), trimming from {start_time}s")
        try:
            return trim_to_clip(source_path, start_time)
        except (CouldntDecodeError, CouldntEncodeError, OSError) as e:
            raise MediaFetchError(f"Error encoding clip for {locator}: {e}")
