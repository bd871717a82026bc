"""Clip start offset selection for the daily song."""

from django.conf import settings

DEFAULT_LEAD_IN_SECONDS = 7
DEFAULT_CLIP_WINDOW_SECONDS = 6


def lead_in_seconds() -> int:
    return getattr(settings, "DAILY_SONG_LEAD_IN_SECONDS", DEFAULT_LEAD_IN_SECONDS)


def clip_window_seconds() -> int:
    return getattr(settings, "DAILY_SONG_CLIP_WINDOW_SECONDS", DEFAULT_CLIP_WINDOW_SECONDS)


def clip_start_from_draw(draw: int, duration: int) -> int:
    """
    Turn a raw draw into a clip start offset.

    The lead-in is subtracted and the result clamped to
    [0, duration - window], so the clip always fits inside the track.

    Args:
        draw: Raw offset in seconds, normally in [0, duration)
        duration: Track length in seconds

    Returns:
        Start offset in whole seconds
    """
    window = clip_window_seconds()
    if duration < window:
        raise ValueError(f"Track of {duration}s is shorter than the {window}s clip window")

    start = max(draw - lead_in_seconds(), 0)
    if start + window > duration:
        start = duration - window
    return start

