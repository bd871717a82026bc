"""Low-level media utilities."""

from .media import AudioClip, fetch_clip, probe_duration, trim_to_clip

__all__ = ["AudioClip", "fetch_clip", "probe_duration", "trim_to_clip"]
