"""Playable link resolution for the staged daily song."""

from .exceptions import StorageError

# Highest precedence first
LINK_PRECEDENCE = ("signed_url", "raw_link")


def resolve_playable_link(signed_url: str | None, raw_link: str | None) -> tuple[str, str]:
    """
    Pick the link players will stream from.

    Returns:
        (source, link) where source is the name of the winning candidate
    """
    candidates = {"signed_url": signed_url, "raw_link": raw_link}
    for source in LINK_PRECEDENCE:
        if candidates[source]:
            return source, candidates[source]
    raise StorageError("No playable link available for the daily song")
