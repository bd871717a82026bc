"""
Staging Selector

Picks tomorrow's song, uploads a clip of it and stages it in the "next"
slot with the following day number.
"""

import logging
import random

from django.db import transaction

from src.tools.media import fetch_clip, probe_duration
from .clip import clip_start_from_draw, clip_window_seconds
from .exceptions import CatalogEmptyError, MediaLookupError, SequenceError, StorageError
from .links import resolve_playable_link
from .models import DailySong, Song
from .pipeline import Pipeline, PipelineResult
from .storage import signed_url, storage_name, upload_clip

logger = logging.getLogger(__name__)


class StagingSelector:
    """Build and run the staging pipeline."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def run(self) -> PipelineResult:
        pipeline = Pipeline("stage", [
            ("pick_song", self.pick_song),
            ("resolve_duration", self.resolve_duration),
            ("choose_clip_start", self.choose_clip_start),
            ("read_current", self.read_current),
            ("fetch_clip", self.fetch_clip),
            ("upload_clip", self.upload_clip),
            ("sign_url", self.sign_url),
            ("upsert_next", self.upsert_next),
        ])
        return pipeline.run()

    # ----- Steps -----

    def pick_song(self, ctx: dict) -> dict:
        count = Song.objects.count()
        if count == 0:
            raise CatalogEmptyError()

        index = self.rng.randrange(count)
        try:
            song = Song.objects.order_by("created_at", "id")[index]
        except IndexError:
            raise CatalogEmptyError(f"Catalog shrank below {index + 1} songs while sampling")
        logger.info(f"New daily song: {song.name}")
        return {"_song": song, "song": song.name, "song_index": index}

    def resolve_duration(self, ctx: dict) -> dict:
        song = ctx["_song"]
        duration = probe_duration(song.link)
        if duration < clip_window_seconds():
            raise MediaLookupError(f"{song.name} is only {duration}s long")
        return {"duration": duration}

    def choose_clip_start(self, ctx: dict) -> dict:
        duration = ctx["duration"]
        draw = self.rng.randrange(duration)
        start_time = clip_start_from_draw(draw, duration)
        logger.info(f"Random start time: {start_time}")
        return {"draw": draw, "start_time": start_time}

    def read_current(self, ctx: dict) -> dict:
        current = DailySong.get_or_none(DailySong.Slot.CURRENT)
        if current is None or current.heardle_day is None:
            raise SequenceError()
        return {"previous_day": current.heardle_day, "heardle_day": current.heardle_day + 1}

    def fetch_clip(self, ctx: dict) -> dict:
        clip = fetch_clip(ctx["_song"].link, ctx["start_time"])
        logger.info(f"{ctx['song']} downloaded successfully!")
        return {"_clip": clip, "clip_bytes": clip.size}

    def upload_clip(self, ctx: dict) -> dict:
        # One blob per day; the clip "current" links to must stay in place
        name = storage_name(ctx["heardle_day"])
        return {"storage_path": upload_clip(ctx["_clip"].content, name)}

    def sign_url(self, ctx: dict) -> dict:
        try:
            url = signed_url(ctx["storage_path"])
        except StorageError as e:
            logger.warning(f"Falling back to catalog link: {e.message}")
            url = None

        source, link = resolve_playable_link(url, ctx["_song"].link)
        return {"link": link, "link_source": source}

    def upsert_next(self, ctx: dict) -> dict:
        song = ctx["_song"]
        heardle_day = ctx["heardle_day"]
        with transaction.atomic():
            current = DailySong.get_or_none(DailySong.Slot.CURRENT, for_update=True)
            if current is None or current.heardle_day != ctx["previous_day"]:
                raise SequenceError(f"Current daily song moved past day {ctx['previous_day']} while staging")
            DailySong.upsert(
                DailySong.Slot.NEXT,
                name=song.name,
                album=song.album_name,
                cover=song.cover,
                link=ctx["link"],
                start_time=ctx["start_time"],
                heardle_day=heardle_day,
                song=song,
                claimed_at=None,
            )
        logger.info(f"Staged {song.name} as day {heardle_day}")
        return {"heardle_day": heardle_day}


def stage_next_song(rng: random.Random | None = None) -> PipelineResult:
    """Run the Staging Selector once."""
    return StagingSelector(rng=rng).run()
