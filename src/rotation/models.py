"""
Rotation Models

Song catalog, the two daily song slots, and per-user game state.
"""

import uuid

from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone


class Song(models.Model):
    """Catalog entry the daily song is drawn from."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4)

    name = models.CharField(max_length=255)
    album = models.CharField(max_length=255, blank=True)
    link = models.URLField(max_length=500)
    cover = models.URLField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return self.name

    @property
    def album_name(self) -> str:
        return self.album or self.name


class DailySong(models.Model):
    """
    One of the two daily song slots.

    "next" is written by the Staging Selector, "current" by the Rollover
    Reconciler (copied from "next").
    """

    class Slot(models.TextChoices):
        CURRENT = "current"
        NEXT = "next"

    slot = models.CharField(max_length=10, choices=Slot.choices, primary_key=True)

    name = models.CharField(max_length=255)
    album = models.CharField(max_length=255, blank=True)
    cover = models.URLField(max_length=500, blank=True)
    # Holds presigned URLs, which can run past 2000 characters
    link = models.TextField()
    start_time = models.PositiveIntegerField(default=0)
    heardle_day = models.PositiveIntegerField(null=True, blank=True)
    # Set on "next" by the rollover that owns the promotion, cleared on restaging
    claimed_at = models.DateTimeField(null=True, blank=True)

    song = models.ForeignKey(Song, on_delete=models.SET_NULL, null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Fields promoted verbatim from "next" to "current"
    SLOT_FIELDS = ("name", "album", "cover", "link", "start_time", "heardle_day", "song")

    def __str__(self):
        return f"{self.slot}: {self.name} (day {self.heardle_day})"

    # ----- Class methods -----

    @classmethod
    def get_or_none(cls, slot: str, for_update: bool = False) -> "DailySong | None":
        """Get a slot by key, returning None if it has never been written."""
        queryset = cls.objects.select_for_update() if for_update else cls.objects
        try:
            return queryset.get(slot=slot)
        except cls.DoesNotExist:
            return None

    @classmethod
    def upsert(cls, slot: str, **fields) -> "DailySong":
        daily_song, _ = cls.objects.update_or_create(slot=slot, defaults=fields)
        return daily_song

    @classmethod
    def claim_next(cls, heardle_day: int | None) -> bool:
        """
        Claim the staged day for promotion.

        The conditional update means only one concurrent caller gets True
        for a given staging.
        """
        claimed = cls.objects.filter(
            slot=cls.Slot.NEXT, heardle_day=heardle_day, claimed_at__isnull=True
        ).update(claimed_at=timezone.now())
        return claimed == 1

    @classmethod
    def release_next(cls, heardle_day: int | None) -> None:
        cls.objects.filter(slot=cls.Slot.NEXT, heardle_day=heardle_day).update(claimed_at=None)

    # ----- Serialisation -----

    def slot_fields(self) -> dict:
        return {field: getattr(self, field) for field in self.SLOT_FIELDS}

    def as_dict(self) -> dict:
        return {
            "slot": self.slot,
            "name": self.name,
            "album": self.album,
            "cover": self.cover,
            "link": self.link,
            "start_time": self.start_time,
            "heardle_day": self.heardle_day,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Statistics(models.Model):
    """Lifetime game statistics for a user."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="statistics")
    games_played = models.PositiveIntegerField(default=0)
    games_won = models.PositiveIntegerField(default=0)
    current_streak = models.PositiveIntegerField(default=0)
    max_streak = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name_plural = "statistics"

    def __str__(self):
        return f"{self.user.username}: streak {self.current_streak}/{self.max_streak}"

    @classmethod
    def reset_streak_for(cls, user: User) -> "Statistics":
        """
        Zero the user's current streak, leaving every other counter alone.

        Users without a Statistics row get one with all counters at 0.
        """
        stats, created = cls.objects.get_or_create(user=user)
        if not created and stats.current_streak != 0:
            stats.current_streak = 0
            stats.save(update_fields=["current_streak"])
        return stats


class Guesses(models.Model):
    """A user's guesses for the current day."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="guesses")

    class Meta:
        verbose_name_plural = "guesses"

    def __str__(self):
        return f"Guesses for {self.user.username}"

    def last_guess(self) -> "GuessedSong | None":
        return self.songs.order_by("created_at", "id").last()

    @classmethod
    def completed_daily_for(cls, user: User) -> bool:
        """True iff the user's last recorded guess is exactly correct."""
        try:
            guesses = cls.objects.get(user=user)
        except cls.DoesNotExist:
            return False
        last = guesses.last_guess()
        return last is not None and last.correct_status == GuessedSong.Status.CORRECT


class GuessedSong(models.Model):
    """One guess in a user's daily sequence."""

    guesses = models.ForeignKey(Guesses, on_delete=models.CASCADE, related_name="songs")
    name = models.CharField(max_length=255, blank=True)

    class Status(models.TextChoices):
        CORRECT = "correct"
        INCORRECT = "incorrect"
        IN_PROGRESS = "in_progress"

    correct_status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.IN_PROGRESS
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.name or '(skipped)'} ({self.correct_status})"
