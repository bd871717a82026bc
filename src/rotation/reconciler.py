"""
Rollover Reconciler

Ends the current day: resets the streak of every user who didn't finish
it, clears all guesses, and promotes the staged "next" song to "current".
"""

import logging
from dataclasses import dataclass, field

from django.contrib.auth.models import User
from django.db import DatabaseError, transaction
from pydantic import BaseModel

from .exceptions import NothingStagedError, SequenceError
from .models import DailySong, GuessedSong, Guesses, Statistics
from .pipeline import Pipeline, PipelineResult

logger = logging.getLogger(__name__)


class UserOutcome(BaseModel):
    """Streak reconciliation result for one user."""

    user_id: int
    username: str
    completed: bool = False
    streak_reset: bool = False
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class RolloverReport:
    result: PipelineResult
    outcomes: list[UserOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.result.success

    @property
    def failures(self) -> list[UserOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def partial(self) -> bool:
        """Day advanced, but some users could not be reconciled."""
        return self.success and bool(self.failures)


class RolloverReconciler:
    """Build and run the rollover pipeline."""

    def run(self) -> RolloverReport:
        pipeline = Pipeline("rollover", [
            ("check_staged", self.check_staged),
            ("reconcile_streaks", self.reconcile_streaks),
            ("purge_guesses", self.purge_guesses),
            ("promote", self.promote),
        ])
        result = pipeline.run()
        if not result.success and result.context.get("_claimed") and "guesses_deleted" not in result.context:
            # Guesses are still intact, so a later trigger can retry the day
            DailySong.release_next(result.context["staged_day"])
            logger.warning(f"Released claim on day {result.context['staged_day']}")
        return RolloverReport(result=result, outcomes=result.context.get("_outcomes", []))

    # ----- Steps -----

    def check_staged(self, ctx: dict) -> dict:
        """
        Claim the staged day before any user is touched.

        Both slots are locked while the day sequence is checked, and the claim
        is a conditional update on "next", so of two overlapping rollovers
        only one gets past this step.
        """
        with transaction.atomic():
            next_song = DailySong.get_or_none(DailySong.Slot.NEXT, for_update=True)
            if next_song is None:
                raise NothingStagedError()
            current = DailySong.get_or_none(DailySong.Slot.CURRENT, for_update=True)
            self.check_sequence(current, next_song)

            if not DailySong.claim_next(next_song.heardle_day):
                raise NothingStagedError(f"Day {next_song.heardle_day} is already being promoted")

        logger.info(f"Claimed day {next_song.heardle_day} for rollover")
        return {"staged_day": next_song.heardle_day, "_claimed": True}

    def check_sequence(self, current: DailySong | None, next_song: DailySong) -> None:
        if current is None or current.heardle_day is None:
            return
        if next_song.heardle_day is None:
            raise SequenceError("Next daily song has no day number")
        if next_song.heardle_day <= current.heardle_day:
            raise NothingStagedError(f"Day {next_song.heardle_day} has already been promoted")
        if next_song.heardle_day != current.heardle_day + 1:
            raise SequenceError(
                f"Next daily song is day {next_song.heardle_day}, "
                f"expected day {current.heardle_day + 1}"
            )

    def reconcile_streaks(self, ctx: dict) -> dict:
        outcomes = [self.reconcile_user(user) for user in User.objects.order_by("id").iterator()]
        failed = [outcome for outcome in outcomes if not outcome.success]
        if failed:
            logger.error(f"Could not reconcile {len(failed)} of {len(outcomes)} users")

        return {
            "_outcomes": outcomes,
            "users": len(outcomes),
            "streaks_reset": sum(outcome.streak_reset for outcome in outcomes),
            "failed_users": len(failed),
        }

    def reconcile_user(self, user: User) -> UserOutcome:
        outcome = UserOutcome(user_id=user.id, username=user.username)
        try:
            with transaction.atomic():
                outcome.completed = Guesses.completed_daily_for(user)
                if not outcome.completed:
                    Statistics.reset_streak_for(user)
                    outcome.streak_reset = True
        except DatabaseError as e:
            logger.error(f"Error reconciling user {user.id}: {e}")
            outcome.error = str(e)
        return outcome

    def purge_guesses(self, ctx: dict) -> dict:
        deleted, _ = GuessedSong.objects.all().delete()
        logger.info(f"Deleted {deleted} guesses")
        return {"guesses_deleted": deleted}

    def promote(self, ctx: dict) -> dict:
        with transaction.atomic():
            next_song = DailySong.get_or_none(DailySong.Slot.NEXT, for_update=True)
            if next_song is None:
                raise NothingStagedError()
            if next_song.heardle_day != ctx["staged_day"]:
                raise SequenceError(
                    f"Next daily song changed from day {ctx['staged_day']} "
                    f"to day {next_song.heardle_day} during rollover"
                )
            self.check_sequence(DailySong.get_or_none(DailySong.Slot.CURRENT, for_update=True), next_song)
            current = DailySong.upsert(DailySong.Slot.CURRENT, **next_song.slot_fields())

        logger.info(f"Promoted {current.name} to current (day {current.heardle_day})")
        return {"heardle_day": current.heardle_day, "link": current.link}


def rollover() -> RolloverReport:
    """Run the Rollover Reconciler once."""
    return RolloverReconciler().run()
