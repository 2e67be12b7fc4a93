"""Progress tracker: the single owner of habit, streak and achievement state.

Every public entry point takes the tracker lock for the whole call, so a
toggle's streak update, CO2 total and full achievement recompute always run
to completion before the next call starts. Observers are notified at the end
of each call with a read-only summary. Observer errors are logged and
contained, except StateError from a persistence subscriber, which propagates
to the caller.
"""

from collections.abc import Callable
from datetime import date, datetime
from threading import RLock
from uuid import UUID

from carbonquest.core.config import Settings, get_settings
from carbonquest.core.logging import get_logger, new_correlation_id
from carbonquest.progress.achievement_engine import check_all, recompute_progress
from carbonquest.progress.achievements import seed_achievements
from carbonquest.progress.emissions import calculate_impact
from carbonquest.progress.habits import (
    add_habit,
    completed_habits,
    daily_habits,
    find_habit,
    remove_habit,
    reset_for_new_period,
    seed_habits,
    toggle_completion,
    update_habit,
    validate_habit,
)
from carbonquest.progress.models import (
    Achievement,
    AchievementHistory,
    AchievementProgress,
    AchievementUnlocked,
    Habit,
    HabitStatistics,
    ProgressSummary,
    Streak,
    TrackerSnapshot,
)
from carbonquest.progress.streak_tracker import record_completion, retract_task, roll_over
from carbonquest.shared.exceptions import HabitValidationError, StateError

logger = get_logger(__name__)

SummaryCallback = Callable[[ProgressSummary], None]
UnlockCallback = Callable[[AchievementUnlocked], None]


class ProgressTracker:
    """Owns the progress state tree and serializes every mutation.

    Observers must not call mutating entry points from their callbacks.
    """

    def __init__(
        self,
        habits: list[Habit] | None = None,
        achievements: list[Achievement] | None = None,
        streak: Streak | None = None,
        history: list[AchievementHistory] | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the tracker.

        Args:
            habits: Initial habits (defaults to the seed set)
            achievements: Initial achievements (defaults to level 1 of each kind)
            streak: Initial streak
            history: Initial achievement history
            settings: Application settings (defaults to global settings)
            clock: Returns the current time (defaults to now in the configured timezone)
        """
        self.settings = settings or get_settings()
        self._zone = self.settings.zone
        self._clock = clock or (lambda: datetime.now(self._zone))

        self._habits = list(habits) if habits is not None else seed_habits()
        self._achievements = (
            list(achievements) if achievements is not None else seed_achievements(self.settings)
        )
        self._streak = streak or Streak()
        self._history = list(history or [])
        self._total_co2_saved = self._sum_saved()

        self._lock = RLock()
        self._subscribers: list[SummaryCallback] = []
        self._unlock_listeners: list[UnlockCallback] = []

    @classmethod
    def from_snapshot(
        cls,
        snapshot: TrackerSnapshot,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> "ProgressTracker":
        """Restore a tracker from a persisted snapshot."""
        tracker = cls(
            habits=snapshot.habits,
            achievements=snapshot.achievements,
            streak=snapshot.streak,
            history=snapshot.achievement_history,
            settings=settings,
            clock=clock,
        )
        tracker._total_co2_saved = snapshot.total_co2_saved
        return tracker

    # Read-only views

    @property
    def habits(self) -> list[Habit]:
        """Copy of the current habits."""
        with self._lock:
            return [habit.model_copy(deep=True) for habit in self._habits]

    @property
    def achievements(self) -> list[Achievement]:
        """Copy of the current achievements."""
        with self._lock:
            return [achievement.model_copy(deep=True) for achievement in self._achievements]

    @property
    def streak(self) -> Streak:
        """Copy of the current streak."""
        with self._lock:
            return self._streak.model_copy(deep=True)

    @property
    def history(self) -> list[AchievementHistory]:
        """Copy of the achievement history, oldest first."""
        with self._lock:
            return [entry.model_copy(deep=True) for entry in self._history]

    @property
    def total_co2_saved(self) -> float:
        """Total CO2 saved by completed habits (kg)."""
        return self._total_co2_saved

    @property
    def monthly_target_progress(self) -> float:
        """Fraction of the monthly CO2 target reached, capped at 1.0."""
        return min(self._total_co2_saved / self.settings.monthly_co2_target_kg, 1.0)

    def summary(self) -> ProgressSummary:
        """Build the read-only summary published to observers."""
        with self._lock:
            return ProgressSummary(
                total_co2_saved=self._total_co2_saved,
                monthly_target_progress=self.monthly_target_progress,
                streak_count=self._streak.count,
                habits=[habit.model_copy(deep=True) for habit in self._habits],
                achievements=[
                    AchievementProgress(
                        achievement=achievement.model_copy(deep=True),
                        display_progress=achievement.display_progress,
                        progress_percentage=achievement.progress_percentage,
                    )
                    for achievement in self._achievements
                ],
                achievement_history=[entry.model_copy(deep=True) for entry in self._history],
            )

    def snapshot(self) -> TrackerSnapshot:
        """Serializable snapshot of the full state."""
        with self._lock:
            return TrackerSnapshot(
                habits=[habit.model_copy(deep=True) for habit in self._habits],
                achievements=[a.model_copy(deep=True) for a in self._achievements],
                streak=self._streak.model_copy(deep=True),
                achievement_history=[entry.model_copy(deep=True) for entry in self._history],
                total_co2_saved=self._total_co2_saved,
            )

    # Observers

    def subscribe(self, callback: SummaryCallback) -> Callable[[], None]:
        """Register a callback for summaries published after each state change.

        Args:
            callback: Receives a ProgressSummary

        Returns:
            Callable that removes the subscription
        """
        self._subscribers.append(callback)
        return lambda: self._remove(self._subscribers, callback)

    def on_achievement_unlocked(self, callback: UnlockCallback) -> Callable[[], None]:
        """Register a callback for achievement level-ups.

        Args:
            callback: Receives each AchievementUnlocked event

        Returns:
            Callable that removes the listener
        """
        self._unlock_listeners.append(callback)
        return lambda: self._remove(self._unlock_listeners, callback)

    @staticmethod
    def _remove(callbacks: list, callback: object) -> None:
        if callback in callbacks:
            callbacks.remove(callback)

    # Entry points

    def toggle_habit(self, habit_id: UUID) -> Habit | None:
        """Flip a habit's completion flag and recompute progress.

        Args:
            habit_id: Identity of the habit to toggle

        Returns:
            The toggled habit, or None if no habit has this ID
        """
        with self._lock:
            new_correlation_id()
            now = self._now()
            today = now.date()
            self._roll_over(today)

            habits, toggled = toggle_completion(self._habits, habit_id, now)
            if toggled is None:
                return None
            self._habits = habits

            if toggled.is_completed:
                daily = daily_habits(self._habits)
                self._streak = record_completion(
                    self._streak,
                    toggled.id,
                    completed_daily_ids=[h.id for h in daily if h.is_completed],
                    daily_habit_ids=[h.id for h in daily],
                    today=today,
                )

            events = self._recompute(now)
            logger.info(
                "habit.toggled",
                habit_id=str(toggled.id),
                title=toggled.title,
                completed=toggled.is_completed,
                total_co2_saved=round(self._total_co2_saved, 3),
                streak=self._streak.count,
            )
            self._publish(events)
            return toggled.model_copy(deep=True)

    def add_habit(self, habit: Habit) -> Habit:
        """Add a new habit.

        Args:
            habit: Habit to add; a fresh identity is assigned

        Returns:
            The added habit

        Raises:
            HabitValidationError: If the title is empty or the quantity is zero
        """
        with self._lock:
            new_correlation_id()
            validate_habit(habit)
            now = self._now()
            self._roll_over(now.date())

            self._habits, added = add_habit(self._habits, habit)
            events = self._recompute(now)
            logger.info("habit.added", habit_id=str(added.id), title=added.title)
            self._publish(events)
            return added.model_copy(deep=True)

    def update_habit(
        self, habit_id: UUID, habit: Habit, statistics: HabitStatistics | None = None
    ) -> Habit:
        """Replace a habit's content, keeping its identity.

        Args:
            habit_id: Identity of the habit to edit
            habit: New habit content
            statistics: Replacement statistics, if any (kept otherwise)

        Returns:
            The updated habit

        Raises:
            HabitValidationError: If the habit is invalid or the ID is unknown
        """
        with self._lock:
            new_correlation_id()
            validate_habit(habit)
            if find_habit(self._habits, habit_id) is None:
                raise HabitValidationError(f"Unknown habit: {habit_id}")
            now = self._now()
            self._roll_over(now.date())

            self._habits, updated = update_habit(self._habits, habit_id, habit, statistics)
            events = self._recompute(now)
            logger.info("habit.updated", habit_id=str(updated.id), title=updated.title)
            self._publish(events)
            return updated.model_copy(deep=True)

    def delete_habit(self, habit_id: UUID) -> Habit | None:
        """Delete a habit and retract everything it contributed.

        Args:
            habit_id: Identity of the habit to delete

        Returns:
            The deleted habit, or None if no habit has this ID
        """
        with self._lock:
            new_correlation_id()
            now = self._now()
            self._roll_over(now.date())

            habits, removed = remove_habit(self._habits, habit_id)
            if removed is None:
                logger.warning("habit.delete.not_found", habit_id=str(habit_id))
                return None
            self._habits = habits

            if removed.is_completed:
                self._streak = retract_task(self._streak, removed.id)

            events = self._recompute(now)
            logger.info(
                "habit.deleted",
                habit_id=str(removed.id),
                title=removed.title,
                was_completed=removed.is_completed,
                total_co2_saved=round(self._total_co2_saved, 3),
            )
            self._publish(events)
            return removed.model_copy(deep=True)

    def recompute_progress_and_achievements(self) -> list[AchievementUnlocked]:
        """Recompute CO2 totals and achievement progress from scratch.

        Returns:
            Unlock events raised by this recompute
        """
        with self._lock:
            new_correlation_id()
            now = self._now()
            self._roll_over(now.date())
            events = self._recompute(now)
            self._publish(events)
            return events

    def check_and_reset_daily_progress(self) -> bool:
        """Handle a calendar day transition.

        Call at least once whenever the app comes to the foreground.

        Returns:
            True if a new day started and state was reset
        """
        with self._lock:
            new_correlation_id()
            now = self._now()
            if not self._roll_over(now.date()):
                return False
            events = self._recompute(now)
            self._publish(events)
            return True

    # Internals

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            return now
        return now.astimezone(self._zone)

    def _roll_over(self, today: date) -> bool:
        previous_day = self._streak.last_updated
        self._streak = roll_over(
            self._streak, [habit.id for habit in daily_habits(self._habits)], today
        )
        if previous_day is None or previous_day == today:
            return False

        self._habits = reset_for_new_period(self._habits, previous_day, today)
        logger.info(
            "progress.day.rolled_over",
            previous_day=previous_day.isoformat(),
            today=today.isoformat(),
            streak=self._streak.count,
        )
        return True

    def _sum_saved(self) -> float:
        return sum(
            abs(calculate_impact(habit.activity, habit.quantity))
            for habit in completed_habits(self._habits)
        )

    def _recompute(self, now: datetime) -> list[AchievementUnlocked]:
        self._total_co2_saved = self._sum_saved()
        achievements = recompute_progress(self._achievements, self._habits)
        self._achievements, events = check_all(achievements, now)
        self._history.extend(event.history for event in events)
        return events

    def _publish(self, events: list[AchievementUnlocked]) -> None:
        for event in events:
            for listener in list(self._unlock_listeners):
                try:
                    listener(event)
                except Exception as e:
                    logger.error(
                        "tracker.unlock_listener.failed",
                        title=event.achievement.title,
                        error=str(e),
                        exc_info=True,
                    )

        if not self._subscribers:
            return
        summary = self.summary()
        for callback in list(self._subscribers):
            try:
                callback(summary)
            except StateError:
                # Persistence failures reach the caller; the in-memory change stands
                logger.error("tracker.persist.failed", exc_info=True)
                raise
            except Exception as e:
                logger.error("tracker.subscriber.failed", error=str(e), exc_info=True)


# Module-level singleton
_tracker: ProgressTracker | None = None


def get_tracker() -> ProgressTracker:
    """Get the global tracker instance.

    Returns:
        The initialized ProgressTracker instance.

    Raises:
        RuntimeError: If the tracker has not been initialized.
    """
    if _tracker is None:
        raise RuntimeError("ProgressTracker not initialized")
    return _tracker


def set_tracker(tracker: ProgressTracker | None) -> None:
    """Set the global tracker instance.

    Args:
        tracker: The ProgressTracker instance to set as global.
    """
    global _tracker
    _tracker = tracker
