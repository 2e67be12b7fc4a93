"""Daily completion streak tracking.

The streak counts consecutive calendar days on which every daily habit was
completed:
- Within a day, completed habit IDs accumulate in ``completed_tasks``
- The count increments once per day, the first time all daily habits are done
- On the first call of a new day, the count survives only if yesterday was
  fully completed; the completed set is always cleared

An empty daily habit set never qualifies, so a user without daily habits
cannot grow a streak.
"""

from collections.abc import Iterable
from datetime import date, timedelta
from uuid import UUID

from carbonquest.core.logging import get_logger
from carbonquest.progress.models import Streak

logger = get_logger(__name__)


def covers_all_daily(streak: Streak, daily_habit_ids: Iterable[UUID]) -> bool:
    """Check whether every daily habit is in the completed set.

    Args:
        streak: Current streak
        daily_habit_ids: IDs of all daily habits

    Returns:
        True if the daily set is non-empty and fully completed
    """
    daily = set(daily_habit_ids)
    return bool(daily) and daily <= streak.completed_tasks


def roll_over(streak: Streak, daily_habit_ids: Iterable[UUID], today: date) -> Streak:
    """Advance the streak to a new calendar day.

    Args:
        streak: Current streak
        daily_habit_ids: IDs of all daily habits
        today: Current calendar day

    Returns:
        Streak for today (unchanged if already rolled over today)
    """
    if streak.last_updated is None:
        return streak.model_copy(update={"last_updated": today})

    if streak.last_updated == today:
        return streak

    yesterday_completed = covers_all_daily(streak, daily_habit_ids)
    was_yesterday = streak.last_updated == today - timedelta(days=1)

    count = streak.count
    if not (was_yesterday and yesterday_completed):
        if count:
            logger.info(
                "streak.reset",
                previous_count=count,
                last_updated=streak.last_updated.isoformat(),
                yesterday_completed=yesterday_completed,
            )
        count = 0

    return streak.model_copy(
        update={"count": count, "completed_tasks": set(), "last_updated": today}
    )


def record_completion(
    streak: Streak,
    habit_id: UUID,
    completed_daily_ids: Iterable[UUID],
    daily_habit_ids: Iterable[UUID],
    today: date,
) -> Streak:
    """Record a habit completion and increment the streak when the day qualifies.

    Args:
        streak: Current streak (already rolled over to today)
        habit_id: ID of the habit that was just completed
        completed_daily_ids: IDs of daily habits currently completed
        daily_habit_ids: IDs of all daily habits
        today: Current calendar day

    Returns:
        Updated streak
    """
    completed_tasks = streak.completed_tasks | {habit_id}
    daily = set(daily_habit_ids)

    count = streak.count
    last_incremented = streak.last_incremented
    if daily and set(completed_daily_ids) == daily and last_incremented != today:
        count += 1
        last_incremented = today
        logger.info("streak.incremented", count=count, day=today.isoformat())

    return streak.model_copy(
        update={
            "completed_tasks": completed_tasks,
            "count": count,
            "last_incremented": last_incremented,
        }
    )


def retract_task(streak: Streak, habit_id: UUID) -> Streak:
    """Remove a deleted habit from today's completed set.

    If it was the last completed task of the day, the streak resets to 0.

    Args:
        streak: Current streak
        habit_id: ID of the removed habit

    Returns:
        Updated streak
    """
    if habit_id not in streak.completed_tasks:
        return streak

    completed_tasks = streak.completed_tasks - {habit_id}
    count = streak.count if completed_tasks else 0
    if count != streak.count:
        logger.info("streak.reset", previous_count=streak.count, reason="last_task_removed")

    return streak.model_copy(update={"completed_tasks": completed_tasks, "count": count})
