"""Achievement progress, completion checks and leveling.

Progress is always rebuilt from the full set of completed habits rather than
updated incrementally, so edits and deletions never leave stale counts
behind. Recomputing twice in a row yields the same values.
"""

from datetime import datetime

from carbonquest.core.logging import get_logger
from carbonquest.progress.achievements import ACHIEVEMENT_DEFINITIONS, achievement_for_activity
from carbonquest.progress.emissions import calculate_impact
from carbonquest.progress.models import (
    Achievement,
    AchievementHistory,
    AchievementUnlocked,
    Habit,
)

logger = get_logger(__name__)


def recompute_progress(achievements: list[Achievement], habits: list[Habit]) -> list[Achievement]:
    """Rebuild achievement progress from every completed habit.

    Args:
        achievements: Current achievements
        habits: All habits

    Returns:
        New achievement list; only ``progress`` differs from the input
    """
    totals = {achievement.title: 0 for achievement in achievements}

    for habit in habits:
        if not habit.is_completed:
            continue
        title = achievement_for_activity(habit.activity)
        if title is None or title not in totals:
            continue
        totals[title] += int(abs(habit.quantity))

    return [
        achievement.model_copy(update={"progress": totals[achievement.title]})
        for achievement in achievements
    ]


def achievement_impact(achievement: Achievement) -> float:
    """CO2 impact of an achievement's requirement.

    Uses the requirement quantity, not the accrued progress, signed in the
    activity's green direction.

    Args:
        achievement: Achievement being completed

    Returns:
        Signed impact in kg CO2, or 0.0 for titles without an activity
    """
    definition = ACHIEVEMENT_DEFINITIONS.get(achievement.title)
    if definition is None:
        return 0.0
    return calculate_impact(definition.activity, definition.direction * achievement.requirement)


def level_up(achievement: Achievement, now: datetime) -> AchievementUnlocked:
    """Record a completed level and build its replacement.

    Args:
        achievement: Completed achievement
        now: Completion time

    Returns:
        AchievementUnlocked with the history entry and next-level achievement
    """
    history = AchievementHistory(
        achievement=achievement,
        completed_at=now,
        level=achievement.level,
        co2_impact=achievement_impact(achievement),
    )
    next_level = achievement.next_level(now)

    logger.info(
        "achievement.leveled_up",
        title=achievement.title,
        level=achievement.level,
        next_requirement=next_level.requirement,
        carried_progress=next_level.progress,
        co2_impact=history.co2_impact,
    )

    return AchievementUnlocked(achievement=achievement, next_level=next_level, history=history)


def check_completion(
    achievement: Achievement, now: datetime
) -> tuple[Achievement, AchievementUnlocked | None]:
    """Level up an achievement once if its requirement is met.

    Args:
        achievement: Achievement to check
        now: Current time

    Returns:
        Tuple of (achievement after the check, unlock event or None)
    """
    if not achievement.is_completed:
        return achievement, None
    event = level_up(achievement, now)
    return event.next_level, event


def check_all(
    achievements: list[Achievement], now: datetime
) -> tuple[list[Achievement], list[AchievementUnlocked]]:
    """Run the completion check on every achievement.

    Args:
        achievements: Current achievements
        now: Current time

    Returns:
        Tuple of (new achievement list, unlock events in list order)
    """
    checked = []
    events = []
    for achievement in achievements:
        achievement, event = check_completion(achievement, now)
        checked.append(achievement)
        if event is not None:
            events.append(event)
    return checked, events


def completed_achievements(achievements: list[Achievement]) -> list[Achievement]:
    """Unlocked achievements, most recently unlocked first."""
    unlocked = [a for a in achievements if not a.is_locked]
    return sorted(
        unlocked,
        key=lambda a: a.date_unlocked.timestamp() if a.date_unlocked else float("inf"),
        reverse=True,
    )


def next_achievement(achievements: list[Achievement]) -> Achievement | None:
    """First achievement that is still locked."""
    return next((a for a in achievements if a.is_locked), None)


def active_achievements(achievements: list[Achievement]) -> list[Achievement]:
    """Unlocked achievements in progress, closest to completion first."""
    active = [a for a in achievements if a.progress > 0 and not a.is_completed and not a.is_locked]
    return sorted(active, key=lambda a: a.progress_percentage, reverse=True)
