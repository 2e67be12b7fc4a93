"""Habit store functions.

Every function takes the current habit list and returns a new one; the
tracker owns the authoritative list.
"""

import math
from datetime import date, datetime
from uuid import UUID, uuid4

from carbonquest.core.logging import get_logger
from carbonquest.progress.emissions import (
    calculate_impact,
    category_for_activity,
    default_description,
    icon_for_activity,
    unit_for_activity,
)
from carbonquest.progress.models import Habit, HabitFrequency, HabitStatistics
from carbonquest.shared.exceptions import HabitValidationError

logger = get_logger(__name__)


def validate_habit(habit: Habit) -> None:
    """Reject habits that cannot be tracked.

    Args:
        habit: Habit to validate

    Raises:
        HabitValidationError: If the title is blank or the quantity is zero or not finite
    """
    if not habit.title.strip():
        raise HabitValidationError("Habit title must not be empty")
    if not math.isfinite(habit.quantity):
        raise HabitValidationError("Habit quantity must be a finite number")
    if habit.quantity == 0:
        raise HabitValidationError("Habit quantity must not be zero")


def build_habit(
    title: str,
    activity: str,
    quantity: float,
    frequency: HabitFrequency = HabitFrequency.DAILY,
    description: str = "",
    icon: str | None = None,
    is_custom: bool = True,
) -> Habit:
    """Build a habit with unit, icon, category and description defaults.

    Args:
        title: Habit title
        activity: Activity kind key
        quantity: Signed quantity per completion
        frequency: Reset period
        description: Free-text description (a default is generated when blank)
        icon: Icon tag (defaults to the activity's icon)
        is_custom: Whether the user authored the habit

    Returns:
        Unvalidated Habit
    """
    return Habit(
        title=title,
        activity=activity,
        quantity=quantity,
        unit=unit_for_activity(activity),
        icon=icon or icon_for_activity(activity),
        frequency=frequency,
        is_custom=is_custom,
        category=category_for_activity(activity),
        description=description or default_description(activity, quantity, title),
    )


def seed_habits() -> list[Habit]:
    """Default habits created on first launch."""
    seeds = [
        ("Bike to Work", "car", -5.0, "bicycle"),
        ("Vegetarian Lunch", "vegetarian_meal", 1.0, None),
        ("Recycle", "recycling", 1.0, None),
        ("Save Water", "water", -50.0, None),
        ("Plant Tree", "tree_planted", 1.0, None),
    ]
    return [
        build_habit(title, activity, quantity, icon=icon, is_custom=False)
        for title, activity, quantity, icon in seeds
    ]


def find_habit(habits: list[Habit], habit_id: UUID) -> Habit | None:
    """Find a habit by identity."""
    return next((habit for habit in habits if habit.id == habit_id), None)


def daily_habits(habits: list[Habit]) -> list[Habit]:
    """Habits that reset every day."""
    return [habit for habit in habits if habit.frequency == HabitFrequency.DAILY]


def completed_habits(habits: list[Habit]) -> list[Habit]:
    """Habits completed for the current period."""
    return [habit for habit in habits if habit.is_completed]


def add_habit(habits: list[Habit], habit: Habit) -> tuple[list[Habit], Habit]:
    """Append a new habit with a fresh identity.

    Args:
        habits: Current habits
        habit: Habit to add

    Returns:
        Tuple of (new habit list, added habit)

    Raises:
        HabitValidationError: If the habit is invalid
    """
    validate_habit(habit)
    added = habit.model_copy(
        update={"id": uuid4(), "is_completed": False, "statistics": HabitStatistics()}
    )
    return [*habits, added], added


def update_habit(
    habits: list[Habit],
    habit_id: UUID,
    habit: Habit,
    statistics: HabitStatistics | None = None,
) -> tuple[list[Habit], Habit]:
    """Replace a habit in place.

    Identity and completion state are preserved; statistics are preserved
    unless explicitly provided.

    Args:
        habits: Current habits
        habit_id: Identity of the habit to replace
        habit: New habit content
        statistics: Replacement statistics, if any

    Returns:
        Tuple of (new habit list, updated habit)

    Raises:
        HabitValidationError: If the habit is invalid or the ID is unknown
    """
    validate_habit(habit)
    existing = find_habit(habits, habit_id)
    if existing is None:
        raise HabitValidationError(f"Unknown habit: {habit_id}")

    updated = habit.model_copy(
        update={
            "id": existing.id,
            "is_completed": existing.is_completed,
            "statistics": statistics if statistics is not None else existing.statistics,
        }
    )
    return [updated if h.id == habit_id else h for h in habits], updated


def remove_habit(habits: list[Habit], habit_id: UUID) -> tuple[list[Habit], Habit | None]:
    """Remove a habit.

    Args:
        habits: Current habits
        habit_id: Identity of the habit to remove

    Returns:
        Tuple of (new habit list, removed habit or None if not found)
    """
    removed = find_habit(habits, habit_id)
    if removed is None:
        return habits, None
    return [h for h in habits if h.id != habit_id], removed


def toggle_completion(
    habits: list[Habit], habit_id: UUID, now: datetime
) -> tuple[list[Habit], Habit | None]:
    """Flip a habit's completion flag.

    Statistics are updated only on the incomplete -> complete transition;
    un-completing rolls nothing back.

    Args:
        habits: Current habits
        habit_id: Identity of the habit to toggle
        now: Current time in the calendar timezone

    Returns:
        Tuple of (new habit list, toggled habit or None if not found)
    """
    habit = find_habit(habits, habit_id)
    if habit is None:
        logger.warning("habit.toggle.not_found", habit_id=str(habit_id))
        return habits, None

    if habit.is_completed:
        toggled = habit.model_copy(update={"is_completed": False})
    else:
        impact = calculate_impact(habit.activity, habit.quantity)
        toggled = habit.model_copy(
            update={
                "is_completed": True,
                "statistics": habit.statistics.track_completion(impact, now),
            }
        )

    return [toggled if h.id == habit_id else h for h in habits], toggled


def _period_key(frequency: HabitFrequency, day: date) -> tuple[int, int]:
    if frequency == HabitFrequency.DAILY:
        return day.year, day.timetuple().tm_yday
    if frequency == HabitFrequency.WEEKLY:
        iso_year, iso_week, _ = day.isocalendar()
        return iso_year, iso_week
    return day.year, day.month


def reset_for_new_period(habits: list[Habit], previous_day: date, today: date) -> list[Habit]:
    """Clear completion flags of habits whose period ended.

    Daily habits reset on a new day, weekly habits on a new ISO week and
    monthly habits on a new calendar month.

    Args:
        habits: Current habits
        previous_day: Day the habits were last tracked on
        today: Current day

    Returns:
        New habit list
    """
    result = []
    for habit in habits:
        if habit.is_completed and _period_key(habit.frequency, previous_day) != _period_key(
            habit.frequency, today
        ):
            habit = habit.model_copy(update={"is_completed": False})
        result.append(habit)
    return result
