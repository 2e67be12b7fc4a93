"""Data models for habits, streaks and achievements."""

from datetime import date, datetime, timedelta
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class HabitFrequency(str, Enum):
    """How often a habit's completion flag resets."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class HabitCategory(str, Enum):
    """Display category of a habit."""

    TRANSPORT = "transport"
    FOOD = "food"
    RECYCLING = "recycling"
    ENERGY = "energy"
    WATER = "water"
    OTHER = "other"


class HabitStatistics(BaseModel):
    """Rolling completion record for a single habit.

    Attributes:
        completion_count: Number of incomplete -> complete transitions
        last_completed_at: Timestamp of the most recent completion
        streak_count: Consecutive calendar days with a completion
        completion_history: Every completion timestamp, oldest first
        co2_saved: Cumulative absolute CO2 credited (kg)
    """

    completion_count: int = Field(0, description="Total completions")
    last_completed_at: datetime | None = Field(None, description="Most recent completion")
    streak_count: int = Field(0, description="Consecutive days completed")
    completion_history: list[datetime] = Field(
        default_factory=list, description="Completion timestamps"
    )
    co2_saved: float = Field(0.0, description="Cumulative absolute CO2 credited (kg)")

    def track_completion(self, co2_impact: float, now: datetime) -> "HabitStatistics":
        """Return a copy updated for one more completion.

        Args:
            co2_impact: Signed impact of the completion (kg CO2)
            now: Completion time, already in the calendar timezone

        Returns:
            New HabitStatistics instance
        """
        today = now.date()
        if self.last_completed_at is None:
            streak_count = 1
        else:
            last_day = self.last_completed_at.date()
            if last_day == today:
                streak_count = max(self.streak_count, 1)
            elif last_day == today - timedelta(days=1):
                streak_count = self.streak_count + 1
            else:
                streak_count = 1

        return self.model_copy(
            update={
                "completion_count": self.completion_count + 1,
                "last_completed_at": now,
                "streak_count": streak_count,
                "completion_history": [*self.completion_history, now],
                "co2_saved": self.co2_saved + abs(co2_impact),
            }
        )


class Habit(BaseModel):
    """A recurring loggable action.

    The quantity's sign is chosen by the author so the activity points in the
    "green" direction, e.g. -5 km of driving avoided or +1 kg recycled.
    """

    id: UUID = Field(default_factory=uuid4, description="Stable habit identity")
    title: str = Field(..., description="Habit title")
    activity: str = Field(..., description="Activity kind key")
    quantity: float = Field(..., description="Signed quantity per completion")
    unit: str = Field("unit", description="Unit label for the quantity")
    icon: str = Field("star.fill", description="Icon tag")
    frequency: HabitFrequency = Field(HabitFrequency.DAILY, description="Reset period")
    is_completed: bool = Field(False, description="Completed for the current period")
    is_custom: bool = Field(False, description="Authored by the user")
    category: HabitCategory = Field(HabitCategory.OTHER, description="Display category")
    description: str = Field("", description="Free-text description")
    statistics: HabitStatistics = Field(default_factory=HabitStatistics)


class Streak(BaseModel):
    """Global daily-completion streak.

    Attributes:
        count: Consecutive days on which every daily habit was completed
        last_updated: Calendar day the streak was last rolled over to
        completed_tasks: Habit IDs completed on the current day
        last_incremented: Calendar day of the last count increment
    """

    count: int = Field(0, description="Current streak count")
    last_updated: date | None = Field(None, description="Day of the last rollover")
    completed_tasks: set[UUID] = Field(default_factory=set, description="Completed today")
    last_incremented: date | None = Field(None, description="Day of the last increment")


class Achievement(BaseModel):
    """A leveled goal fed by one activity kind."""

    title: str = Field(..., description="Stable achievement key")
    description: str = Field(..., description="Description for the current level")
    icon: str = Field(..., description="Icon tag")
    activity: str = Field(..., description="Activity kind that feeds progress")
    initial_requirement: int = Field(..., description="Level 1 requirement")
    requirement: int = Field(..., description="Current level requirement")
    progress: int = Field(0, description="Units accrued this level")
    unit: str = Field(..., description="Unit label")
    is_locked: bool = Field(True, description="Hidden from the completed list")
    date_unlocked: datetime | None = Field(None, description="When last unlocked")
    level: int = Field(1, description="Current level, starting at 1")

    @property
    def is_completed(self) -> bool:
        """True once progress reaches the requirement."""
        return self.progress >= self.requirement

    @property
    def display_progress(self) -> int:
        """Progress clamped to [0, requirement]."""
        return max(0, min(self.progress, self.requirement))

    @property
    def progress_percentage(self) -> float:
        """Progress as a fraction of the requirement, capped at 1.0."""
        if self.requirement <= 0:
            return 1.0
        return min(max(self.progress, 0) / self.requirement, 1.0)

    @property
    def next_level_preview(self) -> str:
        """Preview of the next level's requirement when this one is completed."""
        if self.is_completed:
            return f"Next Level: {self.requirement * 2} {self.unit}"
        return ""

    def next_level(self, now: datetime) -> "Achievement":
        """Build the next level, carrying over excess progress.

        Args:
            now: Unlock time for the new level

        Returns:
            New Achievement with doubled requirement and incremented level
        """
        # Imported here to avoid a models <-> achievements import cycle
        from carbonquest.progress.achievements import describe_requirement

        next_requirement = self.requirement * 2
        return self.model_copy(
            update={
                "description": describe_requirement(
                    self.title, next_requirement, default=self.description
                ),
                "requirement": next_requirement,
                "progress": max(0, self.progress - self.requirement),
                "is_locked": False,
                "date_unlocked": now,
                "level": self.level + 1,
            }
        )


class AchievementHistory(BaseModel):
    """Append-only record of a completed achievement level.

    Attributes:
        id: Entry identity
        achievement: Snapshot of the achievement before leveling
        completed_at: When the level was completed
        level: Level number that was completed
        co2_impact: Signed CO2 impact of the completed requirement (kg)
    """

    id: UUID = Field(default_factory=uuid4, description="Entry identity")
    achievement: Achievement = Field(..., description="Achievement before leveling")
    completed_at: datetime = Field(..., description="Completion time")
    level: int = Field(..., description="Completed level")
    co2_impact: float = Field(..., description="Signed CO2 impact (kg)")


class AchievementUnlocked(BaseModel):
    """Event raised when an achievement levels up."""

    achievement: Achievement = Field(..., description="Achievement that was completed")
    next_level: Achievement = Field(..., description="Replacement next-level achievement")
    history: AchievementHistory = Field(..., description="History entry that was recorded")


class TrackerSnapshot(BaseModel):
    """Serializable state needed to resume the tracker exactly."""

    habits: list[Habit] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)
    streak: Streak = Field(default_factory=Streak)
    achievement_history: list[AchievementHistory] = Field(default_factory=list)
    total_co2_saved: float = Field(0.0, description="Total CO2 saved (kg)")


class AchievementProgress(BaseModel):
    """Display view of one achievement's progress."""

    achievement: Achievement
    display_progress: int
    progress_percentage: float


class ProgressSummary(BaseModel):
    """Read-only view published to observers after every state change."""

    total_co2_saved: float = Field(..., description="Total CO2 saved (kg)")
    monthly_target_progress: float = Field(..., description="Fraction of monthly target")
    streak_count: int = Field(..., description="Current streak count")
    habits: list[Habit] = Field(default_factory=list)
    achievements: list[AchievementProgress] = Field(default_factory=list)
    achievement_history: list[AchievementHistory] = Field(default_factory=list)
