"""Tests for carbonquest.progress.achievements and achievement_engine modules."""

from datetime import UTC, datetime, timedelta

import pytest

from carbonquest.core.config import Settings
from carbonquest.progress.achievement_engine import (
    achievement_impact,
    active_achievements,
    check_all,
    check_completion,
    completed_achievements,
    level_up,
    next_achievement,
    recompute_progress,
)
from carbonquest.progress.achievements import (
    achievement_for_activity,
    activity_for_achievement,
    describe_requirement,
    seed_achievements,
)
from carbonquest.progress.emissions import ActivityKind, emission_factor
from carbonquest.progress.habits import build_habit
from carbonquest.progress.models import Achievement, Habit

NOW = datetime(2024, 5, 8, 12, 0, tzinfo=UTC)


def _completed(habit: Habit) -> Habit:
    return habit.model_copy(update={"is_completed": True})


def _by_title(achievements: list[Achievement], title: str) -> Achievement:
    return next(a for a in achievements if a.title == title)


class TestDefinitions:
    """Test the fixed achievement definitions."""

    def test_seed_achievements(self, settings: Settings) -> None:
        """Test the level 1 set and its lock state."""
        achievements = seed_achievements(settings)

        assert [a.title for a in achievements] == [
            "Cycling Champion",
            "Tree Guardian",
            "Waste Warrior",
            "Water Saver",
            "Green Diet",
        ]
        assert [a.is_locked for a in achievements] == [False, True, True, True, True]
        assert all(a.level == 1 and a.progress == 0 for a in achievements)

        cycling = _by_title(achievements, "Cycling Champion")
        assert cycling.requirement == cycling.initial_requirement == 5
        assert cycling.description == "Ride a bicycle for 5 km"
        assert _by_title(achievements, "Water Saver").requirement == 1000

    def test_seed_requirements_from_settings(self) -> None:
        """Test that initial requirements come from settings."""
        settings = Settings(achievement_green_diet_requirement=10)

        green = _by_title(seed_achievements(settings), "Green Diet")

        assert green.requirement == 10
        assert green.description == "Choose 10 vegetarian meals"

    def test_activity_mapping(self) -> None:
        """Test the activity -> achievement mapping in both directions."""
        assert achievement_for_activity("car") == "Cycling Champion"
        assert achievement_for_activity("recycling") == "Waste Warrior"
        assert achievement_for_activity("water") == "Water Saver"
        assert achievement_for_activity("vegetarian_meal") == "Green Diet"
        assert achievement_for_activity("tree_planted") == "Tree Guardian"
        assert achievement_for_activity("bus") is None
        assert achievement_for_activity("unknown") is None
        assert activity_for_achievement("Green Diet") == ActivityKind.VEGETARIAN_MEAL
        assert activity_for_achievement("Mystery") is None

    def test_describe_requirement_unknown_title(self) -> None:
        """Test that unknown titles keep their description."""
        assert describe_requirement("Mystery", 10, default="Do things") == "Do things"


class TestRecomputeProgress:
    """Test the full-rescan progress computation."""

    def test_completed_habits_feed_progress(
        self, settings: Settings, bike_habit: Habit, lunch_habit: Habit
    ) -> None:
        """Test that magnitudes of completed habits are summed per achievement."""
        habits = [_completed(bike_habit), _completed(lunch_habit)]

        achievements = recompute_progress(seed_achievements(settings), habits)

        assert _by_title(achievements, "Cycling Champion").progress == 5
        assert _by_title(achievements, "Green Diet").progress == 1
        assert _by_title(achievements, "Water Saver").progress == 0

    def test_incomplete_and_unmapped_habits_ignored(
        self, settings: Settings, bike_habit: Habit
    ) -> None:
        """Test that incomplete and unmapped habits contribute nothing."""
        bus = _completed(build_habit("Bus", "bus", 10))
        mystery = _completed(build_habit("Mystery", "teleport", 3))

        achievements = recompute_progress(seed_achievements(settings), [bike_habit, bus, mystery])

        assert all(a.progress == 0 for a in achievements)

    def test_multiple_habits_sum(self, settings: Settings) -> None:
        """Test that several habits of one activity add up."""
        habits = [
            _completed(build_habit("Recycle paper", "recycling", 2)),
            _completed(build_habit("Recycle glass", "recycling", 3.7)),
        ]

        achievements = recompute_progress(seed_achievements(settings), habits)

        assert _by_title(achievements, "Waste Warrior").progress == 5

    def test_recompute_resets_stale_progress(self, settings: Settings) -> None:
        """Test that progress is rebuilt from scratch, not accumulated."""
        stale = [a.model_copy(update={"progress": 40}) for a in seed_achievements(settings)]

        achievements = recompute_progress(stale, [])

        assert all(a.progress == 0 for a in achievements)

    def test_recompute_is_idempotent(
        self, settings: Settings, bike_habit: Habit, lunch_habit: Habit
    ) -> None:
        """Test that recomputing twice yields identical progress."""
        habits = [_completed(bike_habit), _completed(lunch_habit)]

        first = recompute_progress(seed_achievements(settings), habits)
        second = recompute_progress(first, habits)

        assert [a.progress for a in first] == [a.progress for a in second]
        assert first == second


class TestLeveling:
    """Test completion checks and level-ups."""

    @staticmethod
    def _cycling(progress: int, requirement: int = 5) -> Achievement:
        return Achievement(
            title="Cycling Champion",
            description=f"Ride a bicycle for {requirement} km",
            icon="bicycle",
            activity="car",
            initial_requirement=5,
            requirement=requirement,
            progress=progress,
            unit="km",
            is_locked=False,
        )

    def test_level_up_exact(self) -> None:
        """Test leveling with progress exactly at the requirement."""
        event = level_up(self._cycling(5), NOW)

        assert event.next_level.requirement == 10
        assert event.next_level.progress == 0
        assert event.next_level.level == 2
        assert event.next_level.description == "Ride a bicycle for 10 km"
        assert event.next_level.date_unlocked == NOW
        assert not event.next_level.is_locked
        assert event.history.level == 1
        assert event.history.achievement.requirement == 5
        assert event.history.co2_impact == pytest.approx(emission_factor("car") * -5)

    def test_level_up_carries_overflow(self) -> None:
        """Test that progress beyond the requirement carries to the next level."""
        event = level_up(self._cycling(7), NOW)

        assert event.next_level.requirement == 10
        assert event.next_level.progress == 2

    def test_history_impact_uses_requirement_not_progress(self) -> None:
        """Test that the recorded impact reflects the requirement quantity."""
        event = level_up(self._cycling(9), NOW)
        assert event.history.co2_impact == pytest.approx(emission_factor("car") * -5)

    def test_check_completion_below_requirement(self) -> None:
        """Test that incomplete achievements are returned unchanged."""
        achievement = self._cycling(4)

        checked, event = check_completion(achievement, NOW)

        assert checked == achievement
        assert event is None

    def test_check_completion_levels_once(self) -> None:
        """Test that a single check levels up at most once."""
        checked, event = check_completion(self._cycling(25), NOW)

        assert event is not None
        assert checked.level == 2
        assert checked.progress == 20
        assert checked.is_completed

    def test_check_all(self, settings: Settings) -> None:
        """Test that only completed achievements produce events."""
        achievements = seed_achievements(settings)
        achievements[0] = achievements[0].model_copy(update={"progress": 5})

        checked, events = check_all(achievements, NOW)

        assert len(events) == 1
        assert events[0].achievement.title == "Cycling Champion"
        assert checked[0].level == 2
        assert checked[1:] == achievements[1:]

    def test_achievement_impact(self, settings: Settings) -> None:
        """Test impacts of every mapped achievement and unknown titles."""
        by_title = {a.title: a for a in seed_achievements(settings)}

        assert achievement_impact(by_title["Water Saver"]) == pytest.approx(0.298 * -1000)
        assert achievement_impact(by_title["Waste Warrior"]) == pytest.approx(-1.04 * 50)
        assert achievement_impact(by_title["Green Diet"]) == pytest.approx(-3.5 * 100)
        assert achievement_impact(by_title["Tree Guardian"]) == pytest.approx(-21.7 * 365)
        assert achievement_impact(self._cycling(0).model_copy(update={"title": "Mystery"})) == 0.0


class TestAchievementViews:
    """Test derived properties and list views."""

    def test_progress_display(self) -> None:
        """Test clamped display progress and percentage."""
        achievement = TestLeveling._cycling(8)

        assert achievement.is_completed
        assert achievement.display_progress == 5
        assert achievement.progress_percentage == 1.0
        assert achievement.next_level_preview == "Next Level: 10 km"

        partial = TestLeveling._cycling(2)
        assert partial.progress_percentage == pytest.approx(0.4)
        assert partial.next_level_preview == ""

    def test_completed_next_and_active(self, settings: Settings) -> None:
        """Test completed, next and active achievement views."""
        achievements = seed_achievements(settings)
        older = NOW - timedelta(days=2)
        achievements[2] = achievements[2].model_copy(
            update={"is_locked": False, "date_unlocked": older, "progress": 10}
        )
        achievements[0] = achievements[0].model_copy(
            update={"date_unlocked": NOW, "progress": 4}
        )

        completed = completed_achievements(achievements)
        assert [a.title for a in completed] == ["Cycling Champion", "Waste Warrior"]

        assert next_achievement(achievements).title == "Tree Guardian"  # type: ignore[union-attr]

        active = active_achievements(achievements)
        assert [a.title for a in active] == ["Cycling Champion", "Waste Warrior"]
