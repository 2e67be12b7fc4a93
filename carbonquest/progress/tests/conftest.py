"""Shared fixtures for progress engine tests."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest

from carbonquest.core.config import Settings
from carbonquest.progress.habits import build_habit
from carbonquest.progress.models import Habit
from carbonquest.progress.tracker import ProgressTracker


class FakeClock:
    """Controllable clock returning timezone-aware UTC datetimes."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.current += timedelta(days=days, hours=hours)


@pytest.fixture
def settings() -> Settings:
    """Settings with default requirements and a UTC calendar."""
    return Settings(timezone="UTC", environment="test")


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at noon UTC on Wednesday 2024-05-08."""
    return FakeClock(datetime(2024, 5, 8, 12, 0, tzinfo=UTC))


@pytest.fixture
def bike_habit() -> Habit:
    """Daily habit: 5 km of driving avoided."""
    return build_habit("Bike to Work", "car", -5.0, is_custom=False)


@pytest.fixture
def lunch_habit() -> Habit:
    """Daily habit: one vegetarian meal."""
    return build_habit("Vegetarian Lunch", "vegetarian_meal", 1.0, is_custom=False)


@pytest.fixture
def make_tracker(
    settings: Settings, clock: FakeClock
) -> Callable[..., ProgressTracker]:
    """Factory building a tracker wired to the fake clock."""

    def _make(habits: list[Habit] | None = None, **kwargs: object) -> ProgressTracker:
        return ProgressTracker(habits=habits, settings=settings, clock=clock, **kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture(autouse=True)
def reset_tracker_singleton() -> Iterator[None]:
    """Clear the global tracker before and after each test."""
    import carbonquest.progress.tracker

    carbonquest.progress.tracker._tracker = None
    yield
    carbonquest.progress.tracker._tracker = None
