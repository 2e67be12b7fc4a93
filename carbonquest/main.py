"""CarbonQuest main entry point."""

import sys
from datetime import datetime

from pydantic import ValidationError

from carbonquest.core.config import Settings, get_settings
from carbonquest.core.logging import get_logger, setup_logging
from carbonquest.core.state import StateManager
from carbonquest.progress.models import AchievementUnlocked, ProgressSummary
from carbonquest.progress.tips import tip_for_day
from carbonquest.progress.tracker import ProgressTracker, set_tracker
from carbonquest.shared.exceptions import ConfigError, StateError

logger = get_logger(__name__)


def build_tracker(settings: Settings, state: StateManager) -> ProgressTracker:
    """Restore the tracker from disk (or seed it) and wire persistence.

    Args:
        settings: Application settings
        state: Snapshot persistence

    Returns:
        Tracker that saves a snapshot after every state change
    """
    snapshot = state.load_snapshot()
    if snapshot is None:
        tracker = ProgressTracker(settings=settings)
        logger.info("tracker.seeded", habits=len(tracker.habits))
    else:
        tracker = ProgressTracker.from_snapshot(snapshot, settings=settings)
        logger.info(
            "tracker.restored",
            habits=len(snapshot.habits),
            history=len(snapshot.achievement_history),
        )

    def persist(_summary: ProgressSummary) -> None:
        state.save_snapshot(tracker.snapshot())

    def announce(event: AchievementUnlocked) -> None:
        logger.info(
            "achievement.unlocked",
            title=event.achievement.title,
            level=event.history.level,
            co2_impact=round(event.history.co2_impact, 2),
        )

    tracker.subscribe(persist)
    tracker.on_achievement_unlocked(announce)
    return tracker


def main() -> int:
    """Boot the engine, run the day-boundary check and report progress.

    Returns:
        Process exit code
    """
    try:
        settings = get_settings()
    except (ConfigError, ValidationError) as e:
        # Logging is not configured yet
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level, json_output=settings.environment != "development")
    logger.info("app.starting", version=settings.app_version, environment=settings.environment)

    state = StateManager(settings.state_file_path)
    try:
        tracker = build_tracker(settings, state)
        set_tracker(tracker)

        if not tracker.check_and_reset_daily_progress():
            # First launch or same day: persist whatever was loaded or seeded
            state.save_snapshot(tracker.snapshot())
    except StateError as e:
        logger.error("app.state.failed", error=str(e), exc_info=True)
        return 1

    summary = tracker.summary()
    tip = tip_for_day(datetime.now(settings.zone).date())
    logger.info(
        "app.summary",
        total_co2_saved=round(summary.total_co2_saved, 2),
        monthly_target_progress=round(summary.monthly_target_progress, 3),
        streak=summary.streak_count,
        achievements_completed=len(summary.achievement_history),
        tip=tip.tip,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
