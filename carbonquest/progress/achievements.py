"""Achievement definitions for the progress engine."""

from typing import NamedTuple

from carbonquest.core.config import Settings, get_settings
from carbonquest.progress.emissions import ActivityKind
from carbonquest.progress.models import Achievement


class AchievementDefinition(NamedTuple):
    """Static properties of one achievement kind.

    Attributes:
        activity: Activity kind whose completed habits feed progress
        icon: Icon tag
        unit: Unit label
        template: Description template, formatted with the requirement
        direction: Sign of the "green" quantity for this activity
    """

    activity: ActivityKind
    icon: str
    unit: str
    template: str
    direction: int


ACHIEVEMENT_DEFINITIONS: dict[str, AchievementDefinition] = {
    "Cycling Champion": AchievementDefinition(
        activity=ActivityKind.CAR,
        icon="bicycle",
        unit="km",
        template="Ride a bicycle for {n} km",
        direction=-1,
    ),
    "Tree Guardian": AchievementDefinition(
        activity=ActivityKind.TREE_PLANTED,
        icon="leaf.fill",
        unit="days",
        template="Maintain planted trees for {n} days",
        direction=1,
    ),
    "Waste Warrior": AchievementDefinition(
        activity=ActivityKind.RECYCLING,
        icon="arrow.3.trianglepath",
        unit="kg",
        template="Recycle {n} kg of waste",
        direction=1,
    ),
    "Water Saver": AchievementDefinition(
        activity=ActivityKind.WATER,
        icon="drop.fill",
        unit="L",
        template="Save {n} liters of water",
        direction=-1,
    ),
    "Green Diet": AchievementDefinition(
        activity=ActivityKind.VEGETARIAN_MEAL,
        icon="leaf",
        unit="meals",
        template="Choose {n} vegetarian meals",
        direction=1,
    ),
}

# Only this achievement is visible before anything has been completed
INITIALLY_UNLOCKED = "Cycling Champion"

_TITLE_BY_ACTIVITY: dict[ActivityKind, str] = {
    definition.activity: title for title, definition in ACHIEVEMENT_DEFINITIONS.items()
}


def achievement_for_activity(activity: str) -> str | None:
    """Get the achievement title fed by an activity.

    Args:
        activity: Activity kind key

    Returns:
        Achievement title, or None when the activity feeds no achievement
    """
    try:
        return _TITLE_BY_ACTIVITY.get(ActivityKind(activity))
    except ValueError:
        return None


def activity_for_achievement(title: str) -> ActivityKind | None:
    """Get the activity kind that feeds an achievement, if any."""
    definition = ACHIEVEMENT_DEFINITIONS.get(title)
    return definition.activity if definition else None


def describe_requirement(title: str, requirement: int, default: str = "") -> str:
    """Render an achievement description for a requirement.

    Args:
        title: Achievement title
        requirement: Requirement of the level being described
        default: Description to keep for unknown titles

    Returns:
        Description text
    """
    definition = ACHIEVEMENT_DEFINITIONS.get(title)
    if definition is None:
        return default
    return definition.template.format(n=requirement)


def _initial_requirements(settings: Settings) -> dict[str, int]:
    return {
        "Cycling Champion": settings.achievement_cycling_champion_requirement,
        "Tree Guardian": settings.achievement_tree_guardian_requirement,
        "Waste Warrior": settings.achievement_waste_warrior_requirement,
        "Water Saver": settings.achievement_water_saver_requirement,
        "Green Diet": settings.achievement_green_diet_requirement,
    }


def seed_achievements(settings: Settings | None = None) -> list[Achievement]:
    """Build the level 1 achievement set with requirements from settings.

    Args:
        settings: Settings to read requirements from (defaults to global settings)

    Returns:
        List of level 1 achievements, all but one locked
    """
    settings = settings or get_settings()
    requirements = _initial_requirements(settings)

    return [
        Achievement(
            title=title,
            description=describe_requirement(title, requirements[title]),
            icon=definition.icon,
            activity=definition.activity.value,
            initial_requirement=requirements[title],
            requirement=requirements[title],
            progress=0,
            unit=definition.unit,
            is_locked=title != INITIALLY_UNLOCKED,
        )
        for title, definition in ACHIEVEMENT_DEFINITIONS.items()
    ]
