"""Emission model: per-activity CO2 factors and impact descriptions.

Factors are illustrative kg CO2e per unit. A positive factor means the
activity produces emissions; a negative factor means it avoids or offsets
them. Recycling is negative like every other offsetting activity, so no
caller needs to take the absolute value of a factor.
"""

import math
from enum import Enum
from typing import NamedTuple

from carbonquest.progress.models import HabitCategory


class ActivityKind(str, Enum):
    """Known activity kinds."""

    CAR = "car"
    BUS = "bus"
    TRAIN = "train"
    ELECTRICITY = "electricity"
    RECYCLING = "recycling"
    BEEF = "beef"
    PORK = "pork"
    CHICKEN = "chicken"
    VEGETARIAN_MEAL = "vegetarian_meal"
    WATER = "water"
    TREE_PLANTED = "tree_planted"
    COMPOSTING = "composting"


class EmissionFactor(NamedTuple):
    """Signed factor with the unit it applies to."""

    factor: float
    per_unit: str
    name: str


EMISSION_FACTORS: dict[ActivityKind, EmissionFactor] = {
    ActivityKind.CAR: EmissionFactor(0.170, "km (average car)", "Driving car"),
    ActivityKind.BUS: EmissionFactor(0.082, "km", "Taking bus"),
    ActivityKind.TRAIN: EmissionFactor(0.041, "km", "Taking train"),
    ActivityKind.ELECTRICITY: EmissionFactor(0.233, "kWh", "Electricity usage"),
    ActivityKind.RECYCLING: EmissionFactor(-1.04, "kg", "Recycling"),
    ActivityKind.BEEF: EmissionFactor(27.0, "kg", "Beef consumption"),
    ActivityKind.PORK: EmissionFactor(12.1, "kg", "Pork consumption"),
    ActivityKind.CHICKEN: EmissionFactor(6.9, "kg", "Chicken consumption"),
    ActivityKind.VEGETARIAN_MEAL: EmissionFactor(
        -3.5, "meal (vs. average meat meal)", "Choosing vegetarian meal"
    ),
    ActivityKind.WATER: EmissionFactor(0.298, "m³", "Water usage"),
    ActivityKind.TREE_PLANTED: EmissionFactor(-21.7, "tree per year", "Planting tree"),
    ActivityKind.COMPOSTING: EmissionFactor(-0.24, "kg", "Composting"),
}

# Habit authoring defaults: (unit, icon, category)
_HABIT_DEFAULTS: dict[ActivityKind, tuple[str, str, HabitCategory]] = {
    ActivityKind.CAR: ("km", "car.fill", HabitCategory.TRANSPORT),
    ActivityKind.BUS: ("km", "bus", HabitCategory.TRANSPORT),
    ActivityKind.TRAIN: ("km", "tram", HabitCategory.TRANSPORT),
    ActivityKind.ELECTRICITY: ("kWh", "bolt.fill", HabitCategory.ENERGY),
    ActivityKind.RECYCLING: ("kg", "arrow.3.trianglepath", HabitCategory.RECYCLING),
    ActivityKind.VEGETARIAN_MEAL: ("meal", "leaf", HabitCategory.FOOD),
    ActivityKind.WATER: ("L", "drop.fill", HabitCategory.WATER),
    ActivityKind.TREE_PLANTED: ("tree", "leaf.fill", HabitCategory.OTHER),
    ActivityKind.COMPOSTING: ("kg", "leaf.arrow.circlepath", HabitCategory.RECYCLING),
}


def _lookup(activity: str | ActivityKind) -> EmissionFactor | None:
    try:
        return EMISSION_FACTORS[ActivityKind(activity)]
    except ValueError:
        return None


def emission_factor(activity: str | ActivityKind) -> float:
    """Get the signed per-unit factor for an activity.

    Args:
        activity: Activity kind or its string key

    Returns:
        Signed factor in kg CO2e per unit, or 0.0 for unknown activities
    """
    entry = _lookup(activity)
    return entry.factor if entry else 0.0


def calculate_impact(activity: str | ActivityKind, quantity: float) -> float:
    """Calculate the signed CO2 impact of an activity.

    Args:
        activity: Activity kind or its string key
        quantity: Signed quantity (e.g. -5 for 5 km of driving avoided)

    Returns:
        Impact in kg CO2 (negative values mean emissions saved)
    """
    return emission_factor(activity) * quantity


def activity_name(activity: str | ActivityKind) -> str:
    """Human-readable name of an activity, falling back to its key."""
    entry = _lookup(activity)
    if entry:
        return entry.name
    return activity.value if isinstance(activity, ActivityKind) else activity


def describe_impact(activity: str | ActivityKind, quantity: float) -> str:
    """Describe the impact of an activity for user feedback.

    Args:
        activity: Activity kind or its string key
        quantity: Signed quantity

    Returns:
        e.g. "Driving car saved 0.9 kg CO₂" or "Beef consumption produced 27.0 kg CO₂"

    Examples:
        >>> describe_impact("recycling", 10)
        'Recycling saved 10.4 kg CO₂'
        >>> describe_impact("bus", 10)
        'Taking bus produced 0.8 kg CO₂'
    """
    impact = calculate_impact(activity, quantity)
    name = activity_name(activity)
    if impact < 0:
        return f"{name} saved {abs(impact):.1f} kg CO₂"
    return f"{name} produced {impact:.1f} kg CO₂"


def unit_for_activity(activity: str) -> str:
    """Default unit label for habits of this activity."""
    entry = _defaults(activity)
    return entry[0] if entry else "unit"


def icon_for_activity(activity: str) -> str:
    """Default icon tag for habits of this activity."""
    entry = _defaults(activity)
    return entry[1] if entry else "star.fill"


def category_for_activity(activity: str) -> HabitCategory:
    """Default category for habits of this activity."""
    entry = _defaults(activity)
    return entry[2] if entry else HabitCategory.OTHER


def default_description(activity: str, quantity: float, title: str = "") -> str:
    """Default habit description when the author leaves it blank.

    Args:
        activity: Activity kind key
        quantity: Signed habit quantity
        title: Habit title, used for activities without a template

    Returns:
        Short imperative description such as "Skip 5km of driving"
    """
    amount = int(abs(quantity)) if math.isfinite(quantity) else 0
    if activity == ActivityKind.CAR:
        return f"Skip {amount}km of driving"
    if activity == ActivityKind.VEGETARIAN_MEAL:
        return "Choose vegetarian meal"
    if activity == ActivityKind.RECYCLING:
        return f"Recycle {amount}kg of waste"
    if activity == ActivityKind.WATER:
        return f"Save {amount}L of water"
    if activity == ActivityKind.TREE_PLANTED:
        return "Plant a tree"
    return title


def _defaults(activity: str) -> tuple[str, str, HabitCategory] | None:
    try:
        return _HABIT_DEFAULTS.get(ActivityKind(activity))
    except ValueError:
        return None
