"""Daily eco tip rotation."""

from datetime import date

from pydantic import BaseModel, Field


class EcoTip(BaseModel):
    """A short sustainability tip shown once per day."""

    tip: str = Field(..., description="Action to take")
    fact: str = Field(..., description="Supporting fact")
    category: str = Field(..., description="Tip category")
    impact: str = Field(..., description="Estimated impact")


ECO_TIPS: tuple[EcoTip, ...] = (
    EcoTip(
        tip="Turn off lights when leaving a room",
        fact="A single LED bulb can save 300kg of CO2 emissions over its lifetime",
        category="Energy",
        impact="Save 0.15 kg CO2 per hour",
    ),
    EcoTip(
        tip="Use a reusable water bottle",
        fact="1 million plastic bottles are bought every minute globally",
        category="Waste",
        impact="Save 82.8 kg CO2 per year",
    ),
    EcoTip(
        tip="Eat locally grown seasonal produce",
        fact="Food transportation accounts for 6% of global emissions",
        category="Food",
        impact="Save up to 1 kg CO2 per meal",
    ),
    EcoTip(
        tip="Take shorter showers",
        fact="A 10-minute shower uses about 100 liters of water",
        category="Water",
        impact="Save 2.5 kg CO2 per week",
    ),
    EcoTip(
        tip="Use public transportation",
        fact="One bus can replace 60 cars on the road",
        category="Transport",
        impact="Save 2.6 kg CO2 per trip",
    ),
    EcoTip(
        tip="Plant a tree",
        fact="A single tree absorbs about 22kg of CO2 per year",
        category="Nature",
        impact="Save 22 kg CO2 per year",
    ),
    EcoTip(
        tip="Use reusable shopping bags",
        fact="The average plastic bag is used for only 12 minutes",
        category="Waste",
        impact="Save 0.5 kg CO2 per bag",
    ),
    EcoTip(
        tip="Choose vegetarian meals",
        fact="Meat production accounts for 14.5% of global emissions",
        category="Food",
        impact="Save 3.5 kg CO2 per meal",
    ),
    EcoTip(
        tip="Unplug devices when not in use",
        fact="Standby power (phantom load) accounts for 5-10% of residential energy use.",
        category="Energy",
        impact="Save $100+ per year on electricity",
    ),
    EcoTip(
        tip="Recycle aluminum cans",
        fact="Recycling one aluminum can saves enough energy to power a TV for 3 hours.",
        category="Recycling",
        impact="Reduce 95% energy compared to new aluminum",
    ),
)


def tip_for_day(day: date, tips: tuple[EcoTip, ...] = ECO_TIPS) -> EcoTip:
    """Pick the tip for a calendar day.

    Consecutive days get consecutive tips, wrapping around the list.

    Args:
        day: Calendar day
        tips: Tips to rotate through (must not be empty)

    Returns:
        The day's tip
    """
    return tips[day.toordinal() % len(tips)]
