"""Estimated useful life from an item's description and cost."""

from decimal import Decimal, InvalidOperation
from typing import NamedTuple

MAX_OVERRIDE_YEARS = 50
DEFAULT_YEARS = 5

# (keywords, years, confidence, reasoning); first match wins.
DESCRIPTION_RULES = [
    (
        ("server", "computer", "workstation"),
        5,
        "high",
        "IT equipment typically lasts 5 years",
    ),
    (
        ("vehicle", "car", "truck"),
        8,
        "high",
        "Vehicles typically last 8 years",
    ),
    (
        ("furniture", "desk", "chair", "cabinet"),
        10,
        "high",
        "Furniture typically lasts 10 years",
    ),
    (
        ("air conditioning", "hvac", "cooling"),
        15,
        "high",
        "HVAC systems typically last 15 years",
    ),
    (
        ("generator", "backup power"),
        20,
        "high",
        "Generators typically last 20 years",
    ),
    (
        ("refrigerator", "freezer"),
        12,
        "high",
        "Refrigeration equipment typically lasts 12 years",
    ),
    (
        ("printer", "copier", "scanner"),
        7,
        "medium",
        "Office equipment typically lasts 7 years",
    ),
    (
        ("monitor", "display", "screen"),
        5,
        "medium",
        "Displays typically last 5 years",
    ),
    (
        ("laptop", "notebook"),
        4,
        "high",
        "Laptops typically last 4 years",
    ),
    (
        ("tablet", "ipad"),
        3,
        "medium",
        "Tablets typically last 3 years",
    ),
    (
        ("drill", "saw", "tool"),
        8,
        "medium",
        "Power tools typically last 8 years",
    ),
    (
        ("camera", "video", "recording"),
        6,
        "medium",
        "A/V equipment typically lasts 6 years",
    ),
    (
        ("fire", "safety", "alarm"),
        10,
        "high",
        "Safety equipment typically lasts 10 years",
    ),
    (
        ("paper", "pen", "supply"),
        1,
        "low",
        "Consumables typically last 1 year",
    ),
]

CATEGORY_YEARS = {
    "IT Equipment": 5,
    "Furniture": 10,
    "Vehicles": 8,
    "Machinery": 15,
    "Electronics": 4,
    "Tools": 8,
    "Appliances": 12,
    "Safety Equipment": 10,
    "Office Equipment": 7,
    "Building Equipment": 20,
}

# (minimum cost, year adjustment, reasoning), highest bracket first.
COST_BRACKETS = [
    (Decimal("100000"), 2, "High-value items typically last longer"),
    (Decimal("50000"), 1, "Medium-high value items may last longer"),
    (Decimal("10000"), 0, "Standard value items"),
    (Decimal("1000"), -1, "Lower value items may have shorter life"),
]
LOWEST_BRACKET = (-2, "Low value items typically have shorter life")

METHOD_LABELS = {
    "intelligent": "Description Analysis",
    "manual": "Manual Override",
    "category_fallback": "Category-Based",
}

CONFIDENCE_LABELS = {
    "high": "High Confidence",
    "medium": "Medium Confidence",
    "low": "Low Confidence",
}


class UsefulLifeEstimate(NamedTuple):
    years: int
    months: int
    method: str
    confidence: str
    reasoning: str

    def __str__(self):
        unit = "year" if self.years == 1 else "years"
        return f"{self.years:g} {unit}"


def analyse_description(description):
    desc = (description or "").lower()
    for keywords, years, confidence, reasoning in DESCRIPTION_RULES:
        if any(keyword in desc for keyword in keywords):
            return years, confidence, reasoning
    return DEFAULT_YEARS, "low", "Default estimate based on general equipment"


def _cost_confidence(cost):
    if cost >= Decimal("10000"):
        return "high"
    if cost >= Decimal("1000"):
        return "medium"
    return "low"


def analyse_cost(cost, base_years):
    """Adjust ``base_years`` by cost bracket; never below one year."""
    cost = Decimal(str(cost or 0))
    adjustment, reasoning = LOWEST_BRACKET
    for minimum, bracket_adjustment, bracket_reasoning in COST_BRACKETS:
        if cost >= minimum:
            adjustment, reasoning = bracket_adjustment, bracket_reasoning
            break
    return max(1, base_years + adjustment), _cost_confidence(cost), reasoning


def calculate_estimated_useful_life(
    description, cost, category=None, manual_override=None
) -> UsefulLifeEstimate:
    """Estimate useful life in years.

    A positive manual override wins. Otherwise a high-confidence match
    on the description is adjusted by cost; failing that the category
    table is used, and finally the plain default adjusted by cost.
    """
    if manual_override and manual_override > 0:
        return UsefulLifeEstimate(
            years=manual_override,
            months=round(manual_override * 12),
            method="manual",
            confidence="high",
            reasoning="Manual override provided by user",
        )

    base_years, desc_confidence, desc_reasoning = analyse_description(
        description
    )
    years, cost_confidence, cost_reasoning = analyse_cost(cost, base_years)

    if desc_confidence == "high":
        return UsefulLifeEstimate(
            years=years,
            months=years * 12,
            method="intelligent",
            confidence=cost_confidence,
            reasoning=f"{desc_reasoning}. {cost_reasoning}",
        )

    if category:
        years, cost_confidence, cost_reasoning = analyse_cost(
            cost, CATEGORY_YEARS.get(category, DEFAULT_YEARS)
        )
        return UsefulLifeEstimate(
            years=years,
            months=years * 12,
            method="category_fallback",
            confidence=cost_confidence,
            reasoning=(
                f"Category-based estimate for {category}. {cost_reasoning}"
            ),
        )

    return UsefulLifeEstimate(
        years=years,
        months=years * 12,
        method="intelligent",
        confidence="low",
        reasoning=f"Default estimate based on cost analysis. {cost_reasoning}",
    )


def summarize(estimate: UsefulLifeEstimate) -> str:
    return (
        f"{estimate.years} years ({estimate.months} months) - "
        f"{METHOD_LABELS[estimate.method]} - "
        f"{CONFIDENCE_LABELS[estimate.confidence]}"
    )


def validate_manual_override(value):
    """Parse a manual override entry.

    Returns ``(years, None)`` on success, ``(None, None)`` for an empty
    entry and ``(None, error_message)`` otherwise.
    """
    if value is None or str(value).strip() == "":
        return None, None
    try:
        years = Decimal(str(value).strip())
    except InvalidOperation:
        return None, "Must be a valid number"
    if not years.is_finite():
        return None, "Must be a valid number"
    if years <= 0:
        return None, "Must be greater than 0"
    if years > MAX_OVERRIDE_YEARS:
        return None, f"Must be {MAX_OVERRIDE_YEARS} years or less"
    return years, None
