"""Value category rules shared by numbering, intake and slip grouping."""

from decimal import Decimal

from django.conf import settings

SMALL_VALUE = "small_value"
HIGH_VALUE = "high_value"

SUB_CATEGORY_CHOICES = [
    (SMALL_VALUE, "Small Value Expendable"),
    (HIGH_VALUE, "High Value Expendable"),
]

PROPERTY_PREFIXES = {
    SMALL_VALUE: "SPLV",
    HIGH_VALUE: "SPHV",
}

SLIP_PREFIX = "ICS"


def small_value_threshold() -> Decimal:
    return Decimal(str(getattr(settings, "SMALL_VALUE_THRESHOLD", 5000)))


def classify_unit_cost(unit_cost) -> str:
    """Return the value category for a unit cost.

    Items at or below the threshold are small value; everything above
    is high value.
    """
    cost = Decimal(str(unit_cost or 0))
    if cost <= small_value_threshold():
        return SMALL_VALUE
    return HIGH_VALUE


def item_sub_category(item: dict) -> str:
    """Value category of an item row, always taken from its unit cost.

    The stored ``sub_category`` column is only a mirror and may lag
    behind a cost edited outside the model.
    """
    return classify_unit_cost(item.get("unit_cost"))


def property_prefix(sub_category: str) -> str:
    """Property number prefix (SPLV/SPHV) for a sub-category.

    Anything not recognised as small value numbers as high value.
    """
    if sub_category == SMALL_VALUE:
        return PROPERTY_PREFIXES[SMALL_VALUE]
    return PROPERTY_PREFIXES[HIGH_VALUE]


def slip_prefix(sub_category: str) -> str:
    """Custodian slip prefix, e.g. ICS-SPLV."""
    return f"{SLIP_PREFIX}-{property_prefix(sub_category)}"


def sub_category_label(sub_category: str) -> str:
    return dict(SUB_CATEGORY_CHOICES).get(sub_category, sub_category or "")
