"""Inventory intake: new items and their property cards."""

import logging
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from ..exceptions import ExhaustedRetries, ItemNotFound, StoreConflict
from .categories import classify_unit_cost
from .numbering import max_attempts, next_property_number
from .property_cards import add_receipt, get_card_for_item
from .store import get_default_store

logger = logging.getLogger(__name__)


def describe_item(item: dict) -> str:
    """Description, falling back to brand and model."""
    if item.get("description"):
        return item["description"].strip()
    brand = item.get("brand") or ""
    if item.get("model_name"):
        return f"{brand} {item['model_name']}".strip()
    return brand.strip()


def register_inventory_item(
    *, unit_cost, quantity=1, year=None, store=None, **fields
) -> dict:
    """Create an available, active inventory item with a fresh property number.

    The sub-category always follows the unit cost. If a
    concurrent caller takes the minted number first, a new one is minted.
    """
    store = store or get_default_store()
    unit_cost = Decimal(str(unit_cost or 0))
    fields.pop("sub_category", None)
    sub_category = classify_unit_cost(unit_cost)
    values = {
        **fields,
        "unit_cost": unit_cost,
        "quantity": quantity,
        "total_cost": unit_cost * quantity,
        "sub_category": sub_category,
        "assignment_status": "available",
        "custodian": None,
        "custodian_position": None,
        "assigned_date": None,
        "ics_number": None,
    }
    values.setdefault("date_acquired", timezone.localdate())

    for _ in range(max_attempts()):
        number = next_property_number(sub_category, year=year, store=store)
        try:
            item = store.insert(
                "inventory_items", {**values, "property_number": number}
            )
        except StoreConflict:
            logger.warning(
                "Property number %s was taken concurrently, minting another",
                number,
            )
            continue
        logger.info("Registered inventory item %s", number)
        return item

    raise ExhaustedRetries(
        f"Could not register the item: every property number minted in "
        f"{max_attempts()} attempts was taken."
    )


def create_property_card(
    item_id,
    *,
    entity_name=None,
    fund_cluster=None,
    initial_receipt=True,
    store=None,
) -> dict:
    """Open the property card of an item.

    With ``initial_receipt`` the card starts with a receipt entry for the
    item's quantity and cost, so later issues have a balance to draw on.
    Returns the existing card if the item already has one.
    """
    store = store or get_default_store()
    item = store.get("inventory_items", item_id)
    if item is None:
        raise ItemNotFound(item_id)

    card = get_card_for_item(item_id, store=store)
    if card is not None:
        return card

    description = describe_item(item)
    card = store.insert(
        "property_cards",
        {
            "inventory_item_id": item_id,
            "entity_name": (
                entity_name
                if entity_name is not None
                else getattr(settings, "ENTITY_NAME", "")
            ),
            "fund_cluster": (
                fund_cluster
                if fund_cluster is not None
                else getattr(settings, "DEFAULT_FUND_CLUSTER", "")
            ),
            "semi_expendable_property": (
                item.get("description") or description
            )[:200],
            "property_number": item["property_number"],
            "description": description,
            "date_acquired": item.get("date_acquired"),
            "remarks": item.get("remarks") or "",
        },
    )

    if initial_receipt:
        add_receipt(
            card["id"],
            date=item.get("date_acquired") or timezone.localdate(),
            quantity=item.get("quantity") or 1,
            unit_cost=item.get("unit_cost"),
            reference=item["property_number"],
            remarks="Initial receipt",
            store=store,
        )
    return card
