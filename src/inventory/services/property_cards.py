"""Property card ledger services."""

from decimal import Decimal

from django.core.exceptions import ValidationError

from .store import get_default_store


def get_card_for_item(item_id, store=None) -> dict | None:
    store = store or get_default_store()
    rows = store.select("property_cards", {"inventory_item_id": item_id}, limit=1)
    return rows[0] if rows else None


def get_entries(card_id, store=None) -> list[dict]:
    """All ledger rows of a card in posting order."""
    store = store or get_default_store()
    return store.select(
        "property_card_entries", {"property_card_id": card_id}, order_by=["id"]
    )


def latest_entry(card_id, store=None) -> dict | None:
    store = store or get_default_store()
    rows = store.select(
        "property_card_entries",
        {"property_card_id": card_id},
        order_by=["-id"],
        limit=1,
    )
    return rows[0] if rows else None


def current_balance(card_id, store=None) -> int:
    """Balance quantity after the most recent entry (0 when empty)."""
    entry = latest_entry(card_id, store=store)
    return entry["balance_qty"] if entry else 0


def add_receipt(
    card_id,
    *,
    date,
    quantity,
    unit_cost,
    reference="",
    remarks="",
    related_transfer_id=None,
    store=None,
) -> dict:
    """Post a receipt; the balance goes up by ``quantity``."""
    store = store or get_default_store()
    unit_cost = Decimal(str(unit_cost or 0))
    total_cost = unit_cost * quantity
    balance = current_balance(card_id, store=store) + quantity
    return store.insert(
        "property_card_entries",
        {
            "property_card_id": card_id,
            "date": date,
            "reference": reference,
            "receipt_qty": quantity,
            "unit_cost": unit_cost,
            "total_cost": total_cost,
            "issue_item_no": "",
            "issue_qty": 0,
            "office_officer": "",
            "balance_qty": balance,
            "amount": total_cost,
            "remarks": remarks,
            "related_slip_id": None,
            "related_transfer_id": related_transfer_id,
        },
    )


def add_issue(
    card_id,
    *,
    date,
    quantity,
    reference,
    office_officer="",
    related_slip_id=None,
    related_transfer_id=None,
    remarks="",
    store=None,
) -> dict:
    """Post an issue; the balance goes down by ``quantity``, never below 0.

    A card must open with a receipt before anything can be issued
    from it.
    """
    store = store or get_default_store()
    last = latest_entry(card_id, store=store)
    if last is None:
        raise ValidationError(
            "Cannot issue from a property card that has no receipt entry."
        )
    balance = max(0, last["balance_qty"] - quantity)
    return store.insert(
        "property_card_entries",
        {
            "property_card_id": card_id,
            "date": date,
            "reference": reference,
            "receipt_qty": 0,
            "unit_cost": Decimal("0"),
            "total_cost": Decimal("0"),
            "issue_item_no": reference,
            "issue_qty": quantity,
            "office_officer": office_officer,
            "balance_qty": balance,
            "amount": Decimal("0"),
            "remarks": remarks,
            "related_slip_id": related_slip_id,
            "related_transfer_id": related_transfer_id,
        },
    )
