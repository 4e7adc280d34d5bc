"""Custodian accountability: what a custodian holds and has held."""

from decimal import Decimal

from django.db.models import Count, Max, Sum

from ..models import (
    CustodianSlip,
    CustodianSlipItem,
    InventoryItem,
    TransferItem,
)


def get_current_items(custodian_name: str):
    """Active items currently assigned to the custodian."""
    return InventoryItem.objects.filter(
        custodian=custodian_name,
        assignment_status="assigned",
        status="active",
    ).order_by("property_number")


def _received_transfer_items(custodian_name: str):
    return TransferItem.objects.filter(
        transfer__to_custodian=custodian_name, transfer__status="completed"
    )


def _history_entry(item, document, **fields):
    current = item.is_assigned and item.ics_number == document
    return {
        "inventory_item_id": item.pk,
        "category": item.category,
        "sub_category": item.sub_category,
        "condition": item.condition,
        "status": item.status,
        "assignment_status": item.assignment_status,
        "is_currently_assigned": current,
        **fields,
    }


def get_item_history(custodian_name: str, include_returned: bool = False):
    """Items issued or transferred to the custodian, newest first.

    Each entry is a dict naming the slip (or, for items received by
    transfer, the transfer) together with the date the custodian got the
    item and whether it is still held under that document. Items since
    released or passed on are left out unless ``include_returned``.
    """
    slip_items = CustodianSlipItem.objects.filter(
        slip__custodian_name=custodian_name
    ).select_related("slip", "inventory_item")
    received = _received_transfer_items(custodian_name).select_related(
        "transfer", "inventory_item"
    )

    dated = []
    for slip_item in slip_items:
        entry = _history_entry(
            slip_item.inventory_item,
            slip_item.slip.slip_number,
            id=slip_item.pk,
            property_number=slip_item.property_number,
            description=slip_item.description,
            unit_cost=slip_item.unit_cost,
            total_cost=slip_item.total_cost,
            slip_id=slip_item.slip_id,
            slip_number=slip_item.slip.slip_number,
            transfer_number=None,
            date_issued=slip_item.date_issued,
        )
        dated.append((slip_item.created_at, slip_item.pk, entry))
    for transfer_item in received:
        item = transfer_item.inventory_item
        entry = _history_entry(
            item,
            transfer_item.transfer.transfer_number,
            id=transfer_item.pk,
            property_number=transfer_item.property_number,
            description=transfer_item.description,
            unit_cost=item.unit_cost,
            total_cost=item.unit_cost * transfer_item.quantity,
            slip_id=None,
            slip_number=None,
            transfer_number=transfer_item.transfer.transfer_number,
            date_issued=transfer_item.transfer.date_completed,
        )
        dated.append(
            (transfer_item.transfer.updated_at, transfer_item.pk, entry)
        )

    dated.sort(key=lambda row: (row[0], row[1]), reverse=True)
    return [
        entry
        for _, _, entry in dated
        if include_returned or entry["is_currently_assigned"]
    ]


def get_summary(custodian_name: str) -> dict:
    """Totals of everything the custodian received against what they hold."""
    issued = CustodianSlipItem.objects.filter(
        slip__custodian_name=custodian_name
    ).aggregate(count=Count("id"), value=Sum("total_cost"))
    received = _received_transfer_items(custodian_name).aggregate(
        count=Count("id"),
        value=Sum("inventory_item__total_cost"),
        last=Max("transfer__date_completed"),
    )
    held = get_current_items(custodian_name).aggregate(
        count=Count("id"), value=Sum("total_cost")
    )
    last_issued = CustodianSlip.objects.filter(
        custodian_name=custodian_name
    ).aggregate(last=Max("date_issued"))["last"]

    total_items = issued["count"] + received["count"]
    total_value = (issued["value"] or Decimal("0")) + (
        received["value"] or Decimal("0")
    )
    current_value = held["value"] or Decimal("0")
    activity = [d for d in (last_issued, received["last"]) if d is not None]
    return {
        "custodian_name": custodian_name,
        "total_items_assigned": total_items,
        "total_value_assigned": total_value,
        "currently_assigned_items": held["count"],
        "currently_assigned_value": current_value,
        "historical_items": total_items - held["count"],
        "historical_value": total_value - current_value,
        "last_activity_date": max(activity, default=None),
    }
