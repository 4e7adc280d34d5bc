"""Custodian-to-custodian transfers of assigned items.

A transfer is requested (pending), approved (in transit) and completed,
or rejected while still open. Items and property cards are untouched
until completion, which posts a return receipt and a new issue entry on
every card and moves the assignment to the receiving custodian inside
one database transaction.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.db import transaction as db_transaction
from django.db.models import Count
from django.utils import timezone

from ..exceptions import (
    ExhaustedRetries,
    InvalidTransfer,
    ItemNotFound,
    NotAssigned,
    PropertyCardMissing,
    TransferNotFound,
)
from ..models import (
    CustodianSlip,
    InventoryItem,
    PropertyCard,
    Transfer,
    TransferItem,
)
from .numbering import max_attempts, next_transfer_number
from .property_cards import add_issue, add_receipt
from .slips import item_pk
from .state import validate_transfer_transition
from .store import get_default_store

logger = logging.getLogger(__name__)


def get_transfer(transfer_id) -> Transfer:
    try:
        return Transfer.objects.get(pk=transfer_id)
    except (Transfer.DoesNotExist, ValueError, TypeError):
        raise TransferNotFound(transfer_id) from None


def holding_office(item: InventoryItem) -> str:
    """Office of the slip or transfer the item is currently held under."""
    slip = CustodianSlip.objects.filter(slip_number=item.ics_number).first()
    if slip is not None:
        return slip.office
    transfer = Transfer.objects.filter(
        transfer_number=item.ics_number
    ).first()
    return transfer.to_office if transfer is not None else ""


def _requested_items(inventory_item_ids) -> list[InventoryItem]:
    pks = list(dict.fromkeys(map(item_pk, inventory_item_ids)))
    found = InventoryItem.objects.in_bulk(pks)
    items = []
    for pk in pks:
        item = found.get(pk)
        if item is None:
            raise ItemNotFound(pk)
        if not item.is_assigned:
            raise NotAssigned(item.property_number)
        items.append(item)
    return items


def create_transfer(
    inventory_item_ids,
    *,
    to_custodian,
    to_designation="",
    to_office="",
    transfer_type="permanent",
    reason="",
    requested_by="",
    date_requested=None,
    remarks="",
) -> Transfer:
    """Request the transfer of assigned items to another custodian.

    Every item must be held by the same custodian and must not already
    be on an open transfer. Returns the pending Transfer.
    """
    if not inventory_item_ids:
        raise ValueError("No inventory items provided for the transfer.")
    to_custodian = (to_custodian or "").strip()
    if not to_custodian:
        raise InvalidTransfer("A receiving custodian is required.")
    if transfer_type not in dict(Transfer.TYPE_CHOICES):
        raise InvalidTransfer(
            f"'{transfer_type}' is not a valid transfer type."
        )

    items = _requested_items(inventory_item_ids)

    holders = {item.custodian for item in items}
    if len(holders) > 1:
        raise InvalidTransfer(
            "Items held by different custodians cannot share a transfer: "
            f"{', '.join(sorted(holders))}."
        )
    from_custodian = holders.pop()
    if from_custodian == to_custodian:
        raise InvalidTransfer(f"The items are already held by {to_custodian}.")

    busy = (
        TransferItem.objects.filter(
            inventory_item__in=items,
            transfer__status__in=Transfer.OPEN_STATUSES,
        )
        .select_related("transfer")
        .first()
    )
    if busy is not None:
        raise InvalidTransfer(
            f"Inventory item {busy.property_number} is already on open "
            f"transfer {busy.transfer.transfer_number}."
        )

    date_requested = date_requested or timezone.localdate()
    from_office = holding_office(items[0])

    for _ in range(max_attempts()):
        number = next_transfer_number(year=date_requested.year)
        try:
            with db_transaction.atomic():
                transfer = Transfer.objects.create(
                    transfer_number=number,
                    transfer_type=transfer_type,
                    from_custodian=from_custodian,
                    from_office=from_office,
                    to_custodian=to_custodian,
                    to_designation=to_designation or "",
                    to_office=to_office or "",
                    requested_by=requested_by or "",
                    date_requested=date_requested,
                    reason=reason or "",
                    remarks=remarks or "",
                )
                TransferItem.objects.bulk_create(
                    TransferItem(
                        transfer=transfer,
                        inventory_item=item,
                        property_number=item.property_number,
                        description=item.display_description,
                        quantity=item.quantity,
                        condition=item.condition,
                    )
                    for item in items
                )
        except IntegrityError:
            logger.warning(
                "Transfer number %s was taken concurrently, minting another",
                number,
            )
            continue
        logger.info(
            "Requested transfer %s of %d item(s) from %s to %s",
            number,
            len(items),
            from_custodian,
            to_custodian,
        )
        return transfer

    raise ExhaustedRetries(
        f"Could not create the transfer: every number minted in "
        f"{max_attempts()} attempts was taken."
    )


def approve_transfer(transfer_id, *, approved_by, date_approved=None):
    """Approve a pending transfer; it is then in transit."""
    transfer = get_transfer(transfer_id)
    if not (approved_by or "").strip():
        raise InvalidTransfer("An approving officer is required.")
    validate_transfer_transition(transfer, "in_transit")
    transfer.status = "in_transit"
    transfer.approved_by = approved_by.strip()
    transfer.date_approved = date_approved or timezone.localdate()
    transfer.save(
        update_fields=["status", "approved_by", "date_approved", "updated_at"]
    )
    logger.info(
        "Transfer %s approved by %s", transfer.transfer_number, approved_by
    )
    return transfer


def reject_transfer(transfer_id, *, remarks=""):
    """Reject an open transfer. The items stay with their custodian."""
    transfer = get_transfer(transfer_id)
    validate_transfer_transition(transfer, "rejected")
    transfer.status = "rejected"
    if remarks and transfer.remarks:
        transfer.remarks += f"\n---\n{remarks}"
    elif remarks:
        transfer.remarks = remarks
    transfer.save(update_fields=["status", "remarks", "updated_at"])
    logger.info("Transfer %s rejected", transfer.transfer_number)
    return transfer


def complete_transfer(transfer_id, *, date_completed=None):
    """Hand the items of an in-transit transfer to the receiving custodian.

    Each property card gets a receipt back from the releasing custodian
    and an issue to the receiving one, both linked to the transfer. Any
    failure leaves items, cards and the transfer as they were.
    """
    store = get_default_store()
    date_completed = date_completed or timezone.localdate()

    with db_transaction.atomic():
        try:
            transfer = Transfer.objects.select_for_update().get(
                pk=transfer_id
            )
        except (Transfer.DoesNotExist, ValueError, TypeError):
            raise TransferNotFound(transfer_id) from None
        validate_transfer_transition(transfer, "completed")

        number = transfer.transfer_number
        officer = transfer.to_custodian
        if transfer.to_designation:
            officer = f"{officer} ({transfer.to_designation})"

        transfer_items = list(transfer.items.order_by("id"))
        if not transfer_items:
            raise ValidationError(
                f"Transfer {number} has no items and cannot be completed."
            )

        for transfer_item in transfer_items:
            item = InventoryItem.objects.select_for_update().get(
                pk=transfer_item.inventory_item_id
            )
            if not (
                item.is_assigned
                and item.custodian == transfer.from_custodian
            ):
                raise InvalidTransfer(
                    f"Inventory item {item.property_number} is no longer "
                    f"held by {transfer.from_custodian}."
                )
            card = PropertyCard.objects.filter(inventory_item=item).first()
            if card is None:
                raise PropertyCardMissing(item.property_number)

            add_receipt(
                card.pk,
                date=date_completed,
                quantity=transfer_item.quantity,
                unit_cost=item.unit_cost,
                reference=number,
                remarks=(
                    f"Returned by {transfer.from_custodian} via PTR {number}"
                ),
                related_transfer_id=transfer.pk,
                store=store,
            )
            entry = add_issue(
                card.pk,
                date=date_completed,
                quantity=transfer_item.quantity,
                reference=number,
                office_officer=officer,
                related_transfer_id=transfer.pk,
                remarks=(
                    f"Transferred to {transfer.to_custodian} via PTR {number}"
                ),
                store=store,
            )
            transfer_item.property_card_entry_id = entry["id"]
            transfer_item.save(update_fields=["property_card_entry"])

            item.custodian = transfer.to_custodian
            item.custodian_position = transfer.to_designation
            item.assigned_date = date_completed
            item.ics_number = number
            item.save(
                update_fields=[
                    "custodian",
                    "custodian_position",
                    "assigned_date",
                    "ics_number",
                    "updated_at",
                ]
            )

        transfer.status = "completed"
        transfer.date_completed = date_completed
        transfer.save(update_fields=["status", "date_completed", "updated_at"])

    logger.info(
        "Completed transfer %s: %d item(s) now held by %s",
        number,
        len(transfer_items),
        transfer.to_custodian,
    )
    return transfer


def get_transfer_statistics() -> dict:
    """Transfer counts overall, by status and by type."""
    by_status = dict(
        Transfer.objects.order_by()
        .values_list("status")
        .annotate(count=Count("id"))
    )
    by_type = dict(
        Transfer.objects.order_by()
        .values_list("transfer_type")
        .annotate(count=Count("id"))
    )
    return {
        "total_transfers": sum(by_status.values()),
        "by_status": by_status,
        "by_type": by_type,
    }
