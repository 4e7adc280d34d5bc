"""Custodian slip issuance and deletion.

Issuing items to a custodian touches four tables per item (slip item,
property card entries, inventory item, and the slip itself) and the
store offers no multi-statement transaction. Every write is therefore
recorded in a ``CompensationLog`` together with its inverse, one log per
slip, and any failure unwinds the current slip and then every slip
already completed in the same call, newest first.
"""

import logging
from decimal import Decimal

from django.utils import timezone

from ..exceptions import (
    AlreadyAssigned,
    ExhaustedRetries,
    ImmutableSlip,
    ItemNotFound,
    NotServiceable,
    PartialWriteFailure,
    PropertyCardMissing,
    SlipNotFound,
    StoreConflict,
)
from ..models import CustodianSlip
from .categories import item_sub_category, sub_category_label
from .compensation import CompensationLog
from .intake import describe_item
from .numbering import max_attempts, next_slip_number
from .property_cards import add_issue, add_receipt, get_card_for_item, latest_entry
from .store import get_default_store
from .useful_life import calculate_estimated_useful_life

logger = logging.getLogger(__name__)

RELEASED = {
    "custodian": None,
    "custodian_position": None,
    "assignment_status": "available",
    "assigned_date": None,
    "ics_number": None,
}

ASSIGNMENT_FIELDS = tuple(RELEASED)


def item_pk(item_id):
    """Coerce a requested item id to a primary key.

    Anything that is not a whole number cannot name a row and is
    reported as ItemNotFound.
    """
    if isinstance(item_id, int) and not isinstance(item_id, bool):
        return item_id
    if isinstance(item_id, str) and item_id.strip().isdigit():
        return int(item_id)
    raise ItemNotFound(item_id)


def validate_items(inventory_item_ids, store) -> list[dict]:
    """Fetch and check every requested item before anything is written.

    Repeated ids are issued once, at their first position.
    """
    items = []
    seen = set()
    for item_id in map(item_pk, inventory_item_ids):
        if item_id in seen:
            continue
        seen.add(item_id)

        item = store.get("inventory_items", item_id)
        if item is None:
            raise ItemNotFound(item_id)
        if item["assignment_status"] != "available" or item["custodian"]:
            raise AlreadyAssigned(item["property_number"], item["custodian"])
        if item["condition"] != "serviceable":
            raise NotServiceable(item["property_number"], item["condition"])
        if get_card_for_item(item_id, store=store) is None:
            raise PropertyCardMissing(item["property_number"])
        items.append(item)
    return items


def group_by_sub_category(items) -> dict[str, list[dict]]:
    """Partition items by value category, keeping first-seen order."""
    groups = {}
    for item in items:
        groups.setdefault(item_sub_category(item), []).append(item)
    return groups


def _insert_slip(values, sub_category, store) -> dict:
    year = values["date_issued"].year
    for _ in range(max_attempts()):
        number = next_slip_number(sub_category, year=year, store=store)
        try:
            return store.insert(
                "custodian_slips", {**values, "slip_number": number}
            )
        except StoreConflict:
            logger.warning(
                "Slip number %s was taken concurrently, minting another",
                number,
            )
    raise ExhaustedRetries(
        f"Could not create a {sub_category_label(sub_category)} slip: every "
        f"number minted in {max_attempts()} attempts was taken."
    )


class _SlipIssue:
    """Writes one slip and its items, recording each write in ``log``."""

    def __init__(self, store, sub_category, items, header):
        self.store = store
        self.sub_category = sub_category
        self.items = items
        self.header = header
        self.log = CompensationLog(label=sub_category)
        self.slip = None
        self.step = None

    @property
    def officer(self):
        name = self.header["custodian_name"]
        designation = self.header["designation"]
        return f"{name} ({designation})" if designation else name

    def run(self) -> dict:
        store = self.store
        self.slip = self.log.perform(
            "custodian slip",
            lambda: _insert_slip(
                {
                    **self.header,
                    "sub_category": self.sub_category,
                    "slip_status": "draft",
                },
                self.sub_category,
                store,
            ),
            lambda row: store.delete("custodian_slips", row["id"]),
        )
        logger.info(
            "Created custodian slip %s for %s (%d item(s))",
            self.slip["slip_number"],
            self.header["custodian_name"],
            len(self.items),
        )
        for item_number, item in enumerate(self.items, start=1):
            self.issue_item(item, item_number)

        return {
            **self.slip,
            "items": store.select(
                "custodian_slip_items",
                {"slip_id": self.slip["id"]},
                order_by=["item_number"],
            ),
        }

    def issue_item(self, item, item_number):
        """Write one item of the slip.

        Any failure is raised as PartialWriteFailure naming the step that
        failed; the writes already made stay in ``log`` for rollback.
        """
        self.step = "prepare slip item"
        try:
            self._issue_item(item, item_number)
        except Exception as e:
            raise PartialWriteFailure(
                self.step, item["property_number"], e
            ) from e

    def _issue_item(self, item, item_number):
        store = self.store
        slip = self.slip
        date_issued = self.header["date_issued"]
        quantity = item["quantity"] or 1
        unit_cost = item["unit_cost"] or Decimal("0")
        total_cost = unit_cost * quantity
        description = describe_item(item)
        estimate = calculate_estimated_useful_life(
            description, unit_cost, item.get("category")
        )

        self.step = "create slip item"
        slip_item = self.log.perform(
            f"slip item {item['property_number']}",
            lambda: store.insert(
                "custodian_slip_items",
                {
                    "slip_id": slip["id"],
                    "inventory_item_id": item["id"],
                    "property_number": item["property_number"],
                    "description": description,
                    "quantity": quantity,
                    "unit": item.get("unit_of_measure") or "",
                    "unit_cost": unit_cost,
                    "total_cost": total_cost,
                    "amount": total_cost,
                    "item_number": item_number,
                    "estimated_useful_life": str(estimate),
                    "date_issued": date_issued,
                    "property_card_entry_id": None,
                },
            ),
            lambda row: store.delete("custodian_slip_items", row["id"]),
        )

        self.step = "locate property card"
        card = get_card_for_item(item["id"], store=store)
        if card is None:
            raise PropertyCardMissing(item["property_number"])

        if latest_entry(card["id"], store=store) is None:
            self.step = "post opening receipt"
            self.log.perform(
                f"opening receipt {item['property_number']}",
                lambda: add_receipt(
                    card["id"],
                    date=item.get("date_acquired") or date_issued,
                    quantity=quantity,
                    unit_cost=unit_cost,
                    reference=item["property_number"],
                    remarks="Opening balance",
                    store=store,
                ),
                lambda row: store.delete("property_card_entries", row["id"]),
            )

        self.step = "post issue entry"
        entry = self.log.perform(
            f"issue entry {item['property_number']}",
            lambda: add_issue(
                card["id"],
                date=date_issued,
                quantity=quantity,
                reference=slip["slip_number"],
                office_officer=self.officer,
                related_slip_id=slip["id"],
                remarks=f"Issued via ICS {slip['slip_number']}",
                store=store,
            ),
            lambda row: store.delete("property_card_entries", row["id"]),
        )

        self.step = "assign inventory item"
        previous = {field: item[field] for field in ASSIGNMENT_FIELDS}
        self.log.perform(
            f"assignment {item['property_number']}",
            lambda: store.update(
                "inventory_items",
                item["id"],
                {
                    "custodian": self.header["custodian_name"],
                    "custodian_position": self.header["designation"],
                    "assignment_status": "assigned",
                    "assigned_date": date_issued,
                    "ics_number": slip["slip_number"],
                },
            ),
            lambda _row: store.update("inventory_items", item["id"], previous),
        )

        self.step = "link property card entry"
        store.update(
            "custodian_slip_items",
            slip_item["id"],
            {"property_card_entry_id": entry["id"]},
        )

    def rollback(self):
        number = self.slip["slip_number"] if self.slip else "(unsaved)"
        logger.warning(
            "Rolling back custodian slip %s (%d write(s))",
            number,
            len(self.log),
        )
        failures = self.log.rollback()
        if failures:
            logger.error(
                "Rollback of slip %s left %d write(s) in place: %s",
                number,
                len(failures),
                ", ".join(description for description, _ in failures),
            )


def create_custodian_slip(
    inventory_item_ids,
    *,
    custodian_name,
    designation="",
    office="",
    date_issued=None,
    issued_by="",
    received_by="",
    store=None,
):
    """Issue inventory items to a custodian.

    Items are validated as a whole first, then one draft slip is created
    per value category. Returns the slip (a dict with its ``items``) when
    a single category was involved, or the list of slips in category
    order otherwise.

    Any failure after validation undoes every write made by this call
    before the error is raised.
    """
    store = store or get_default_store()
    if not inventory_item_ids:
        raise ValueError("No inventory items provided for the custodian slip.")

    header = {
        "custodian_name": custodian_name,
        "designation": designation or "",
        "office": office or "",
        "date_issued": date_issued or timezone.localdate(),
        "issued_by": issued_by or "",
        "received_by": received_by or "",
    }

    items = validate_items(inventory_item_ids, store)
    groups = group_by_sub_category(items)

    committed = []
    slips = []
    for sub_category, members in groups.items():
        issue = _SlipIssue(store, sub_category, members, header)
        try:
            slips.append(issue.run())
        except Exception:
            issue.rollback()
            for done in reversed(committed):
                done.rollback()
            raise
        committed.append(issue)

    if len(slips) == 1:
        return slips[0]
    return slips


def delete_custodian_slip(slip_id, *, override=False, store=None) -> dict:
    """Delete a slip and release the items it assigned.

    Completed slips are refused with ImmutableSlip unless ``override``.
    Items are only released while they still point at this slip.
    """
    store = store or get_default_store()
    slip = store.get("custodian_slips", slip_id)
    if slip is None:
        raise SlipNotFound(slip_id)
    if slip["slip_status"] in CustodianSlip.FINALIZED_STATUSES and not override:
        raise ImmutableSlip(slip["slip_number"], slip["slip_status"])

    released = 0
    for slip_item in store.select("custodian_slip_items", {"slip_id": slip_id}):
        item = store.get("inventory_items", slip_item["inventory_item_id"])
        if item is None:
            continue
        if item["ics_number"] not in (None, slip["slip_number"]):
            logger.warning(
                "Not releasing %s: it is now held under %s",
                item["property_number"],
                item["ics_number"],
            )
            continue
        store.update("inventory_items", item["id"], RELEASED)
        released += 1

    entries = store.delete_where(
        "property_card_entries", {"related_slip_id": slip_id}
    )
    store.delete_where("custodian_slip_items", {"slip_id": slip_id})
    store.delete("custodian_slips", slip_id)

    logger.info(
        "Deleted custodian slip %s: released %d item(s), removed %d "
        "property card entr(ies)",
        slip["slip_number"],
        released,
        entries,
    )
    return {
        "slip_number": slip["slip_number"],
        "released": released,
        "entries_removed": entries,
    }
