"""Tests for intake and the property card ledger."""

from datetime import date
from decimal import Decimal

import pytest

from django.core.exceptions import ValidationError

from inventory.exceptions import ExhaustedRetries, ItemNotFound
from inventory.services.intake import (
    create_property_card,
    describe_item,
    register_inventory_item,
)
from inventory.services.property_cards import (
    add_issue,
    add_receipt,
    current_balance,
    get_card_for_item,
    get_entries,
    latest_entry,
)
from inventory.tests.helpers import RacingStore


class TestRegisterInventoryItem:
    def test_small_value_item(self, memory_store):
        item = register_inventory_item(
            unit_cost="1250.50",
            quantity=4,
            description="Steel filing cabinet",
            year=2025,
            store=memory_store,
        )
        assert item["property_number"] == "SPLV-2025-0001"
        assert item["sub_category"] == "small_value"
        assert item["total_cost"] == Decimal("5002.00")
        assert item["assignment_status"] == "available"
        assert item["custodian"] is None
        assert item["ics_number"] is None

    def test_high_value_item(self, memory_store):
        item = register_inventory_item(
            unit_cost=Decimal("5000.01"), year=2025, store=memory_store
        )
        assert item["property_number"] == "SPHV-2025-0001"
        assert item["sub_category"] == "high_value"

    def test_threshold_follows_settings(self, memory_store, settings):
        settings.SMALL_VALUE_THRESHOLD = 15000
        item = register_inventory_item(
            unit_cost="12000", year=2025, store=memory_store
        )
        assert item["property_number"].startswith("SPLV-")

    def test_numbers_continue_sequence(self, memory_store):
        for _ in range(3):
            item = register_inventory_item(
                unit_cost="100", year=2025, store=memory_store
            )
        assert item["property_number"] == "SPLV-2025-0003"

    def test_conflict_mints_new_number(self, memory_store):
        def competitor(store, values):
            store.insert(
                "inventory_items",
                {"property_number": values["property_number"]},
            )

        racing = RacingStore(memory_store, "inventory_items", competitor)
        item = register_inventory_item(unit_cost="100", year=2025, store=racing)
        assert item["property_number"] == "SPLV-2025-0002"

    def test_persistent_conflict_exhausts(self, memory_store, settings):
        settings.SEQUENCE_MAX_ATTEMPTS = 3

        def competitor(store, values):
            store.insert(
                "inventory_items",
                {"property_number": values["property_number"]},
            )

        racing = RacingStore(
            memory_store, "inventory_items", competitor, times=3
        )
        with pytest.raises(ExhaustedRetries, match="3 attempts"):
            register_inventory_item(unit_cost="100", year=2025, store=racing)

    def test_registers_in_database(self, db):
        from inventory.models import InventoryItem

        item = register_inventory_item(
            unit_cost="75000", description="Laptop computer", year=2025
        )
        stored = InventoryItem.objects.get(pk=item["id"])
        assert stored.property_number == "SPHV-2025-0001"
        assert stored.total_cost == Decimal("75000.00")


class TestDescribeItem:
    def test_prefers_description(self):
        assert describe_item({"description": " Desk ", "brand": "Acme"}) == "Desk"

    def test_falls_back_to_brand_and_model(self):
        item = {"description": "", "brand": "Acme", "model_name": "X200"}
        assert describe_item(item) == "Acme X200"

    def test_brand_only(self):
        assert describe_item({"brand": "Acme"}) == "Acme"


class TestCreatePropertyCard:
    def test_opens_card_with_receipt(self, memory_store, settings):
        settings.ENTITY_NAME = "Province of Laguna"
        item = memory_store.insert(
            "inventory_items",
            {
                "property_number": "SPLV-2025-0001",
                "description": "Office table",
                "quantity": 3,
                "unit_cost": Decimal("2000.00"),
                "date_acquired": date(2025, 1, 15),
            },
        )

        card = create_property_card(item["id"], store=memory_store)

        assert card["property_number"] == "SPLV-2025-0001"
        assert card["entity_name"] == "Province of Laguna"
        assert card["fund_cluster"] == "01"
        entries = get_entries(card["id"], store=memory_store)
        assert len(entries) == 1
        assert entries[0]["receipt_qty"] == 3
        assert entries[0]["balance_qty"] == 3
        assert entries[0]["amount"] == Decimal("6000.00")
        assert entries[0]["date"] == date(2025, 1, 15)
        assert entries[0]["remarks"] == "Initial receipt"

    def test_without_receipt(self, memory_store, add_item):
        item = add_item(card=False)
        card = create_property_card(
            item["id"], initial_receipt=False, store=memory_store
        )
        assert get_entries(card["id"], store=memory_store) == []
        assert current_balance(card["id"], store=memory_store) == 0

    def test_existing_card_returned(self, memory_store, add_item):
        item = add_item()
        existing = get_card_for_item(item["id"], store=memory_store)
        card = create_property_card(item["id"], store=memory_store)
        assert card["id"] == existing["id"]
        assert len(get_entries(card["id"], store=memory_store)) == 1

    def test_missing_item(self, memory_store):
        with pytest.raises(ItemNotFound):
            create_property_card(12345, store=memory_store)

    def test_long_description_truncated(self, db):
        from inventory.factories import InventoryItemFactory
        from inventory.models import PropertyCard

        item = InventoryItemFactory(description="x" * 250)
        card = create_property_card(item.pk)
        stored = PropertyCard.objects.get(pk=card["id"])
        assert len(stored.semi_expendable_property) == 200
        assert len(stored.description) == 250


class TestLedger:
    def _card(self, memory_store, add_item):
        item = add_item(card=False)
        return create_property_card(
            item["id"], initial_receipt=False, store=memory_store
        )

    def test_balance_chain(self, memory_store, add_item):
        card = self._card(memory_store, add_item)
        add_receipt(
            card["id"],
            date=date(2025, 1, 1),
            quantity=10,
            unit_cost="100",
            store=memory_store,
        )
        quantities = [3, 4, 2]
        for qty in quantities:
            add_issue(
                card["id"],
                date=date(2025, 2, 1),
                quantity=qty,
                reference="ICS-SPLV-2025-0001",
                store=memory_store,
            )

        balances = [
            e["balance_qty"] for e in get_entries(card["id"], store=memory_store)
        ]
        assert balances == [10, 7, 3, 1]
        assert current_balance(card["id"], store=memory_store) == max(
            0, 10 - sum(quantities)
        )

    def test_balance_never_negative(self, memory_store, add_item):
        card = self._card(memory_store, add_item)
        add_receipt(
            card["id"],
            date=date(2025, 1, 1),
            quantity=2,
            unit_cost="100",
            store=memory_store,
        )
        entry = add_issue(
            card["id"],
            date=date(2025, 2, 1),
            quantity=5,
            reference="ICS-SPLV-2025-0001",
            store=memory_store,
        )
        assert entry["balance_qty"] == 0

    def test_receipts_accumulate(self, memory_store, add_item):
        card = self._card(memory_store, add_item)
        for qty in (2, 3):
            add_receipt(
                card["id"],
                date=date(2025, 1, 1),
                quantity=qty,
                unit_cost="250.00",
                store=memory_store,
            )
        last = latest_entry(card["id"], store=memory_store)
        assert last["balance_qty"] == 5
        assert last["total_cost"] == Decimal("750.00")

    def test_issue_requires_receipt(self, memory_store, add_item):
        card = self._card(memory_store, add_item)
        with pytest.raises(ValidationError, match="no receipt entry"):
            add_issue(
                card["id"],
                date=date(2025, 2, 1),
                quantity=1,
                reference="ICS-SPLV-2025-0001",
                store=memory_store,
            )

    def test_issue_entry_fields(self, memory_store, add_item):
        item = add_item()
        card = get_card_for_item(item["id"], store=memory_store)
        entry = add_issue(
            card["id"],
            date=date(2025, 2, 1),
            quantity=1,
            reference="ICS-SPLV-2025-0007",
            office_officer="Ana Cruz (Clerk)",
            related_slip_id=7,
            store=memory_store,
        )
        assert entry["issue_item_no"] == "ICS-SPLV-2025-0007"
        assert entry["receipt_qty"] == 0
        assert entry["amount"] == Decimal("0")
        assert entry["related_slip_id"] == 7
