"""Shared pytest fixtures for inventory tests."""

from datetime import date
from decimal import Decimal

import pytest

from django.conf import settings

# Plain static storage for tests (no manifest needed for admin pages)
settings.STORAGES["staticfiles"] = {
    "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
}

settings.SMALL_VALUE_THRESHOLD = 5000
settings.SEQUENCE_MAX_ATTEMPTS = 10
settings.ENTITY_NAME = "Municipal Government"
settings.DEFAULT_FUND_CLUSTER = "01"


@pytest.fixture
def password():
    return "testpass123!"


@pytest.fixture
def user(db, password):
    from inventory.factories import UserFactory

    return UserFactory(
        username="testuser",
        email="test@example.com",
        password=password,
    )


@pytest.fixture
def admin_user(db, password):
    from inventory.factories import UserFactory

    return UserFactory(
        username="admin",
        email="admin@example.com",
        password=password,
        is_staff=True,
        is_superuser=True,
    )


@pytest.fixture
def admin_client(client, admin_user, password):
    client.login(username=admin_user.username, password=password)
    return client


@pytest.fixture
def issue_date():
    return date(2025, 3, 14)


# --- ORM-backed fixtures ---


@pytest.fixture
def small_item(db):
    """Small value item with an opened property card (balance 5)."""
    from inventory.factories import InventoryItemFactory
    from inventory.services.intake import create_property_card

    item = InventoryItemFactory(
        description="Office chair",
        unit_cost=Decimal("2500.00"),
        quantity=5,
    )
    create_property_card(item.pk)
    return item


@pytest.fixture
def second_small_item(db):
    from inventory.factories import InventoryItemFactory
    from inventory.services.intake import create_property_card

    item = InventoryItemFactory(
        description="Filing cabinet",
        unit_cost=Decimal("4800.00"),
    )
    create_property_card(item.pk)
    return item


@pytest.fixture
def high_item(db):
    from inventory.factories import InventoryItemFactory
    from inventory.services.intake import create_property_card

    item = InventoryItemFactory(
        description="Desktop computer",
        unit_cost=Decimal("45000.00"),
    )
    create_property_card(item.pk)
    return item


@pytest.fixture
def issued_slip(small_item, issue_date):
    """Draft slip holding ``small_item``, created through the workflow."""
    from inventory.models import CustodianSlip
    from inventory.services.slips import create_custodian_slip

    result = create_custodian_slip(
        [small_item.pk],
        custodian_name="Maria Santos",
        designation="Supply Officer",
        office="General Services Office",
        date_issued=issue_date,
    )
    return CustodianSlip.objects.get(pk=result["id"])


# --- In-memory store fixtures ---


@pytest.fixture
def memory_store():
    from inventory.tests.helpers import MemoryStore

    return MemoryStore()


@pytest.fixture
def add_item(memory_store):
    """Insert an item (with a property card by default) into the memory store."""
    counter = {"n": 0}

    def _add(unit_cost="1500.00", *, card=True, receipt=True, **fields):
        from inventory.services.categories import (
            classify_unit_cost,
            property_prefix,
        )
        from inventory.services.intake import create_property_card

        counter["n"] += 1
        unit_cost = Decimal(unit_cost)
        quantity = fields.pop("quantity", 1)
        sub_category = classify_unit_cost(unit_cost)
        item = memory_store.insert(
            "inventory_items",
            {
                "property_number": (
                    f"{property_prefix(sub_category)}-2019-{counter['n']:04d}"
                ),
                "description": f"Item {counter['n']}",
                "unit_cost": unit_cost,
                "quantity": quantity,
                "total_cost": unit_cost * quantity,
                "sub_category": sub_category,
                "date_acquired": date(2024, 1, 10),
                **fields,
            },
        )
        if card:
            create_property_card(
                item["id"], initial_receipt=receipt, store=memory_store
            )
        return item

    return _add
