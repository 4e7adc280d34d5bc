"""Factory Boy factories for inventory test data generation."""

from decimal import Decimal

import factory
from factory.django import DjangoModelFactory

from django.utils import timezone

from .services.categories import classify_unit_cost, property_prefix


class UserFactory(DjangoModelFactory):
    """Factory for the auth User model."""

    class Meta:
        model = "auth.User"
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    is_active = True

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        pwd = extracted or "testpass123!"
        self.set_password(pwd)
        if create:
            self.save(update_fields=["password"])


class InventoryItemFactory(DjangoModelFactory):
    """Factory for InventoryItem; available and serviceable by default."""

    class Meta:
        model = "inventory.InventoryItem"

    # Fixed past year so minted numbers in tests never collide with these
    property_number = factory.LazyAttributeSequence(
        lambda o, n: (
            f"{property_prefix(classify_unit_cost(o.unit_cost))}"
            f"-2019-{n + 1:04d}"
        )
    )
    description = factory.Faker("sentence", nb_words=3)
    brand = factory.Faker("company")
    unit_of_measure = "unit"
    quantity = 1
    unit_cost = Decimal("1500.00")
    category = "Office Equipment"
    condition = "serviceable"
    status = "active"
    assignment_status = "available"
    date_acquired = factory.LazyFunction(timezone.localdate)


class PropertyCardFactory(DjangoModelFactory):
    """Factory for PropertyCard (no entries)."""

    class Meta:
        model = "inventory.PropertyCard"

    inventory_item = factory.SubFactory(InventoryItemFactory)
    entity_name = "Municipal Government"
    fund_cluster = "01"
    semi_expendable_property = factory.LazyAttribute(
        lambda o: o.inventory_item.description[:200]
    )
    property_number = factory.LazyAttribute(
        lambda o: o.inventory_item.property_number
    )
    description = factory.LazyAttribute(lambda o: o.inventory_item.description)
    date_acquired = factory.LazyAttribute(
        lambda o: o.inventory_item.date_acquired
    )


class PropertyCardEntryFactory(DjangoModelFactory):
    """Factory for a receipt entry on a property card."""

    class Meta:
        model = "inventory.PropertyCardEntry"

    property_card = factory.SubFactory(PropertyCardFactory)
    date = factory.LazyFunction(timezone.localdate)
    reference = factory.LazyAttribute(lambda o: o.property_card.property_number)
    receipt_qty = 1
    unit_cost = Decimal("1500.00")
    total_cost = Decimal("1500.00")
    balance_qty = 1
    amount = Decimal("1500.00")
    remarks = "Initial receipt"


class CustodianSlipFactory(DjangoModelFactory):
    """Factory for CustodianSlip."""

    class Meta:
        model = "inventory.CustodianSlip"

    slip_number = factory.Sequence(lambda n: f"ICS-SPLV-2019-{n + 1:04d}")
    sub_category = "small_value"
    custodian_name = factory.Faker("name")
    designation = "Administrative Officer"
    office = "General Services Office"
    date_issued = factory.LazyFunction(timezone.localdate)
    slip_status = "draft"


class CustodianSlipItemFactory(DjangoModelFactory):
    """Factory for CustodianSlipItem."""

    class Meta:
        model = "inventory.CustodianSlipItem"

    slip = factory.SubFactory(CustodianSlipFactory)
    inventory_item = factory.SubFactory(InventoryItemFactory)
    property_number = factory.LazyAttribute(
        lambda o: o.inventory_item.property_number
    )
    description = factory.LazyAttribute(lambda o: o.inventory_item.description)
    quantity = 1
    unit = "unit"
    unit_cost = factory.LazyAttribute(lambda o: o.inventory_item.unit_cost)
    total_cost = factory.LazyAttribute(lambda o: o.inventory_item.total_cost)
    amount = factory.LazyAttribute(lambda o: o.inventory_item.total_cost)
    item_number = factory.Sequence(lambda n: n + 1)
    estimated_useful_life = "5 years"
    date_issued = factory.LazyAttribute(lambda o: o.slip.date_issued)


class TransferFactory(DjangoModelFactory):
    """Factory for a pending Transfer (no items)."""

    class Meta:
        model = "inventory.Transfer"

    transfer_number = factory.Sequence(lambda n: f"PTR-2019-{n + 1:04d}")
    transfer_type = "permanent"
    status = "pending"
    from_custodian = factory.Faker("name")
    to_custodian = factory.Faker("name")
    to_designation = "Administrative Aide"
    date_requested = factory.LazyFunction(timezone.localdate)
    reason = "Reassignment"


class TransferItemFactory(DjangoModelFactory):
    """Factory for TransferItem."""

    class Meta:
        model = "inventory.TransferItem"

    transfer = factory.SubFactory(TransferFactory)
    inventory_item = factory.SubFactory(InventoryItemFactory)
    property_number = factory.LazyAttribute(
        lambda o: o.inventory_item.property_number
    )
    description = factory.LazyAttribute(lambda o: o.inventory_item.description)
    quantity = factory.LazyAttribute(lambda o: o.inventory_item.quantity)
    condition = factory.LazyAttribute(lambda o: o.inventory_item.condition)
