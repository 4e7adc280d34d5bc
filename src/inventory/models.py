"""Models for semi-expendable property custody."""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from .services.categories import SUB_CATEGORY_CHOICES, classify_unit_cost


class InventoryItem(models.Model):
    """Trackable physical asset held on a property card."""

    CONDITION_CHOICES = [
        ("serviceable", "Serviceable"),
        ("unserviceable", "Unserviceable"),
        ("for_repair", "For Repair"),
        ("lost", "Lost"),
        ("stolen", "Stolen"),
        ("damaged", "Damaged"),
        ("destroyed", "Destroyed"),
    ]

    STATUS_CHOICES = [
        ("active", "Active"),
        ("transferred", "Transferred"),
        ("disposed", "Disposed"),
        ("missing", "Missing"),
    ]

    ASSIGNMENT_CHOICES = [
        ("available", "Available"),
        ("assigned", "Assigned"),
    ]

    property_number = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    brand = models.CharField(max_length=100, blank=True)
    model_name = models.CharField(max_length=100, blank=True)
    serial_number = models.CharField(max_length=100, blank=True)
    unit_of_measure = models.CharField(max_length=30, default="unit")
    quantity = models.PositiveIntegerField(default=1)
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(0)],
    )
    total_cost = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0")
    )
    category = models.CharField(max_length=100, default="Semi-Expendable")
    sub_category = models.CharField(
        max_length=20, choices=SUB_CATEGORY_CHOICES, blank=True
    )
    condition = models.CharField(
        max_length=20, choices=CONDITION_CHOICES, default="serviceable"
    )
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default="active"
    )
    assignment_status = models.CharField(
        max_length=20, choices=ASSIGNMENT_CHOICES, default="available"
    )
    custodian = models.CharField(max_length=200, null=True, blank=True)
    custodian_position = models.CharField(
        max_length=200, null=True, blank=True
    )
    assigned_date = models.DateField(null=True, blank=True)
    ics_number = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text=(
            "Number of the custodian slip or transfer the item is currently "
            "held under"
        ),
    )
    date_acquired = models.DateField(null=True, blank=True)
    estimated_useful_life = models.CharField(max_length=50, blank=True)
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["property_number"]
        indexes = [
            models.Index(
                fields=["assignment_status"],
                name="idx_item_assignment_status",
            ),
            models.Index(fields=["custodian"], name="idx_item_custodian"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(
                        assignment_status="available",
                        custodian__isnull=True,
                        ics_number__isnull=True,
                    )
                    | models.Q(
                        assignment_status="assigned",
                        custodian__isnull=False,
                        ics_number__isnull=False,
                    )
                ),
                name="item_assignment_fields_consistent",
            ),
        ]

    def __str__(self):
        return f"{self.property_number} {self.display_description}".strip()

    @property
    def display_description(self):
        """Description, falling back to brand and model."""
        if self.description:
            return self.description
        if self.model_name:
            return f"{self.brand} {self.model_name}".strip()
        return self.brand

    @property
    def is_assigned(self):
        return self.assignment_status == "assigned"

    def save(self, *args, **kwargs):
        self.total_cost = Decimal(self.quantity or 0) * (
            self.unit_cost or Decimal("0")
        )
        self.sub_category = classify_unit_cost(self.unit_cost)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and {"unit_cost", "quantity"} & set(
            update_fields
        ):
            kwargs["update_fields"] = {
                *update_fields,
                "total_cost",
                "sub_category",
            }
        super().save(*args, **kwargs)


class PropertyCard(models.Model):
    """Ledger header for one inventory item."""

    inventory_item = models.OneToOneField(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="property_card",
    )
    entity_name = models.CharField(max_length=200, blank=True)
    fund_cluster = models.CharField(max_length=100, blank=True)
    semi_expendable_property = models.CharField(max_length=200, blank=True)
    property_number = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    date_acquired = models.DateField(null=True, blank=True)
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["property_number"]

    def __str__(self):
        return f"Property card {self.property_number}"


class CustodianSlip(models.Model):
    """Issuance of one value category of items to one custodian."""

    STATUS_CHOICES = [
        ("draft", "Draft"),
        ("issued", "Issued"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
    ]

    # Valid state transitions: from_status -> [to_statuses]
    VALID_TRANSITIONS = {
        "draft": ["issued", "cancelled"],
        "issued": ["completed", "cancelled"],
        "completed": [],
        "cancelled": [],
    }

    # Officially confirmed slips; deleting one needs an explicit override.
    FINALIZED_STATUSES = ("completed",)

    slip_number = models.CharField(max_length=50, unique=True)
    sub_category = models.CharField(
        max_length=20, choices=SUB_CATEGORY_CHOICES, blank=True
    )
    custodian_name = models.CharField(max_length=200)
    designation = models.CharField(max_length=200, blank=True)
    office = models.CharField(max_length=200, blank=True)
    date_issued = models.DateField()
    issued_by = models.CharField(max_length=200, blank=True)
    received_by = models.CharField(max_length=200, blank=True)
    slip_status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default="draft"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date_issued", "-slip_number"]
        indexes = [
            models.Index(
                fields=["custodian_name"], name="idx_slip_custodian_name"
            ),
        ]

    def __str__(self):
        return f"{self.slip_number} - {self.custodian_name}"

    @property
    def is_finalized(self):
        return self.slip_status in self.FINALIZED_STATUSES

    def can_transition_to(self, new_status):
        return new_status in self.VALID_TRANSITIONS.get(self.slip_status, [])


class Transfer(models.Model):
    """Movement of assigned items from one custodian to another."""

    TYPE_CHOICES = [
        ("permanent", "Permanent"),
        ("temporary", "Temporary"),
        ("loan", "Loan"),
    ]

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("in_transit", "In Transit"),
        ("completed", "Completed"),
        ("rejected", "Rejected"),
    ]

    # Valid state transitions: from_status -> [to_statuses]
    VALID_TRANSITIONS = {
        "pending": ["in_transit", "rejected"],
        "in_transit": ["completed", "rejected"],
        "completed": [],
        "rejected": [],
    }

    OPEN_STATUSES = ("pending", "in_transit")

    transfer_number = models.CharField(max_length=50, unique=True)
    transfer_type = models.CharField(
        max_length=20, choices=TYPE_CHOICES, default="permanent"
    )
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default="pending"
    )
    from_custodian = models.CharField(max_length=200)
    from_office = models.CharField(max_length=200, blank=True)
    to_custodian = models.CharField(max_length=200)
    to_designation = models.CharField(max_length=200, blank=True)
    to_office = models.CharField(max_length=200, blank=True)
    requested_by = models.CharField(max_length=200, blank=True)
    approved_by = models.CharField(max_length=200, blank=True)
    date_requested = models.DateField()
    date_approved = models.DateField(null=True, blank=True)
    date_completed = models.DateField(null=True, blank=True)
    reason = models.TextField(blank=True)
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date_requested", "-transfer_number"]
        indexes = [
            models.Index(fields=["status"], name="idx_transfer_status"),
            models.Index(
                fields=["to_custodian"], name="idx_transfer_to_custodian"
            ),
        ]

    def __str__(self):
        return (
            f"{self.transfer_number}: {self.from_custodian} -> "
            f"{self.to_custodian}"
        )

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES

    def can_transition_to(self, new_status):
        return new_status in self.VALID_TRANSITIONS.get(self.status, [])


class PropertyCardEntry(models.Model):
    """Append-only ledger row under a property card."""

    property_card = models.ForeignKey(
        PropertyCard, on_delete=models.CASCADE, related_name="entries"
    )
    date = models.DateField()
    reference = models.CharField(max_length=100, blank=True)
    receipt_qty = models.PositiveIntegerField(default=0)
    unit_cost = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0")
    )
    total_cost = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0")
    )
    issue_item_no = models.CharField(max_length=50, blank=True)
    issue_qty = models.PositiveIntegerField(default=0)
    office_officer = models.CharField(max_length=300, blank=True)
    balance_qty = models.PositiveIntegerField(default=0)
    amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0")
    )
    remarks = models.TextField(blank=True)
    related_slip = models.ForeignKey(
        CustodianSlip,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="property_card_entries",
    )
    related_transfer = models.ForeignKey(
        Transfer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="property_card_entries",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "property card entries"

    def __str__(self):
        return f"{self.property_card.property_number} {self.date} {self.reference}"

    @property
    def is_receipt(self):
        return self.receipt_qty > 0

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValidationError(
                "Property card entries are append-only and cannot be "
                "modified."
            )
        super().save(*args, **kwargs)


class CustodianSlipItem(models.Model):
    """One inventory item listed on a custodian slip."""

    slip = models.ForeignKey(
        CustodianSlip, on_delete=models.CASCADE, related_name="items"
    )
    inventory_item = models.ForeignKey(
        InventoryItem, on_delete=models.PROTECT, related_name="slip_items"
    )
    property_number = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    quantity = models.PositiveIntegerField(default=1)
    unit = models.CharField(max_length=30, blank=True)
    unit_cost = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0")
    )
    total_cost = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0")
    )
    amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0")
    )
    item_number = models.PositiveIntegerField()
    estimated_useful_life = models.CharField(max_length=50, blank=True)
    date_issued = models.DateField()
    property_card_entry = models.ForeignKey(
        PropertyCardEntry,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="slip_items",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["slip", "item_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["slip", "item_number"],
                name="unique_item_number_per_slip",
            ),
        ]

    def __str__(self):
        return f"{self.slip.slip_number} #{self.item_number} {self.property_number}"



class TransferItem(models.Model):
    """One inventory item moved by a transfer."""

    transfer = models.ForeignKey(
        Transfer, on_delete=models.CASCADE, related_name="items"
    )
    inventory_item = models.ForeignKey(
        InventoryItem, on_delete=models.PROTECT, related_name="transfer_items"
    )
    property_number = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    quantity = models.PositiveIntegerField(default=1)
    condition = models.CharField(
        max_length=20, choices=InventoryItem.CONDITION_CHOICES
    )
    property_card_entry = models.ForeignKey(
        PropertyCardEntry,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transfer_items",
        help_text="Issue entry posted to the new custodian on completion",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["transfer", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["transfer", "inventory_item"],
                name="unique_item_per_transfer",
            ),
        ]

    def __str__(self):
        return f"{self.transfer.transfer_number} {self.property_number}"
