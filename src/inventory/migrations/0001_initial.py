import django.core.validators
import django.db.models.deletion
from decimal import Decimal

from django.db import migrations, models

SUB_CATEGORY_CHOICES = [
    ("small_value", "Small Value Expendable"),
    ("high_value", "High Value Expendable"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "property_number",
                    models.CharField(max_length=50, unique=True),
                ),
                ("description", models.TextField(blank=True)),
                ("brand", models.CharField(blank=True, max_length=100)),
                ("model_name", models.CharField(blank=True, max_length=100)),
                (
                    "serial_number",
                    models.CharField(blank=True, max_length=100),
                ),
                (
                    "unit_of_measure",
                    models.CharField(default="unit", max_length=30),
                ),
                ("quantity", models.PositiveIntegerField(default=1)),
                (
                    "unit_cost",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=12,
                        validators=[
                            django.core.validators.MinValueValidator(0)
                        ],
                    ),
                ),
                (
                    "total_cost",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=14
                    ),
                ),
                (
                    "category",
                    models.CharField(default="Semi-Expendable", max_length=100),
                ),
                (
                    "sub_category",
                    models.CharField(
                        blank=True, choices=SUB_CATEGORY_CHOICES, max_length=20
                    ),
                ),
                (
                    "condition",
                    models.CharField(
                        choices=[
                            ("serviceable", "Serviceable"),
                            ("unserviceable", "Unserviceable"),
                            ("for_repair", "For Repair"),
                            ("lost", "Lost"),
                            ("stolen", "Stolen"),
                            ("damaged", "Damaged"),
                            ("destroyed", "Destroyed"),
                        ],
                        default="serviceable",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("transferred", "Transferred"),
                            ("disposed", "Disposed"),
                            ("missing", "Missing"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "assignment_status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("assigned", "Assigned"),
                        ],
                        default="available",
                        max_length=20,
                    ),
                ),
                (
                    "custodian",
                    models.CharField(blank=True, max_length=200, null=True),
                ),
                (
                    "custodian_position",
                    models.CharField(blank=True, max_length=200, null=True),
                ),
                ("assigned_date", models.DateField(blank=True, null=True)),
                (
                    "ics_number",
                    models.CharField(
                        blank=True,
                        help_text=(
                            "Number of the custodian slip currently "
                            "holding the item"
                        ),
                        max_length=50,
                        null=True,
                    ),
                ),
                ("date_acquired", models.DateField(blank=True, null=True)),
                (
                    "estimated_useful_life",
                    models.CharField(blank=True, max_length=50),
                ),
                ("remarks", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["property_number"],
                "indexes": [
                    models.Index(
                        fields=["assignment_status"],
                        name="idx_item_assignment_status",
                    ),
                    models.Index(
                        fields=["custodian"], name="idx_item_custodian"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("assignment_status", "available"),
                                ("custodian__isnull", True),
                                ("ics_number__isnull", True),
                            ),
                            models.Q(
                                ("assignment_status", "assigned"),
                                ("custodian__isnull", False),
                                ("ics_number__isnull", False),
                            ),
                            _connector="OR",
                        ),
                        name="item_assignment_fields_consistent",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustodianSlip",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("slip_number", models.CharField(max_length=50, unique=True)),
                (
                    "sub_category",
                    models.CharField(
                        blank=True, choices=SUB_CATEGORY_CHOICES, max_length=20
                    ),
                ),
                ("custodian_name", models.CharField(max_length=200)),
                ("designation", models.CharField(blank=True, max_length=200)),
                ("office", models.CharField(blank=True, max_length=200)),
                ("date_issued", models.DateField()),
                ("issued_by", models.CharField(blank=True, max_length=200)),
                ("received_by", models.CharField(blank=True, max_length=200)),
                (
                    "slip_status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("issued", "Issued"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-date_issued", "-slip_number"],
                "indexes": [
                    models.Index(
                        fields=["custodian_name"],
                        name="idx_slip_custodian_name",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PropertyCard",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("entity_name", models.CharField(blank=True, max_length=200)),
                ("fund_cluster", models.CharField(blank=True, max_length=100)),
                (
                    "semi_expendable_property",
                    models.CharField(blank=True, max_length=200),
                ),
                ("property_number", models.CharField(max_length=50)),
                ("description", models.TextField(blank=True)),
                ("date_acquired", models.DateField(blank=True, null=True)),
                ("remarks", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "inventory_item",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="property_card",
                        to="inventory.inventoryitem",
                    ),
                ),
            ],
            options={
                "ordering": ["property_number"],
            },
        ),
        migrations.CreateModel(
            name="PropertyCardEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("date", models.DateField()),
                ("reference", models.CharField(blank=True, max_length=100)),
                ("receipt_qty", models.PositiveIntegerField(default=0)),
                (
                    "unit_cost",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=12
                    ),
                ),
                (
                    "total_cost",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=14
                    ),
                ),
                (
                    "issue_item_no",
                    models.CharField(blank=True, max_length=50),
                ),
                ("issue_qty", models.PositiveIntegerField(default=0)),
                (
                    "office_officer",
                    models.CharField(blank=True, max_length=300),
                ),
                ("balance_qty", models.PositiveIntegerField(default=0)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=14
                    ),
                ),
                ("remarks", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "property_card",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="entries",
                        to="inventory.propertycard",
                    ),
                ),
                (
                    "related_slip",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="property_card_entries",
                        to="inventory.custodianslip",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "property card entries",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="CustodianSlipItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("property_number", models.CharField(max_length=50)),
                ("description", models.TextField(blank=True)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit", models.CharField(blank=True, max_length=30)),
                (
                    "unit_cost",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=12
                    ),
                ),
                (
                    "total_cost",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=14
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0"), max_digits=14
                    ),
                ),
                ("item_number", models.PositiveIntegerField()),
                (
                    "estimated_useful_life",
                    models.CharField(blank=True, max_length=50),
                ),
                ("date_issued", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "inventory_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="slip_items",
                        to="inventory.inventoryitem",
                    ),
                ),
                (
                    "property_card_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="slip_items",
                        to="inventory.propertycardentry",
                    ),
                ),
                (
                    "slip",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="inventory.custodianslip",
                    ),
                ),
            ],
            options={
                "ordering": ["slip", "item_number"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("slip", "item_number"),
                        name="unique_item_number_per_slip",
                    ),
                ],
            },
        ),
    ]
