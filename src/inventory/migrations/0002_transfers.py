import django.db.models.deletion

from django.db import migrations, models

CONDITION_CHOICES = [
    ("serviceable", "Serviceable"),
    ("unserviceable", "Unserviceable"),
    ("for_repair", "For Repair"),
    ("lost", "Lost"),
    ("stolen", "Stolen"),
    ("damaged", "Damaged"),
    ("destroyed", "Destroyed"),
]


class Migration(migrations.Migration):

    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="inventoryitem",
            name="ics_number",
            field=models.CharField(
                blank=True,
                help_text=(
                    "Number of the custodian slip or transfer the item is "
                    "currently held under"
                ),
                max_length=50,
                null=True,
            ),
        ),
        migrations.CreateModel(
            name="Transfer",
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
                    "transfer_number",
                    models.CharField(max_length=50, unique=True),
                ),
                (
                    "transfer_type",
                    models.CharField(
                        choices=[
                            ("permanent", "Permanent"),
                            ("temporary", "Temporary"),
                            ("loan", "Loan"),
                        ],
                        default="permanent",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_transit", "In Transit"),
                            ("completed", "Completed"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("from_custodian", models.CharField(max_length=200)),
                ("from_office", models.CharField(blank=True, max_length=200)),
                ("to_custodian", models.CharField(max_length=200)),
                (
                    "to_designation",
                    models.CharField(blank=True, max_length=200),
                ),
                ("to_office", models.CharField(blank=True, max_length=200)),
                ("requested_by", models.CharField(blank=True, max_length=200)),
                ("approved_by", models.CharField(blank=True, max_length=200)),
                ("date_requested", models.DateField()),
                ("date_approved", models.DateField(blank=True, null=True)),
                ("date_completed", models.DateField(blank=True, null=True)),
                ("reason", models.TextField(blank=True)),
                ("remarks", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-date_requested", "-transfer_number"],
                "indexes": [
                    models.Index(
                        fields=["status"], name="idx_transfer_status"
                    ),
                    models.Index(
                        fields=["to_custodian"],
                        name="idx_transfer_to_custodian",
                    ),
                ],
            },
        ),
        migrations.AddField(
            model_name="propertycardentry",
            name="related_transfer",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="property_card_entries",
                to="inventory.transfer",
            ),
        ),
        migrations.CreateModel(
            name="TransferItem",
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
                (
                    "condition",
                    models.CharField(choices=CONDITION_CHOICES, max_length=20),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "inventory_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transfer_items",
                        to="inventory.inventoryitem",
                    ),
                ),
                (
                    "property_card_entry",
                    models.ForeignKey(
                        blank=True,
                        help_text=(
                            "Issue entry posted to the new custodian on "
                            "completion"
                        ),
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transfer_items",
                        to="inventory.propertycardentry",
                    ),
                ),
                (
                    "transfer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="inventory.transfer",
                    ),
                ),
            ],
            options={
                "ordering": ["transfer", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("transfer", "inventory_item"),
                        name="unique_item_per_transfer",
                    ),
                ],
            },
        ),
    ]
