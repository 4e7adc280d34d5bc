"""Management command to issue inventory items to a custodian."""

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from inventory.exceptions import CustodyError
from inventory.models import InventoryItem
from inventory.services.slips import create_custodian_slip


class Command(BaseCommand):
    help = (
        "Issue inventory items, by property number, to a custodian. One "
        "custodian slip is created per value category."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "property_numbers",
            nargs="+",
            help="e.g. SPLV-2025-0001 SPHV-2025-0004",
        )
        parser.add_argument("--custodian", required=True)
        parser.add_argument("--designation", default="")
        parser.add_argument("--office", default="")
        parser.add_argument("--issued-by", default="")
        parser.add_argument(
            "--date",
            help="Date issued as YYYY-MM-DD (defaults to today).",
        )

    def handle(self, *args, **options):
        date_issued = None
        if options["date"]:
            try:
                date_issued = parse_date(options["date"])
            except ValueError:
                date_issued = None
            if date_issued is None:
                raise CommandError(f"'{options['date']}' is not a valid date.")

        numbers = list(dict.fromkeys(options["property_numbers"]))
        found = dict(
            InventoryItem.objects.filter(
                property_number__in=numbers
            ).values_list("property_number", "pk")
        )
        missing = [n for n in numbers if n not in found]
        if missing:
            raise CommandError(
                f"Inventory item(s) not found: {', '.join(missing)}."
            )

        try:
            result = create_custodian_slip(
                [found[n] for n in numbers],
                custodian_name=options["custodian"],
                designation=options["designation"],
                office=options["office"],
                date_issued=date_issued,
                issued_by=options["issued_by"],
            )
        except CustodyError as e:
            raise CommandError(str(e)) from e

        for slip in result if isinstance(result, list) else [result]:
            self.stdout.write(
                self.style.SUCCESS(
                    f"Created {slip['slip_number']} for "
                    f"{slip['custodian_name']}: {len(slip['items'])} item(s)."
                )
            )
