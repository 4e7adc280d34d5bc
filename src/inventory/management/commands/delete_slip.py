"""Management command to delete a custodian slip and release its items."""

from django.core.management.base import BaseCommand, CommandError

from inventory.exceptions import CustodyError
from inventory.models import CustodianSlip
from inventory.services.slips import delete_custodian_slip


class Command(BaseCommand):
    help = (
        "Delete a custodian slip by number, releasing its items and "
        "removing the property card entries it posted."
    )

    def add_arguments(self, parser):
        parser.add_argument("slip_number", help="e.g. ICS-SPLV-2025-0001")
        parser.add_argument(
            "--force",
            action="store_true",
            help="Also delete a completed slip.",
        )

    def handle(self, *args, **options):
        slip_number = options["slip_number"]
        try:
            slip = CustodianSlip.objects.get(slip_number=slip_number)
        except CustodianSlip.DoesNotExist:
            raise CommandError(f"Custodian slip {slip_number} not found.")

        try:
            result = delete_custodian_slip(slip.pk, override=options["force"])
        except CustodyError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(
            self.style.SUCCESS(
                f"Deleted {result['slip_number']}: "
                f"{result['released']} item(s) released, "
                f"{result['entries_removed']} property card entr(ies) "
                f"removed."
            )
        )
