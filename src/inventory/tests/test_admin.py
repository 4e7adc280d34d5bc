"""Tests for the inventory admin."""

from django.urls import reverse
from django.utils import timezone

from inventory.models import CustodianSlip, InventoryItem, Transfer
from inventory.services.transfers import approve_transfer, create_transfer


class TestAdminPages:
    def test_changelists_load(self, admin_client, issued_slip):
        for name in (
            "inventory_inventoryitem",
            "inventory_propertycard",
            "inventory_custodianslip",
            "inventory_transfer",
            "auth_user",
        ):
            response = admin_client.get(reverse(f"admin:{name}_changelist"))
            assert response.status_code == 200, name

    def test_slip_change_page_lists_items(self, admin_client, issued_slip):
        url = reverse("admin:inventory_custodianslip_change", args=[issued_slip.pk])
        response = admin_client.get(url)
        assert response.status_code == 200
        item = issued_slip.items.get()
        assert item.property_number.encode() in response.content

    def test_property_card_change_page(self, admin_client, small_item):
        url = reverse(
            "admin:inventory_propertycard_change",
            args=[small_item.property_card.pk],
        )
        assert admin_client.get(url).status_code == 200

    def test_slips_cannot_be_added_directly(self, admin_client, db):
        response = admin_client.get(reverse("admin:inventory_custodianslip_add"))
        assert response.status_code == 403

    def test_add_item_mints_property_number(self, admin_client):
        response = admin_client.post(
            reverse("admin:inventory_inventoryitem_add"),
            {
                "property_number": "",
                "description": "Steel cabinet",
                "brand": "",
                "model_name": "",
                "serial_number": "",
                "category": "Furniture",
                "quantity": "2",
                "unit_of_measure": "unit",
                "unit_cost": "3500.00",
                "date_acquired": "",
                "estimated_useful_life": "",
                "condition": "serviceable",
                "status": "active",
                "remarks": "",
            },
        )
        assert response.status_code == 302
        item = InventoryItem.objects.get(description="Steel cabinet")
        year = timezone.localdate().year
        assert item.property_number == f"SPLV-{year}-0001"
        assert item.sub_category == "small_value"
        assert item.total_cost == 7000
        assert item.assignment_status == "available"


class TestSlipActions:
    def _post_action(self, client, action, slip):
        return client.post(
            reverse("admin:inventory_custodianslip_changelist"),
            {"action": action, "_selected_action": [slip.pk]},
            follow=True,
        )

    def test_mark_issued(self, admin_client, issued_slip):
        response = self._post_action(admin_client, "mark_issued", issued_slip)
        assert response.status_code == 200
        issued_slip.refresh_from_db()
        assert issued_slip.slip_status == "issued"

    def test_mark_completed_requires_issued(self, admin_client, issued_slip):
        response = self._post_action(admin_client, "mark_completed", issued_slip)
        assert response.status_code == 200
        assert b"Allowed transitions" in response.content
        issued_slip.refresh_from_db()
        assert issued_slip.slip_status == "draft"

    def test_delete_and_release(self, admin_client, issued_slip, small_item):
        response = self._post_action(
            admin_client, "delete_and_release", issued_slip
        )
        assert response.status_code == 200
        assert not CustodianSlip.objects.filter(pk=issued_slip.pk).exists()
        small_item.refresh_from_db()
        assert small_item.assignment_status == "available"
        assert small_item.custodian is None

    def test_delete_and_release_refuses_completed(
        self, admin_client, issued_slip, small_item
    ):
        CustodianSlip.objects.filter(pk=issued_slip.pk).update(
            slip_status="completed"
        )
        response = self._post_action(
            admin_client, "delete_and_release", issued_slip
        )
        assert response.status_code == 200
        assert b"cannot be deleted" in response.content
        assert CustodianSlip.objects.filter(pk=issued_slip.pk).exists()
        small_item.refresh_from_db()
        assert small_item.assignment_status == "assigned"


class TestItemActions:
    def _post_action(self, client, action, items, **fields):
        return client.post(
            reverse("admin:inventory_inventoryitem_changelist"),
            {
                "action": action,
                "_selected_action": [item.pk for item in items],
                **fields,
            },
            follow=True,
        )

    def test_issue_form_lists_items(self, admin_client, small_item):
        response = self._post_action(
            admin_client, "issue_to_custodian", [small_item]
        )
        assert response.status_code == 200
        assert small_item.property_number.encode() in response.content
        assert b'name="custodian_name"' in response.content
        small_item.refresh_from_db()
        assert small_item.assignment_status == "available"

    def test_issue_to_custodian(self, admin_client, small_item, high_item):
        response = self._post_action(
            admin_client,
            "issue_to_custodian",
            [small_item, high_item],
            apply="1",
            custodian_name="Maria Santos",
            designation="Supply Officer",
            office="General Services Office",
            date_issued="2025-03-14",
        )

        assert response.status_code == 200
        assert b"ICS-SPLV-2025-0001" in response.content
        assert b"ICS-SPHV-2025-0001" in response.content
        slips = CustodianSlip.objects.order_by("slip_number")
        assert [s.slip_number for s in slips] == [
            "ICS-SPHV-2025-0001",
            "ICS-SPLV-2025-0001",
        ]
        assert {s.issued_by for s in slips} == {"admin"}
        small_item.refresh_from_db()
        assert small_item.custodian == "Maria Santos"
        assert small_item.ics_number == "ICS-SPLV-2025-0001"

    def test_issue_reports_service_errors(
        self, admin_client, issued_slip, small_item, second_small_item
    ):
        response = self._post_action(
            admin_client,
            "issue_to_custodian",
            [small_item, second_small_item],
            apply="1",
            custodian_name="Ana Cruz",
        )

        assert response.status_code == 200
        assert b"already assigned" in response.content
        assert CustodianSlip.objects.count() == 1
        second_small_item.refresh_from_db()
        assert second_small_item.assignment_status == "available"

    def test_issue_rejects_bad_date(self, admin_client, small_item):
        response = self._post_action(
            admin_client,
            "issue_to_custodian",
            [small_item],
            apply="1",
            custodian_name="Ana Cruz",
            date_issued="14/03/2025",
        )
        assert b"is not a valid date" in response.content
        assert not CustodianSlip.objects.exists()

    def test_request_transfer(self, admin_client, issued_slip, small_item):
        response = self._post_action(
            admin_client,
            "request_transfer",
            [small_item],
            apply="1",
            to_custodian="Jose Reyes",
            transfer_type="temporary",
            reason="Field work",
        )

        assert response.status_code == 200
        transfer = Transfer.objects.get()
        assert transfer.status == "pending"
        assert transfer.transfer_type == "temporary"
        assert transfer.requested_by == "admin"
        assert transfer.transfer_number.encode() in response.content


class TestTransferActions:
    def _post_action(self, client, action, transfer):
        return client.post(
            reverse("admin:inventory_transfer_changelist"),
            {"action": action, "_selected_action": [transfer.pk]},
            follow=True,
        )

    def test_approve_then_complete(self, admin_client, issued_slip, small_item):
        transfer = create_transfer([small_item.pk], to_custodian="Jose Reyes")

        self._post_action(admin_client, "approve", transfer)
        transfer.refresh_from_db()
        assert transfer.status == "in_transit"
        assert transfer.approved_by == "admin"

        self._post_action(admin_client, "complete", transfer)
        transfer.refresh_from_db()
        assert transfer.status == "completed"
        small_item.refresh_from_db()
        assert small_item.custodian == "Jose Reyes"

    def test_complete_pending_reports_error(
        self, admin_client, issued_slip, small_item
    ):
        transfer = create_transfer([small_item.pk], to_custodian="Jose Reyes")
        response = self._post_action(admin_client, "complete", transfer)
        assert b"Allowed transitions" in response.content
        transfer.refresh_from_db()
        assert transfer.status == "pending"

    def test_reject(self, admin_client, issued_slip, small_item):
        transfer = create_transfer([small_item.pk], to_custodian="Jose Reyes")
        approve_transfer(transfer.pk, approved_by="Property Officer")
        self._post_action(admin_client, "reject", transfer)
        transfer.refresh_from_db()
        assert transfer.status == "rejected"

    def test_transfer_change_page(self, admin_client, issued_slip, small_item):
        transfer = create_transfer([small_item.pk], to_custodian="Jose Reyes")
        url = reverse("admin:inventory_transfer_change", args=[transfer.pk])
        response = admin_client.get(url)
        assert response.status_code == 200
        assert small_item.property_number.encode() in response.content
