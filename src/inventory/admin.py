"""Admin configuration for the inventory app using django-unfold."""

from unfold.admin import ModelAdmin, TabularInline
from unfold.contrib.filters.admin import ChoicesDropdownFilter
from unfold.decorators import action, display

from django.contrib import admin, messages
from django.contrib.auth.admin import GroupAdmin as BaseGroupAdmin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group, User
from django.core.exceptions import ValidationError
from django.template.response import TemplateResponse
from django.utils.dateparse import parse_date

from .exceptions import CustodyError
from .models import (
    CustodianSlip,
    CustodianSlipItem,
    InventoryItem,
    PropertyCard,
    PropertyCardEntry,
    Transfer,
    TransferItem,
)
from .services.categories import classify_unit_cost
from .services.numbering import next_property_number
from .services.slips import create_custodian_slip, delete_custodian_slip
from .services.state import transition_slip
from .services.transfers import (
    approve_transfer,
    complete_transfer,
    create_transfer,
    reject_transfer,
)

admin.site.unregister(User)
admin.site.unregister(Group)


def _officer_name(user):
    return user.get_full_name() or user.get_username()


@admin.register(User)
class UserAdmin(BaseUserAdmin, ModelAdmin):
    pass


@admin.register(Group)
class GroupAdmin(BaseGroupAdmin, ModelAdmin):
    pass


class PropertyCardEntryInline(TabularInline):
    model = PropertyCardEntry
    extra = 0
    can_delete = False
    fields = [
        "date",
        "reference",
        "receipt_qty",
        "issue_qty",
        "balance_qty",
        "amount",
        "office_officer",
        "remarks",
    ]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class CustodianSlipItemInline(TabularInline):
    model = CustodianSlipItem
    extra = 0
    can_delete = False
    fields = [
        "item_number",
        "property_number",
        "description",
        "quantity",
        "unit",
        "unit_cost",
        "total_cost",
        "estimated_useful_life",
    ]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(InventoryItem)
class InventoryItemAdmin(ModelAdmin):
    list_display = [
        "display_header",
        "display_sub_category",
        "unit_cost",
        "display_condition",
        "display_assignment",
        "custodian",
        "ics_number",
    ]
    list_filter = [
        ("sub_category", ChoicesDropdownFilter),
        ("condition", ChoicesDropdownFilter),
        ("status", ChoicesDropdownFilter),
        ("assignment_status", ChoicesDropdownFilter),
    ]
    list_filter_submit = True
    search_fields = [
        "property_number",
        "description",
        "brand",
        "model_name",
        "serial_number",
        "custodian",
    ]
    actions = ["issue_to_custodian", "request_transfer"]
    readonly_fields = [
        "total_cost",
        "sub_category",
        "assignment_status",
        "custodian",
        "custodian_position",
        "assigned_date",
        "ics_number",
        "created_at",
        "updated_at",
    ]

    fieldsets = (
        (
            None,
            {
                "fields": (
                    "property_number",
                    "description",
                    "brand",
                    "model_name",
                    "serial_number",
                    "category",
                    "sub_category",
                )
            },
        ),
        (
            "Cost",
            {
                "fields": (
                    "quantity",
                    "unit_of_measure",
                    "unit_cost",
                    "total_cost",
                    "date_acquired",
                    "estimated_useful_life",
                ),
                "classes": ["tab"],
            },
        ),
        (
            "Custody",
            {
                "fields": (
                    "condition",
                    "status",
                    "assignment_status",
                    "custodian",
                    "custodian_position",
                    "assigned_date",
                    "ics_number",
                ),
                "classes": ["tab"],
            },
        ),
        (
            "Tracking",
            {
                "fields": ("remarks", "created_at", "updated_at"),
                "classes": ["tab"],
            },
        ),
    )

    def get_form(self, request, obj=None, **kwargs):
        form = super().get_form(request, obj, **kwargs)
        if "property_number" in form.base_fields:
            form.base_fields["property_number"].required = False
            form.base_fields["property_number"].help_text = (
                "Leave blank to generate the next SPLV/SPHV number."
            )
        return form

    def save_model(self, request, obj, form, change):
        if not obj.property_number:
            obj.property_number = next_property_number(
                classify_unit_cost(obj.unit_cost)
            )
        super().save_model(request, obj, form, change)

    @action(description="Issue to custodian...")
    def issue_to_custodian(self, request, queryset):
        if "apply" in request.POST:
            custodian_name = request.POST.get("custodian_name", "").strip()
            raw_date = request.POST.get("date_issued", "").strip()
            try:
                date_issued = parse_date(raw_date) if raw_date else None
            except ValueError:
                date_issued = None
            if raw_date and date_issued is None:
                messages.error(request, f"'{raw_date}' is not a valid date.")
                return None
            if custodian_name:
                ids = list(queryset.values_list("pk", flat=True))
                try:
                    result = create_custodian_slip(
                        ids,
                        custodian_name=custodian_name,
                        designation=request.POST.get(
                            "designation", ""
                        ).strip(),
                        office=request.POST.get("office", "").strip(),
                        date_issued=date_issued,
                        issued_by=_officer_name(request.user),
                    )
                except CustodyError as e:
                    messages.error(request, str(e))
                    return None
                slips = result if isinstance(result, list) else [result]
                messages.success(
                    request,
                    f"{len(ids)} item(s) issued to {custodian_name} on "
                    f"{', '.join(s['slip_number'] for s in slips)}.",
                )
                return None
        return TemplateResponse(
            request,
            "admin/inventory/issue_to_custodian.html",
            {
                "items": queryset,
                "action": "issue_to_custodian",
                "opts": self.model._meta,
                "title": "Issue items to a custodian",
            },
        )

    issue_to_custodian.short_description = "Issue to custodian..."

    @action(description="Transfer to custodian...")
    def request_transfer(self, request, queryset):
        if "apply" in request.POST:
            to_custodian = request.POST.get("to_custodian", "").strip()
            if to_custodian:
                try:
                    transfer = create_transfer(
                        list(queryset.values_list("pk", flat=True)),
                        to_custodian=to_custodian,
                        to_designation=request.POST.get(
                            "to_designation", ""
                        ).strip(),
                        to_office=request.POST.get("to_office", "").strip(),
                        transfer_type=request.POST.get(
                            "transfer_type", "permanent"
                        ),
                        reason=request.POST.get("reason", "").strip(),
                        requested_by=_officer_name(request.user),
                    )
                except CustodyError as e:
                    messages.error(request, str(e))
                    return None
                messages.success(
                    request,
                    f"Transfer {transfer.transfer_number} to {to_custodian} "
                    f"requested for {transfer.items.count()} item(s).",
                )
                return None
        return TemplateResponse(
            request,
            "admin/inventory/request_transfer.html",
            {
                "items": queryset,
                "transfer_types": Transfer.TYPE_CHOICES,
                "action": "request_transfer",
                "opts": self.model._meta,
                "title": "Transfer items to another custodian",
            },
        )

    request_transfer.short_description = "Transfer to custodian..."

    @display(description="Item", header=True, ordering="property_number")
    def display_header(self, obj):
        return obj.property_number, obj.display_description

    @display(
        description="Category",
        label={"small_value": "info", "high_value": "warning"},
    )
    def display_sub_category(self, obj):
        return obj.sub_category

    @display(
        description="Condition",
        label={
            "serviceable": "success",
            "for_repair": "warning",
            "unserviceable": "danger",
            "damaged": "danger",
        },
    )
    def display_condition(self, obj):
        return obj.condition

    @display(
        description="Assignment",
        label={"available": "success", "assigned": "info"},
    )
    def display_assignment(self, obj):
        return obj.assignment_status


@admin.register(PropertyCard)
class PropertyCardAdmin(ModelAdmin):
    list_display = [
        "property_number",
        "semi_expendable_property",
        "entity_name",
        "fund_cluster",
        "date_acquired",
    ]
    search_fields = [
        "property_number",
        "semi_expendable_property",
        "description",
    ]
    readonly_fields = ["created_at", "updated_at"]
    autocomplete_fields = ["inventory_item"]
    inlines = [PropertyCardEntryInline]


@admin.register(CustodianSlip)
class CustodianSlipAdmin(ModelAdmin):
    list_display = [
        "slip_number",
        "custodian_name",
        "designation",
        "office",
        "date_issued",
        "display_status",
    ]
    list_filter = [
        ("slip_status", ChoicesDropdownFilter),
        ("sub_category", ChoicesDropdownFilter),
    ]
    list_filter_submit = True
    search_fields = ["slip_number", "custodian_name", "office"]
    date_hierarchy = "date_issued"
    readonly_fields = [
        "slip_number",
        "sub_category",
        "slip_status",
        "created_at",
        "updated_at",
    ]
    inlines = [CustodianSlipItemInline]
    actions = ["delete_and_release", "mark_issued", "mark_completed"]

    def has_add_permission(self, request):
        # Slips are created through the issuance workflow only
        return False

    def has_delete_permission(self, request, obj=None):
        # Deletion goes through delete_and_release
        return False

    @display(
        description="Status",
        label={
            "draft": "info",
            "issued": "warning",
            "completed": "success",
            "cancelled": "danger",
        },
    )
    def display_status(self, obj):
        return obj.slip_status

    @action(description="Delete and release items")
    def delete_and_release(self, request, queryset):
        deleted = 0
        for slip in queryset:
            try:
                delete_custodian_slip(slip.pk)
            except CustodyError as e:
                messages.error(request, str(e))
                continue
            deleted += 1
        if deleted:
            messages.success(
                request,
                f"{deleted} slip(s) deleted and their items released.",
            )

    delete_and_release.short_description = "Delete and release items"

    def _transition(self, request, queryset, new_status):
        count = 0
        for slip in queryset:
            try:
                transition_slip(slip, new_status)
            except ValidationError as e:
                messages.error(request, "; ".join(e.messages))
                continue
            count += 1
        if count:
            messages.success(
                request, f"{count} slip(s) marked as {new_status}."
            )

    @action(description="Mark as issued")
    def mark_issued(self, request, queryset):
        self._transition(request, queryset, "issued")

    mark_issued.short_description = "Mark as issued"

    @action(description="Mark as completed")
    def mark_completed(self, request, queryset):
        self._transition(request, queryset, "completed")

    mark_completed.short_description = "Mark as completed"


class TransferItemInline(TabularInline):
    model = TransferItem
    extra = 0
    can_delete = False
    fields = [
        "property_number",
        "description",
        "quantity",
        "condition",
        "property_card_entry",
    ]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Transfer)
class TransferAdmin(ModelAdmin):
    list_display = [
        "transfer_number",
        "from_custodian",
        "to_custodian",
        "display_type",
        "date_requested",
        "display_status",
    ]
    list_filter = [
        ("status", ChoicesDropdownFilter),
        ("transfer_type", ChoicesDropdownFilter),
    ]
    list_filter_submit = True
    search_fields = [
        "transfer_number",
        "from_custodian",
        "to_custodian",
        "reason",
    ]
    date_hierarchy = "date_requested"
    readonly_fields = [
        "transfer_number",
        "status",
        "from_custodian",
        "from_office",
        "approved_by",
        "date_approved",
        "date_completed",
        "created_at",
        "updated_at",
    ]
    inlines = [TransferItemInline]
    actions = ["approve", "complete", "reject"]

    def has_add_permission(self, request):
        # Transfers are requested from the inventory item list
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @display(description="Type", label=True)
    def display_type(self, obj):
        return obj.get_transfer_type_display()

    @display(
        description="Status",
        label={
            "pending": "info",
            "in_transit": "warning",
            "completed": "success",
            "rejected": "danger",
        },
    )
    def display_status(self, obj):
        return obj.status

    def _apply(self, request, queryset, service, verb, **kwargs):
        count = 0
        for transfer in queryset:
            try:
                service(transfer.pk, **kwargs)
            except CustodyError as e:
                messages.error(request, str(e))
                continue
            except ValidationError as e:
                messages.error(request, "; ".join(e.messages))
                continue
            count += 1
        if count:
            messages.success(request, f"{count} transfer(s) {verb}.")

    @action(description="Approve")
    def approve(self, request, queryset):
        self._apply(
            request,
            queryset,
            approve_transfer,
            "approved",
            approved_by=_officer_name(request.user),
        )

    approve.short_description = "Approve"

    @action(description="Complete and hand over items")
    def complete(self, request, queryset):
        self._apply(request, queryset, complete_transfer, "completed")

    complete.short_description = "Complete and hand over items"

    @action(description="Reject")
    def reject(self, request, queryset):
        self._apply(request, queryset, reject_transfer, "rejected")

    reject.short_description = "Reject"
