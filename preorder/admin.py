"""
Preorder Admin - Django admin for Order and QuotaLedger.

Status actions go through the Preorder service so that stock streams
are notified exactly as for API calls.
"""

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _
from simple_history.admin import SimpleHistoryAdmin

from preorder.exceptions import OrderError
from preorder.models import Order, QuotaLedger


def _run_for_selected(modeladmin, request, queryset, operation, label):
    from preorder.service import Preorder

    done = 0
    for order_id in queryset.values_list("pk", flat=True):
        try:
            getattr(Preorder, operation)(order_id)
            done += 1
        except OrderError as e:
            modeladmin.message_user(request, str(e), level=messages.ERROR)
    modeladmin.message_user(request, f"{label}: {done}")


@admin.action(description=_("Mark payment confirmed"))
def mark_paid(modeladmin, request, queryset):
    _run_for_selected(modeladmin, request, queryset, "mark_paid", _("Marked paid"))


@admin.action(description=_("Mark awaiting payment"))
def mark_pending(modeladmin, request, queryset):
    _run_for_selected(modeladmin, request, queryset, "mark_pending", _("Marked pending"))


@admin.action(description=_("Mark picked up"))
def mark_picked_up(modeladmin, request, queryset):
    _run_for_selected(modeladmin, request, queryset, "mark_picked_up", _("Marked picked up"))


@admin.action(description=_("Undo pickup"))
def mark_not_picked_up(modeladmin, request, queryset):
    _run_for_selected(
        modeladmin, request, queryset, "mark_not_picked_up", _("Pickup undone")
    )


@admin.action(description=_("Delete and release quota"))
def delete_orders(modeladmin, request, queryset):
    _run_for_selected(modeladmin, request, queryset, "delete", _("Deleted"))


@admin.register(Order)
class OrderAdmin(SimpleHistoryAdmin):
    """Admin for pre-orders."""

    list_display = ("code", "name", "phone", "quantity", "depositor_name", "status", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("phone", "name", "depositor_name")
    date_hierarchy = "created_at"
    readonly_fields = (
        "code",
        "name",
        "phone",
        "quantity",
        "depositor_name",
        "pickup_slot",
        "status",
        "created_at",
    )
    actions = [mark_paid, mark_pending, mark_picked_up, mark_not_picked_up, delete_orders]

    def get_actions(self, request):
        actions = super().get_actions(request)
        # Bulk delete would bypass the stock broadcast.
        actions.pop("delete_selected", None)
        return actions

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        # Orders only change through the actions above, never the form.
        return False

    def delete_model(self, request, obj):
        from preorder.service import Preorder

        try:
            Preorder.delete(obj.pk)
        except OrderError as e:
            self.message_user(request, str(e), level=messages.ERROR)


@admin.register(QuotaLedger)
class QuotaLedgerAdmin(admin.ModelAdmin):
    """Read-only per-day admission counters."""

    list_display = ("day", "admitted", "rejected", "updated_at")
    date_hierarchy = "day"
    readonly_fields = ("day", "admitted", "rejected", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
