"""Admin classes for events, ticket tiers and transactions."""

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from events import models


class TicketTierInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.TicketTier
    extra = 0
    fields = ["name", "price", "currency", "initial_quantity", "available_quantity"]


class BuyerInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.Buyer
    extra = 0
    fields = ["full_name", "email", "phone_number", "ticket_code", "checked_in", "checked_in_at"]
    readonly_fields = ["ticket_code", "checked_in_at"]
    can_delete = False


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["title", "venue", "start", "end", "published"]
    list_filter = ["published"]
    search_fields = ["title", "theme", "venue"]
    date_hierarchy = "start"
    inlines = [TicketTierInline]


@admin.register(models.TicketTier)
class TicketTierAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "event_link", "price", "currency", "available_quantity", "initial_quantity"]
    list_filter = ["currency"]
    search_fields = ["name", "event__title"]
    autocomplete_fields = ["event"]

    @admin.display(description="Event")
    def event_link(self, obj: models.TicketTier) -> str:
        url = reverse("admin:events_event_change", args=[obj.event_id])
        return format_html('<a href="{}">{}</a>', url, obj.event.title)


@admin.register(models.Transaction)
class TransactionAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["txn_id", "event", "tier", "amount", "currency", "status", "created_at"]
    list_filter = ["status", "currency"]
    search_fields = ["txn_id", "reference", "buyers__email", "event__title"]
    readonly_fields = ["txn_id", "reference", "gateway_charge_id", "created_at", "updated_at"]
    date_hierarchy = "created_at"
    inlines = [BuyerInline]

    def get_queryset(self, request):  # type: ignore[no-untyped-def]
        return super().get_queryset(request).select_related("event", "tier")
