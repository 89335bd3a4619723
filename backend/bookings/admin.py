from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "item_name", "email", "status", "total_cents", "currency", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("email", "customer_name", "item_name", "external_session_id", "payment_reference")
    readonly_fields = ("external_session_id", "created_at", "updated_at")
    raw_id_fields = ("user",)
    ordering = ("-created_at",)
