from django.contrib import admin

from .models import CatalogItem


@admin.register(CatalogItem)
class CatalogItemAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "price_cents", "currency", "active", "ratings_average")
    list_filter = ("kind", "active")
    search_fields = ("name", "slug", "description")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("ratings_average", "ratings_quantity", "created_at", "updated_at")
