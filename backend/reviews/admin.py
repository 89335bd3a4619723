from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("item", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("text", "item__name", "user__email")
    raw_id_fields = ("item", "user")
