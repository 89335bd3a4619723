from rest_framework import serializers

from .models import CatalogItem


class CatalogItemSerializer(serializers.ModelSerializer):
    price = serializers.SerializerMethodField()

    class Meta:
        model = CatalogItem
        fields = [
            "id",
            "kind",
            "name",
            "slug",
            "description",
            "price_cents",
            "price",
            "currency",
            "duration",
            "date",
            "difficulty",
            "max_group_size",
            "images",
            "inventory",
            "active",
            "ratings_average",
            "ratings_quantity",
            "extra",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "ratings_average",
            "ratings_quantity",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {"slug": {"required": False}}

    def get_price(self, obj: CatalogItem) -> str:
        return f"{obj.price_cents / 100:.2f}"

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("An item must have a name.")
        return value

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(url, str) for url in value):
            raise serializers.ValidationError("Images must be a list of URLs.")
        return value

    def validate_currency(self, value: str) -> str:
        return value.lower()
