from rest_framework import serializers

from catalog.models import CatalogItem

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    item = serializers.PrimaryKeyRelatedField(queryset=CatalogItem.objects.filter(active=True))
    user_name = serializers.SerializerMethodField()
    text = serializers.CharField(min_length=10, max_length=1000)
    rating = serializers.IntegerField(min_value=1, max_value=5)

    class Meta:
        model = Review
        fields = ["id", "item", "user", "user_name", "text", "rating", "created_at", "updated_at"]
        read_only_fields = ["user", "created_at", "updated_at"]

    def get_user_name(self, obj: Review) -> str:
        user = obj.user
        return user.display_name or f"{user.first_name} {user.last_name}".strip() or user.email

    def validate_text(self, value: str) -> str:
        value = value.strip()
        if len(value) < 10:
            raise serializers.ValidationError("Review must be at least 10 characters.")
        return value


class ReviewUpdateSerializer(ReviewSerializer):
    item = serializers.PrimaryKeyRelatedField(read_only=True)
