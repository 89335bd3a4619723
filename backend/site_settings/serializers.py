from rest_framework import serializers

from .models import SiteSettings

SOCIAL_KEYS = {"facebook", "twitter", "instagram", "linkedin", "youtube"}
SEO_KEYS = {"metaTitle", "metaDescription", "metaKeywords"}


def _validate_string_map(value, allowed_keys, label):
    if not isinstance(value, dict):
        raise serializers.ValidationError(f"{label} must be an object.")
    unknown = set(value) - allowed_keys
    if unknown:
        raise serializers.ValidationError(f"Unsupported {label} keys: {', '.join(sorted(unknown))}.")
    for key, item in value.items():
        if item is not None and not isinstance(item, str):
            raise serializers.ValidationError({key: "Must be a string."})
    return value


class SiteSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteSettings
        exclude = ["id"]
        read_only_fields = ["created_at", "updated_at"]

    def validate_social_media(self, value):
        return _validate_string_map(value, SOCIAL_KEYS, "social media")

    def validate_seo(self, value):
        return _validate_string_map(value, SEO_KEYS, "seo")

    def validate_currency(self, value: str) -> str:
        return value.upper()

    def validate_time_format(self, value: str) -> str:
        if value not in {"12h", "24h"}:
            raise serializers.ValidationError("Time format must be 12h or 24h.")
        return value

    def update(self, instance, validated_data):
        # merge partial social/seo payloads into the stored documents
        for field in ("social_media", "seo"):
            if field in validated_data:
                merged = dict(getattr(instance, field) or {})
                merged.update(validated_data[field])
                validated_data[field] = merged
        return super().update(instance, validated_data)


class PublicSiteSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteSettings
        fields = [
            "site_title",
            "site_description",
            "social_media",
            "seo",
            "currency",
            "timezone",
            "date_format",
            "time_format",
            "items_per_page",
            "enable_analytics",
            "google_analytics_id",
        ]
        read_only_fields = fields
