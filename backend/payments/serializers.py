from rest_framework import serializers

from .events import BOOKING_DATE_MAX_LENGTH, normalize_booking_date


class CustomerInfoSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, default="", max_length=200)
    email = serializers.EmailField(required=False, allow_blank=True, default="", max_length=254)
    phone = serializers.CharField(required=False, allow_blank=True, default="", max_length=50)


class CheckoutSessionRequestSerializer(serializers.Serializer):
    itemId = serializers.CharField(required=False, allow_blank=True)
    tourId = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.JSONField(required=False, default=1)
    date = serializers.CharField(required=False, allow_blank=True, default="")
    customerInfo = CustomerInfoSerializer(required=False)
    metadata = serializers.DictField(required=False, default=dict)
    currency = serializers.CharField(required=False, allow_blank=True, max_length=3)

    def validate_date(self, value: str) -> str:
        value = normalize_booking_date(value)
        if len(value) > BOOKING_DATE_MAX_LENGTH:
            raise serializers.ValidationError(
                f"Use an ISO date (YYYY-MM-DD); got {len(value)} characters."
            )
        return value

    def validate(self, attrs):
        # older clients still send tourId
        item_id = (attrs.get("itemId") or attrs.pop("tourId", "") or "").strip()
        attrs.pop("tourId", None)
        if not item_id:
            raise serializers.ValidationError({"itemId": "itemId is required."})
        attrs["itemId"] = item_id
        return attrs
