from django.contrib.auth import get_user_model
from rest_framework import serializers

from catalog.models import CatalogItem

from .models import Booking

User = get_user_model()


class BookingSerializer(serializers.ModelSerializer):
    total = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "external_session_id",
            "payment_reference",
            "email",
            "customer_name",
            "customer_phone",
            "item_id",
            "item_name",
            "quantity",
            "date",
            "total_cents",
            "total",
            "currency",
            "status",
            "metadata",
            "user",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_total(self, obj: Booking) -> str:
        return f"{obj.total_cents / 100:.2f}"


class BookingAdminSerializer(serializers.ModelSerializer):
    """Manual bookings entered by staff, and edits to existing ones."""

    total_cents = serializers.IntegerField(min_value=0, required=False)
    status = serializers.ChoiceField(choices=Booking.STATUSES, required=False)
    user = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    date = serializers.DateField(required=False, allow_null=True, input_formats=["%Y-%m-%d"])

    class Meta:
        model = Booking
        fields = [
            "id",
            "external_session_id",
            "payment_reference",
            "email",
            "customer_name",
            "customer_phone",
            "item_id",
            "item_name",
            "quantity",
            "date",
            "total_cents",
            "currency",
            "status",
            "metadata",
            "user",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"external_session_id": {"required": False, "allow_null": True}}

    def validate_currency(self, value: str) -> str:
        return value.lower()

    def validate_external_session_id(self, value):
        if self.instance is not None and self.instance.external_session_id and value != self.instance.external_session_id:
            raise serializers.ValidationError("The checkout session of a booking cannot change.")
        return value or None

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if "date" in attrs:
            attrs["date"] = attrs["date"].isoformat() if attrs["date"] else ""
        if self.instance is None:
            item = CatalogItem.lookup(attrs.get("item_id"), active_only=False)
            quantity = attrs.get("quantity") or 1
            if item is not None:
                attrs["item_id"] = str(item.pk)
                attrs.setdefault("item_name", item.name)
                attrs.setdefault("currency", item.currency)
                if attrs.get("total_cents") is None:
                    attrs["total_cents"] = item.price_cents * quantity
            if not attrs.get("status"):
                attrs["status"] = Booking.PAID if attrs.get("payment_reference") else Booking.PENDING
            if not attrs.get("item_name"):
                attrs["item_name"] = f"Booking {attrs.get('item_id')}" if attrs.get("item_id") else "Booking"
        return attrs
