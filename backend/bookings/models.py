from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Booking(models.Model):
    """A purchase of a catalog item, usually mirrored from a Stripe checkout session."""

    PENDING = "pending"
    PAID = "paid"
    EXPIRED = "expired"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELED = "canceled"
    STATUSES = [
        (PENDING, "Pending"),
        (PAID, "Paid"),
        (EXPIRED, "Expired"),
        (FAILED, "Failed"),
        (REFUNDED, "Refunded"),
        (CANCELED, "Canceled"),
    ]

    # allowed moves between distinct statuses; anything missing is terminal
    TRANSITIONS = {
        PENDING: {PAID, EXPIRED, FAILED, CANCELED},
        PAID: {REFUNDED, CANCELED},
    }

    external_session_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    payment_reference = models.CharField(max_length=255, blank=True, db_index=True)
    email = models.EmailField(blank=True, db_index=True)
    customer_name = models.CharField(max_length=200, blank=True)
    customer_phone = models.CharField(max_length=50, blank=True)
    item_id = models.CharField(max_length=120, blank=True)
    item_name = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    date = models.CharField(max_length=20, blank=True)
    total_cents = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default="usd")
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING, db_index=True)
    metadata = models.JSONField(default=dict, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.item_name or 'Booking'} ({self.status})"

    @classmethod
    def can_transition(cls, current: str, target: str) -> bool:
        if current == target:
            return True
        return target in cls.TRANSITIONS.get(current, set())

    @property
    def total(self) -> float:
        return self.total_cents / 100
