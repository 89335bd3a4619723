from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.text import slugify


class CatalogItem(models.Model):
    TOUR = "tour"
    EVENT = "event"
    VIP = "vip"
    PRODUCT = "product"
    KIND_CHOICES = [
        (TOUR, "Tour"),
        (EVENT, "Event"),
        (VIP, "VIP"),
        (PRODUCT, "Product"),
    ]

    DIFFICULTY_CHOICES = [
        ("easy", "Easy"),
        ("medium", "Medium"),
        ("difficult", "Difficult"),
    ]

    DEFAULT_RATING = Decimal("4.5")

    kind = models.CharField(max_length=20, choices=KIND_CHOICES, default=TOUR)
    name = models.CharField(max_length=160)
    slug = models.SlugField(max_length=180, unique=True, blank=True)
    description = models.TextField(blank=True)
    price_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default="usd")
    duration = models.CharField(max_length=60, blank=True)
    date = models.DateField(null=True, blank=True)
    difficulty = models.CharField(max_length=20, choices=DIFFICULTY_CHOICES, blank=True)
    max_group_size = models.PositiveIntegerField(null=True, blank=True)
    images = models.JSONField(default=list, blank=True)
    inventory = models.PositiveIntegerField(null=True, blank=True)
    active = models.BooleanField(default=True)
    ratings_average = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=DEFAULT_RATING,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    ratings_quantity = models.PositiveIntegerField(default=0)
    extra = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("name", "id")

    def __str__(self):
        return f"{self.name} ({self.kind})"

    def clean(self):
        super().clean()
        if not isinstance(self.images, list):
            raise ValidationError({"images": "Images must be a list of URLs."})

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = self._unique_slug()
        return super().save(*args, **kwargs)

    def _unique_slug(self) -> str:
        base = slugify(self.name)[:170] or "item"
        candidate = base
        suffix = 2
        while CatalogItem.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def set_ratings(self, average, quantity: int):
        """Store a rating summary rounded to one decimal place."""
        if not quantity:
            self.ratings_average = self.DEFAULT_RATING
            self.ratings_quantity = 0
        else:
            self.ratings_average = Decimal(str(average)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
            self.ratings_quantity = quantity
        self.save(update_fields=["ratings_average", "ratings_quantity", "updated_at"])

    @classmethod
    def lookup(cls, identifier, *, active_only: bool = True):
        """Resolve an item by primary key or slug."""
        queryset = cls.objects.all()
        if active_only:
            queryset = queryset.filter(active=True)
        identifier = str(identifier or "").strip()
        if not identifier:
            return None
        if identifier.isdigit():
            item = queryset.filter(pk=int(identifier)).first()
            if item is not None:
                return item
        return queryset.filter(slug=identifier).first()
