from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


def default_social_media():
    return {
        "facebook": "",
        "twitter": "",
        "instagram": "",
        "linkedin": "",
        "youtube": "",
    }


def default_seo():
    return {"metaTitle": "", "metaDescription": "", "metaKeywords": ""}


class SiteSettings(models.Model):
    """Single row holding the site-wide configuration edited from the admin UI."""

    SINGLETON_PK = 1

    ROLE_CHOICES = [
        ("user", "User"),
        ("guide", "Guide"),
        ("admin", "Admin"),
    ]

    site_title = models.CharField(max_length=200, default="28° West")
    site_description = models.CharField(max_length=500, default="Adventure Tours & Travel")
    contact_email = models.EmailField(default="info@28degreeswest.com")
    contact_phone = models.CharField(max_length=30, blank=True)
    address = models.CharField(max_length=300, blank=True)
    social_media = models.JSONField(default=default_social_media, blank=True)
    seo = models.JSONField(default=default_seo, blank=True)
    maintenance_mode = models.BooleanField(default=False)
    allow_registrations = models.BooleanField(default=True)
    default_user_role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="user")
    currency = models.CharField(max_length=3, default="USD")
    timezone = models.CharField(max_length=64, default="UTC")
    date_format = models.CharField(max_length=20, default="MM/DD/YYYY")
    time_format = models.CharField(max_length=5, default="12h")
    items_per_page = models.PositiveIntegerField(
        default=10, validators=[MinValueValidator(1), MaxValueValidator(1000)]
    )
    enable_analytics = models.BooleanField(default=False)
    google_analytics_id = models.CharField(max_length=40, blank=True)
    enable_email_notifications = models.BooleanField(default=True)
    email_sender = models.EmailField(default="noreply@28degreeswest.com")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "site settings"
        verbose_name_plural = "site settings"

    def __str__(self):
        return self.site_title

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        return super().save(*args, **kwargs)

    @classmethod
    def load(cls) -> "SiteSettings":
        settings_row, _ = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
        return settings_row

    @classmethod
    def current(cls) -> "SiteSettings | None":
        return cls.objects.filter(pk=cls.SINGLETON_PK).first()
