import django.core.validators
from django.db import migrations, models

import site_settings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SiteSettings",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("site_title", models.CharField(default="28° West", max_length=200)),
                (
                    "site_description",
                    models.CharField(default="Adventure Tours & Travel", max_length=500),
                ),
                ("contact_email", models.EmailField(default="info@28degreeswest.com", max_length=254)),
                ("contact_phone", models.CharField(blank=True, max_length=30)),
                ("address", models.CharField(blank=True, max_length=300)),
                (
                    "social_media",
                    models.JSONField(blank=True, default=site_settings.models.default_social_media),
                ),
                ("seo", models.JSONField(blank=True, default=site_settings.models.default_seo)),
                ("maintenance_mode", models.BooleanField(default=False)),
                ("allow_registrations", models.BooleanField(default=True)),
                (
                    "default_user_role",
                    models.CharField(
                        choices=[("user", "User"), ("guide", "Guide"), ("admin", "Admin")],
                        default="user",
                        max_length=20,
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("timezone", models.CharField(default="UTC", max_length=64)),
                ("date_format", models.CharField(default="MM/DD/YYYY", max_length=20)),
                ("time_format", models.CharField(default="12h", max_length=5)),
                (
                    "items_per_page",
                    models.PositiveIntegerField(
                        default=10,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(1000),
                        ],
                    ),
                ),
                ("enable_analytics", models.BooleanField(default=False)),
                ("google_analytics_id", models.CharField(blank=True, max_length=40)),
                ("enable_email_notifications", models.BooleanField(default=True)),
                (
                    "email_sender",
                    models.EmailField(default="noreply@28degreeswest.com", max_length=254),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "site settings",
                "verbose_name_plural": "site settings",
            },
        ),
    ]
