from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from bookings.models import Booking
from catalog.models import CatalogItem
from reviews.models import Review
from site_settings.models import SiteSettings


SEED_PASSWORD = "TwentyEight123!"
SUPERUSER_EMAIL = "admin@28degreeswest.test"
SUPERUSER_PASSWORD = "AdminTwentyEight123!"

SAMPLE_ITEMS = [
    {
        "kind": CatalogItem.TOUR,
        "name": "Azores Whale Watching",
        "price_cents": 7500,
        "duration": "1 day",
        "difficulty": "easy",
        "max_group_size": 12,
        "description": "Half-day boat trip off São Miguel with marine biologists on board.",
    },
    {
        "kind": CatalogItem.TOUR,
        "name": "Pico Summit Trek",
        "price_cents": 15000,
        "duration": "2 days",
        "difficulty": "difficult",
        "max_group_size": 8,
        "description": "Overnight ascent of Mount Pico with a certified mountain guide.",
    },
    {
        "kind": CatalogItem.EVENT,
        "name": "Sunset Wine Tasting",
        "price_cents": 4500,
        "duration": "3 hours",
        "description": "Local verdelho wines on the lava-field vineyards.",
        "date_offset_days": 21,
    },
    {
        "kind": CatalogItem.VIP,
        "name": "Private Island Charter",
        "price_cents": 120000,
        "duration": "1 day",
        "max_group_size": 6,
        "description": "A skippered day charter between the central islands.",
    },
    {
        "kind": CatalogItem.PRODUCT,
        "name": "28° West Field Guide",
        "price_cents": 2500,
        "inventory": 200,
        "description": "Printed guide to the trails and bays of the archipelago.",
    },
]


class Command(BaseCommand):
    help = "Populate the local development database with sample data."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Configuring site settings"))
            site_settings = SiteSettings.load()
            site_settings.contact_phone = site_settings.contact_phone or "+351 296 000 000"
            site_settings.address = site_settings.address or "Ponta Delgada, São Miguel, Azores"
            site_settings.save()

            self.stdout.write(self.style.MIGRATE_HEADING("Creating users"))
            admin = self._ensure_superuser()
            lead_guide = self._ensure_user(
                email="lead@28degreeswest.test",
                first_name="Lara",
                last_name="Lead",
                role=User.ROLE_LEAD_GUIDE,
            )
            customer = self._ensure_user(
                email="customer@example.test",
                first_name="Carla",
                last_name="Customer",
                role=User.ROLE_USER,
            )
            friend = self._ensure_user(
                email="friend@example.test",
                first_name="Frank",
                last_name="Friend",
                role=User.ROLE_USER,
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating catalog"))
            items = [self._ensure_item(**data) for data in SAMPLE_ITEMS]

            self.stdout.write(self.style.MIGRATE_HEADING("Creating bookings"))
            today = timezone.localdate()
            whale_watch, pico = items[0], items[1]
            self._ensure_booking(
                session_id="cs_test_seed_paid",
                item=whale_watch,
                user=customer,
                quantity=2,
                date=today + timedelta(days=14),
                status=Booking.PAID,
                payment_reference="pi_test_seed_paid",
            )
            self._ensure_booking(
                session_id="cs_test_seed_pending",
                item=pico,
                user=friend,
                quantity=1,
                date=today + timedelta(days=30),
                status=Booking.PENDING,
            )
            self._ensure_booking(
                session_id="cs_test_seed_expired",
                item=pico,
                user=customer,
                quantity=3,
                date=today + timedelta(days=45),
                status=Booking.EXPIRED,
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating reviews"))
            self._ensure_review(
                item=whale_watch,
                user=customer,
                rating=5,
                text="Saw a pod of sperm whales within the first hour. Unforgettable!",
            )
            self._ensure_review(
                item=whale_watch,
                user=friend,
                rating=4,
                text="Great crew and very informative, the sea was a little rough.",
            )

        self.stdout.write(self.style.SUCCESS("Seed data ready."))
        self.stdout.write(f"Admin login: {admin.email} / {SUPERUSER_PASSWORD}")
        self.stdout.write(f"Other users ({lead_guide.email}, {customer.email}, {friend.email}) use {SEED_PASSWORD}")

    def _ensure_user(self, *, email: str, first_name: str, last_name: str, role: str) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "first_name": first_name,
                "last_name": last_name,
                "display_name": f"{first_name} {last_name}",
                "role": role,
            },
        )
        if created or not user.has_usable_password():
            user.set_password(SEED_PASSWORD)
            user.save()
        elif user.role != role:
            user.role = role
            user.save(update_fields=["role"])
        return user

    def _ensure_superuser(self) -> User:
        user, created = User.objects.get_or_create(
            email=SUPERUSER_EMAIL,
            defaults={
                "username": SUPERUSER_EMAIL,
                "first_name": "Admin",
                "last_name": "User",
                "display_name": "Admin User",
                "is_staff": True,
                "is_superuser": True,
                "role": User.ROLE_ADMIN,
            },
        )
        if created or not user.has_usable_password():
            user.set_password(SUPERUSER_PASSWORD)
            user.save(update_fields=["password"])
        return user

    def _ensure_item(self, *, name: str, date_offset_days: int | None = None, **fields) -> CatalogItem:
        if date_offset_days is not None:
            fields["date"] = timezone.localdate() + timedelta(days=date_offset_days)
        item, created = CatalogItem.objects.get_or_create(name=name, defaults=fields)
        if created:
            self.stdout.write(self.style.NOTICE(f"Added {item.kind} {item.name}"))
        return item

    def _ensure_booking(
        self,
        *,
        session_id: str,
        item: CatalogItem,
        user: User,
        quantity: int,
        date,
        status: str,
        payment_reference: str = "",
    ) -> Booking:
        booking, _ = Booking.objects.update_or_create(
            external_session_id=session_id,
            defaults={
                "item_id": str(item.pk),
                "item_name": item.name,
                "quantity": quantity,
                "date": date.isoformat(),
                "total_cents": item.price_cents * quantity,
                "currency": item.currency,
                "status": status,
                "payment_reference": payment_reference,
                "email": user.email,
                "customer_name": user.display_name,
                "user": user,
                "metadata": {"itemId": str(item.pk), "quantity": str(quantity), "seed": "true"},
            },
        )
        return booking

    def _ensure_review(self, *, item: CatalogItem, user: User, rating: int, text: str) -> Review:
        review, _ = Review.objects.update_or_create(
            item=item,
            user=user,
            defaults={"rating": rating, "text": text},
        )
        return review
