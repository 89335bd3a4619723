from datetime import timedelta

import stripe
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from bookings.services.emails import BookingNotifier
from bookings.services.store import BookingStore
from payments.events import CHARGE_REFUNDED, CHECKOUT_EVENT_TYPES
from payments.gateway import GatewayConfigurationError, StripeGateway
from payments.webhooks import WebhookReconciler


class Command(BaseCommand):
    help = "Replay recent Stripe checkout events through the webhook reconciler to backfill missed bookings."

    def add_arguments(self, parser):
        parser.add_argument(
            "--since-hours",
            type=int,
            default=24,
            help="How far back to look for events (default: 24).",
        )
        parser.add_argument(
            "--notify",
            action="store_true",
            help="Send confirmation emails for bookings that become paid.",
        )

    def get_reconciler(self) -> WebhookReconciler:
        return WebhookReconciler(
            gateway=StripeGateway.from_settings(),
            store=BookingStore(),
            notifier=BookingNotifier.from_settings(),
        )

    def handle(self, *args, **options):
        since_hours = options["since_hours"]
        if since_hours < 1:
            raise CommandError("--since-hours must be at least 1.")

        reconciler = self.get_reconciler()
        if reconciler.gateway.use_stub:
            raise CommandError("Stripe is running in stub mode; there are no events to replay.")

        since = timezone.now() - timedelta(hours=since_hours)
        types = list(CHECKOUT_EVENT_TYPES) + [CHARGE_REFUNDED]
        try:
            # Stripe lists newest first; replay oldest first so transitions apply in order
            fetched = list(reconciler.gateway.iter_events(types, since))
        except (GatewayConfigurationError, stripe.StripeError) as exc:
            raise CommandError(f"Could not list Stripe events: {exc}") from exc

        created = updated = skipped = failed = 0
        for event in reversed(fetched):
            outcome = reconciler.process(event, notify=options["notify"])
            if outcome.store_failed:
                failed += 1
                self.stderr.write(self.style.ERROR(f"Failed to store event {event.id} ({event.type})"))
            elif outcome.created:
                created += 1
            elif outcome.applied:
                updated += 1
            else:
                skipped += 1

        summary = (
            f"Replayed {len(fetched)} events: {created} created, {updated} updated, "
            f"{skipped} skipped, {failed} failed."
        )
        if failed:
            raise CommandError(summary)
        self.stdout.write(self.style.SUCCESS(summary))
