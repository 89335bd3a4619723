import logging

import stripe
from django.conf import settings
from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.models import Booking
from bookings.services.emails import BookingNotifier
from bookings.services.store import BookingStore
from catalog.models import CatalogItem

from .events import BookingMetadata, CheckoutSession, Customer, parse_quantity
from .gateway import GatewayConfigurationError, StripeGateway, WebhookVerificationError
from .serializers import CheckoutSessionRequestSerializer
from .webhooks import WebhookReconciler

logger = logging.getLogger(__name__)


class CheckoutSessionView(APIView):
    """Start a hosted Stripe Checkout for a catalog item and record a pending booking."""

    permission_classes = [AllowAny]

    def get_gateway(self) -> StripeGateway:
        return StripeGateway.from_settings()

    def get_store(self) -> BookingStore:
        return BookingStore()

    def post(self, request, *args, **kwargs):
        serializer = CheckoutSessionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        item = CatalogItem.lookup(data["itemId"])
        if item is None:
            return Response({"detail": "Item not found."}, status=status.HTTP_404_NOT_FOUND)

        quantity = parse_quantity(data.get("quantity"))
        customer_info = data.get("customerInfo") or {}
        customer = Customer(
            email=customer_info.get("email") or "",
            name=customer_info.get("name") or "",
            phone=customer_info.get("phone") or "",
        )
        user = request.user if request.user and request.user.is_authenticated else None
        extra_metadata = dict(data.get("metadata") or {})
        if user is not None:
            extra_metadata["userId"] = str(user.pk)
            if not customer.email:
                customer = Customer(email=user.email, name=customer.name, phone=customer.phone or user.phone)

        try:
            session = self.get_gateway().create_checkout_session(
                item=item,
                quantity=quantity,
                date=data.get("date") or "",
                customer=customer,
                metadata=extra_metadata,
                currency=data.get("currency") or item.currency,
                idempotency_key=request.headers.get("Idempotency-Key") or None,
            )
        except GatewayConfigurationError as exc:
            logger.error("Stripe is not configured: %s", exc)
            return Response({"detail": str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except stripe.StripeError as exc:
            logger.exception("Failed to create Stripe checkout session: %s", exc)
            return Response({"detail": str(exc)}, status=status.HTTP_502_BAD_GATEWAY)

        pending = CheckoutSession(
            id=session.id,
            payment_intent=getattr(session, "payment_intent", None) or "",
            amount_total=getattr(session, "amount_total", None),
            currency=getattr(session, "currency", None),
            customer=customer,
            metadata=BookingMetadata.from_dict(getattr(session, "metadata", None)),
        )
        self.get_store().upsert_from_session(pending, Booking.PENDING, user=user)

        return Response({"url": session.url, "sessionId": session.id})


class StripeWebhookView(APIView):
    """Receive Stripe checkout and refund events."""

    permission_classes: list = []
    authentication_classes: list = []

    def get_reconciler(self) -> WebhookReconciler:
        return WebhookReconciler(
            gateway=StripeGateway.from_settings(),
            store=BookingStore(),
            notifier=BookingNotifier.from_settings(),
        )

    def post(self, request, *args, **kwargs):
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")
        if not sig_header:
            logger.warning("Stripe webhook received without a signature header.")
            return HttpResponse("Missing Stripe signature", status=status.HTTP_400_BAD_REQUEST)

        reconciler = self.get_reconciler()
        try:
            event = reconciler.verify(payload, sig_header)
        except GatewayConfigurationError as exc:
            logger.error("Stripe webhook secret not configured: %s", exc)
            return HttpResponse("Webhook handler error", status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except WebhookVerificationError as exc:
            logger.warning("Stripe webhook verification failed: %s", exc)
            return HttpResponse(f"Webhook Error: {exc}", status=status.HTTP_400_BAD_REQUEST)

        try:
            outcome = reconciler.process(event)
        except Exception:
            logger.exception("Unexpected error handling Stripe event %s", event.id)
            return HttpResponse("Webhook handler error", status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        if outcome.lost_payment:
            logger.error(
                "Booking for paid session %s was not stored (event %s)",
                event.data_object.get("id"),
                event.id,
            )
            if settings.STRIPE_WEBHOOK_RETRY_ON_STORE_FAILURE:
                return HttpResponse("Webhook handler error", status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({"received": True})
