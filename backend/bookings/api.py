import logging

import stripe
from django.db.models import Avg, Count, Max, Min, Q, Sum
from django.db.models.functions import ExtractMonth, ExtractYear
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole, IsBookingStaff, IsOwnerOrAdmin
from payments.gateway import GatewayConfigurationError, StripeGateway

from .models import Booking
from .serializers import BookingAdminSerializer, BookingSerializer
from .services.store import BookingStore, InvalidStatusTransition

logger = logging.getLogger(__name__)


def _major_units(cents) -> float:
    return round(float(cents or 0) / 100, 2)


def _has_started(booking: Booking) -> bool:
    try:
        booking_date = parse_date(booking.date) if booking.date else None
    except ValueError:
        booking_date = None
    if booking_date is None:
        return False
    return booking_date < timezone.localdate()


class BookingViewSet(viewsets.ModelViewSet):
    queryset = Booking.objects.select_related("user").all()
    filterset_fields = ["status", "email", "item_id"]
    search_fields = ["email", "customer_name", "item_name", "external_session_id"]
    ordering_fields = ["created_at", "total_cents", "date"]
    ordering = ["-created_at"]
    owner_field = "user"
    owner_email_field = "email"

    def get_permissions(self):
        if self.action == "list":
            return [permissions.IsAuthenticated(), IsBookingStaff()]
        if self.action in {"retrieve", "cancel"}:
            return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]
        if self.action == "my_bookings":
            return [permissions.IsAuthenticated()]
        return [permissions.IsAuthenticated(), IsAdminRole()]

    def get_serializer_class(self):
        if self.action in {"create", "update", "partial_update"}:
            return BookingAdminSerializer
        return BookingSerializer

    def get_store(self) -> BookingStore:
        return BookingStore()

    def get_gateway(self) -> StripeGateway:
        return StripeGateway.from_settings()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()
        logger.info("Booking %s created manually by user %s", booking.pk, request.user.pk)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        booking = self.get_object()
        serializer = self.get_serializer(booking, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        changes = dict(serializer.validated_data)
        target = changes.pop("status", booking.status)
        try:
            booking = self.get_store().transition(booking, target, **changes)
        except InvalidStatusTransition as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(BookingSerializer(booking).data)

    @action(detail=False, methods=["get"], url_path="my-bookings")
    def my_bookings(self, request):
        user = request.user
        criteria = Q(user=user)
        if user.email:
            criteria |= Q(email__iexact=user.email)
        bookings = Booking.objects.filter(criteria).order_by("-created_at")
        return Response(BookingSerializer(bookings, many=True).data)

    @action(detail=True, methods=["post", "patch"])
    def cancel(self, request, pk=None):
        booking = self.get_object()
        if _has_started(booking):
            return Response(
                {"detail": "Cannot cancel a booking that has already started."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if not Booking.can_transition(booking.status, Booking.CANCELED):
            return Response(
                {"detail": f"A {booking.status} booking cannot be canceled."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if booking.status == Booking.PAID and booking.payment_reference:
            try:
                self.get_gateway().refund(booking.payment_reference)
            except GatewayConfigurationError as exc:
                logger.error("Cannot refund booking %s: %s", booking.pk, exc)
                return Response({"detail": str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
            except stripe.StripeError as exc:
                logger.exception("Refund failed for booking %s: %s", booking.pk, exc)
                return Response({"detail": str(exc)}, status=status.HTTP_502_BAD_GATEWAY)

        try:
            booking = self.get_store().transition(booking, Booking.CANCELED)
        except InvalidStatusTransition as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        logger.info("Booking %s canceled by user %s", booking.pk, request.user.pk)
        return Response(BookingSerializer(booking).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        rows = (
            Booking.objects.filter(status=Booking.PAID)
            .annotate(year=ExtractYear("created_at"), month=ExtractMonth("created_at"))
            .values("year", "month")
            .annotate(
                num_bookings=Count("id"),
                revenue_cents=Sum("total_cents"),
                avg_cents=Avg("total_cents"),
                min_cents=Min("total_cents"),
                max_cents=Max("total_cents"),
            )
            .order_by("year", "month")
        )
        stats = [
            {
                "year": row["year"],
                "month": row["month"],
                "num_bookings": row["num_bookings"],
                "total_revenue": _major_units(row["revenue_cents"]),
                "avg_price": _major_units(row["avg_cents"]),
                "min_price": _major_units(row["min_cents"]),
                "max_price": _major_units(row["max_cents"]),
            }
            for row in rows
        ]
        return Response({"stats": stats})


class LegacyEndpointGoneView(APIView):
    """Old checkout endpoints kept only to point clients at their replacements."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []
    replacement = ""

    def _gone(self):
        return Response(
            {"detail": f"This endpoint has been removed. Use {self.replacement} instead."},
            status=status.HTTP_410_GONE,
        )

    def get(self, request, *args, **kwargs):
        return self._gone()

    def post(self, request, *args, **kwargs):
        return self._gone()
