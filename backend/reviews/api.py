import logging

from django.db import IntegrityError, transaction
from rest_framework import permissions, status, viewsets
from rest_framework.response import Response

from accounts.permissions import IsOwnerOrAdmin

from .models import Review
from .serializers import ReviewSerializer, ReviewUpdateSerializer

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW_MESSAGE = "You have already reviewed this item."


class ReviewViewSet(viewsets.ModelViewSet):
    serializer_class = ReviewSerializer
    filterset_fields = ["item", "rating"]
    ordering_fields = ["created_at", "rating"]
    owner_field = "user"
    owner_read_is_public = True

    def get_permissions(self):
        if self.action in {"list", "retrieve"}:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]

    def get_queryset(self):
        return Review.objects.select_related("user", "item").all()

    def get_serializer_class(self):
        if self.action in {"update", "partial_update"}:
            return ReviewUpdateSerializer
        return super().get_serializer_class()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = serializer.validated_data["item"]
        if Review.objects.filter(item=item, user=request.user).exists():
            return Response({"detail": DUPLICATE_REVIEW_MESSAGE}, status=status.HTTP_409_CONFLICT)
        try:
            with transaction.atomic():
                review = serializer.save(user=request.user)
        except IntegrityError:
            logger.info("Duplicate review rejected for item %s by user %s", item.pk, request.user.pk)
            return Response({"detail": DUPLICATE_REVIEW_MESSAGE}, status=status.HTTP_409_CONFLICT)
        return Response(self.get_serializer(review).data, status=status.HTTP_201_CREATED)
