from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdminOrReadOnly
from reviews.models import Review
from reviews.serializers import ReviewSerializer

from .models import CatalogItem
from .serializers import CatalogItemSerializer


class CatalogItemViewSet(viewsets.ModelViewSet):
    """Public browsing of sellable items; admins manage the catalog."""

    serializer_class = CatalogItemSerializer
    permission_classes = [IsAdminOrReadOnly]
    filterset_fields = ["kind", "active", "difficulty"]
    search_fields = ["name", "description"]
    ordering_fields = ["price_cents", "ratings_average", "date", "created_at", "name"]

    def get_queryset(self):
        queryset = CatalogItem.objects.all()
        user = self.request.user
        if not (user and user.is_authenticated and getattr(user, "is_site_admin", False)):
            queryset = queryset.filter(active=True)
        return queryset

    def get_object(self):
        # allow slugs in place of the numeric id
        lookup = self.kwargs.get(self.lookup_field)
        if lookup is not None and not str(lookup).isdigit():
            self.kwargs = {**self.kwargs, "slug": lookup}
            self.lookup_field = "slug"
        return super().get_object()

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def reviews(self, request, pk=None):
        item = self.get_object()
        reviews = Review.objects.filter(item=item).select_related("user").order_by("-created_at")
        return Response(ReviewSerializer(reviews, many=True).data)
