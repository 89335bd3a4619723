from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole

from .models import SiteSettings
from .serializers import PublicSiteSettingsSerializer, SiteSettingsSerializer


class PublicSiteSettingsView(APIView):
    """Sanitized subset of the site settings for the public frontend."""

    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get(self, request, *args, **kwargs):
        settings_row = SiteSettings.current()
        if settings_row is None:
            return Response({})
        return Response(PublicSiteSettingsSerializer(settings_row).data)


class AdminSiteSettingsView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request, *args, **kwargs):
        return Response(SiteSettingsSerializer(SiteSettings.load()).data)

    def put(self, request, *args, **kwargs):
        return self._update(request, partial=False)

    def patch(self, request, *args, **kwargs):
        return self._update(request, partial=True)

    def _update(self, request, *, partial: bool):
        serializer = SiteSettingsSerializer(SiteSettings.load(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
