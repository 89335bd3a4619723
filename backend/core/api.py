from django.utils import timezone
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get(self, request, *args, **kwargs):
        return Response(
            {
                "status": "success",
                "message": "API is running",
                "timestamp": timezone.now().isoformat(),
            }
        )
