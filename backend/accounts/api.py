import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from site_settings.models import SiteSettings

from .serializers import (
    EmailTokenObtainPairSerializer,
    PasswordChangeSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def token_response(user, status_code=status.HTTP_200_OK) -> Response:
    """The user payload plus a fresh JWT pair, as returned by every auth endpoint."""
    refresh = RefreshToken.for_user(user)
    return Response(
        {"user": UserSerializer(user).data, "access": str(refresh.access_token), "refresh": str(refresh)},
        status=status_code,
    )


class RegisterView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        site_settings = SiteSettings.current()
        if site_settings is not None and not site_settings.allow_registrations:
            return Response({"detail": "Registrations are currently closed."}, status=status.HTTP_403_FORBIDDEN)

        default_role = site_settings.default_user_role if site_settings is not None else None
        serializer = RegisterSerializer(data=request.data, context={"default_role": default_role})
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered user %s with role %s", user.pk, user.role)
        return token_response(user, status.HTTP_201_CREATED)


class LoginView(TokenObtainPairView):
    serializer_class = EmailTokenObtainPairSerializer


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response(UserSerializer(request.user).data)

    def patch(self, request, *args, **kwargs):
        serializer = ProfileUpdateSerializer(instance=request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        return Response(UserSerializer(serializer.save()).data)


class ChangePasswordView(APIView):
    """Rotate the password and hand back new tokens for the session."""

    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = PasswordChangeSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s changed their password", user.pk)
        return token_response(user)
