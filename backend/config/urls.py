from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.api import ChangePasswordView, LoginView, MeView, RegisterView
from bookings.api import BookingViewSet, LegacyEndpointGoneView
from catalog.api import CatalogItemViewSet
from core.api import HealthView
from payments.api import CheckoutSessionView, StripeWebhookView
from reviews.api import ReviewViewSet
from site_settings.api import AdminSiteSettingsView, PublicSiteSettingsView

router = DefaultRouter()
router.register(r"catalog", CatalogItemViewSet, basename="catalog-item")
router.register(r"reviews", ReviewViewSet, basename="review")
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health/", HealthView.as_view(), name="health"),
    path("api/auth/register/", RegisterView.as_view(), name="auth-register"),
    path("api/auth/login/", LoginView.as_view(), name="auth-login"),
    path("api/auth/refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path(
        "api/auth/change-password/",
        ChangePasswordView.as_view(),
        name="auth-change-password",
    ),
    path("api/auth/me/", MeView.as_view(), name="auth-me"),
    path("api/settings/", PublicSiteSettingsView.as_view(), name="site-settings"),
    path("api/admin/settings/", AdminSiteSettingsView.as_view(), name="admin-site-settings"),
    path(
        "api/bookings/checkout-session/<str:item_id>/",
        LegacyEndpointGoneView.as_view(replacement="/api/payments/checkout-session/"),
        name="legacy-booking-checkout",
    ),
    path(
        "api/bookings/webhook-checkout/",
        LegacyEndpointGoneView.as_view(replacement="/api/payments/webhook/"),
        name="legacy-booking-webhook",
    ),
    path(
        "api/payments/checkout-session/",
        CheckoutSessionView.as_view(),
        name="payments-checkout-session",
    ),
    path("api/payments/webhook/", StripeWebhookView.as_view(), name="stripe-webhook"),
    path("api/webhooks/stripe/", StripeWebhookView.as_view(), name="stripe-webhook-alias"),
    path("api/v1/payments/webhook/", StripeWebhookView.as_view(), name="stripe-webhook-v1"),
    path("api/", include(router.urls)),
]
