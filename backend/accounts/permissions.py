from rest_framework.permissions import SAFE_METHODS, BasePermission


def _is_site_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "is_site_admin", False))


class IsAdminRole(BasePermission):
    """Allow access to superusers and users with the admin role."""

    def has_permission(self, request, view):
        return _is_site_admin(request.user)


class IsBookingStaff(BasePermission):
    """
    Admins and lead guides manage every booking.
    Superusers automatically pass.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "is_booking_staff", False)


class IsAdminOrReadOnly(BasePermission):
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return _is_site_admin(request.user)


class IsOwnerOrAdmin(BasePermission):
    """
    Object-level check; `owner_field` on the view names the FK to the user.
    Views may also set `owner_email_field` to match records by the caller's email.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS and getattr(view, "owner_read_is_public", False):
            return True
        if _is_site_admin(request.user):
            return True
        owner_field = getattr(view, "owner_field", "user")
        if getattr(obj, f"{owner_field}_id", None) == request.user.id:
            return True
        email_field = getattr(view, "owner_email_field", None)
        email = (getattr(request.user, "email", "") or "").lower()
        return bool(email_field and email and (getattr(obj, email_field, "") or "").lower() == email)
