from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_USER = "user"
    ROLE_GUIDE = "guide"
    ROLE_LEAD_GUIDE = "lead-guide"
    ROLE_ADMIN = "admin"
    ROLES = [
        (ROLE_USER, "User"),
        (ROLE_GUIDE, "Guide"),
        (ROLE_LEAD_GUIDE, "Lead guide"),
        (ROLE_ADMIN, "Admin"),
    ]

    display_name = models.CharField(max_length=120, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    role = models.CharField(max_length=20, choices=ROLES, default=ROLE_USER)

    @property
    def is_site_admin(self) -> bool:
        return self.is_superuser or self.role == self.ROLE_ADMIN

    @property
    def is_booking_staff(self) -> bool:
        return self.is_site_admin or self.role == self.ROLE_LEAD_GUIDE
