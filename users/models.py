from django.contrib.auth.models import AbstractUser
from django.db import models

from core.constants import UserRole, UserStatus


class User(AbstractUser):
    """Dashboard user - admin (full access) or viewer (read only)"""

    role = models.CharField(max_length=20, choices=UserRole.CHOICES, default=UserRole.VIEWER)
    mobile = models.CharField(max_length=15, blank=True)
    status = models.CharField(max_length=20, choices=UserStatus.CHOICES, default=UserStatus.ACTIVE)

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ['username']

    def save(self, *args, **kwargs):
        # Suspended users cannot authenticate
        self.is_active = self.status == UserStatus.ACTIVE
        super().save(*args, **kwargs)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN or self.is_superuser

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"
