from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
import uuid


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.
    Every account carries exactly one marketplace role (consumer, farmer or admin).

    The role is fixed at signup. The account status can only be changed by an
    admin through the user management endpoints.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class UserRole(models.TextChoices):
        CONSUMER = 'consumer', 'Consumer'
        FARMER = 'farmer', 'Farmer'
        ADMIN = 'admin', 'Admin'

    class AccountStatus(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'

    email = models.EmailField(
        unique=True,
        help_text="Login identifier"
    )

    display_name = models.CharField(
        max_length=150,
        blank=True,
        help_text="Name shown to other marketplace users"
    )

    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CONSUMER,
        db_index=True,
        help_text="User's role in the marketplace (immutable after signup)"
    )

    account_status = models.CharField(
        max_length=20,
        choices=AccountStatus.choices,
        default=AccountStatus.ACTIVE,
        db_index=True,
        help_text="Managed by admins; inactive accounts cannot sign in"
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['role', 'account_status'], name='users_role_status_idx'),
        ]

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        if 'role' in field_names:
            instance._loaded_role = values[field_names.index('role')]
        return instance

    def __str__(self):
        return f"{self.get_display_name()} ({self.get_role_display()})"

    def save(self, *args, **kwargs):
        loaded_role = getattr(self, '_loaded_role', None)
        if not self._state.adding and loaded_role and self.role != loaded_role:
            raise ValidationError("A user's role cannot be changed after signup.")
        super().save(*args, **kwargs)
        self._loaded_role = self.role

    def get_display_name(self):
        """Return the display name, falling back to the full name or username."""
        if self.display_name:
            return self.display_name
        full_name = self.get_full_name()
        return full_name if full_name else self.username

    @property
    def is_consumer(self):
        return self.role == self.UserRole.CONSUMER

    @property
    def is_farmer(self):
        return self.role == self.UserRole.FARMER

    @property
    def is_marketplace_admin(self):
        return self.role == self.UserRole.ADMIN

    @property
    def is_account_active(self):
        return self.account_status == self.AccountStatus.ACTIVE
