"""
User Management Authorization Policy

Defines access control rules for user management.
"""

from .base_policy import BasePolicy


class UserPolicy(BasePolicy):
    """Authorization policy for User model."""

    @classmethod
    def scope(cls, user, queryset):
        if cls.is_admin(user):
            return queryset
        if cls.is_signed_in(user):
            return queryset.filter(pk=user.pk)
        return queryset.none()

    @classmethod
    def can_change_status(cls, user, target_user):
        """
        Only admins can activate or deactivate accounts, and never their own
        (an admin cannot lock themselves out).
        """
        return cls.is_admin(user) and user.pk != target_user.pk

    @classmethod
    def editable_fields(cls, user, target_user):
        """
        Get list of fields user can edit on target user.

        The role is never editable; it is fixed at signup.
        """
        if cls.is_signed_in(user) and user.pk == target_user.pk:
            return ['display_name', 'first_name', 'last_name']
        return []
