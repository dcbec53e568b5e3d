"""
Base Policy Class

Provides common authorization methods for all policy classes.
"""


class BasePolicy:
    """
    Base class for all authorization policies.
    Provides helper methods for common role checks.
    """

    @staticmethod
    def is_signed_in(user):
        return bool(user and user.is_authenticated)

    @staticmethod
    def is_admin(user):
        """Check if user is a marketplace admin."""
        return BasePolicy.is_signed_in(user) and user.role == 'admin'

    @staticmethod
    def is_farmer(user):
        """Check if user is a farmer (seller)."""
        return BasePolicy.is_signed_in(user) and user.role == 'farmer'

    @staticmethod
    def is_consumer(user):
        """Check if user is a consumer (buyer)."""
        return BasePolicy.is_signed_in(user) and user.role == 'consumer'

    @staticmethod
    def is_active(user):
        return BasePolicy.is_signed_in(user) and user.account_status == 'active'

    @classmethod
    def scope(cls, user, queryset):
        """
        Filter queryset based on user's access level.
        Override in subclasses for model-specific scoping.

        Args:
            user: User instance
            queryset: Base queryset to filter

        Returns:
            Filtered queryset
        """
        raise NotImplementedError("Subclasses must implement scope() method")
