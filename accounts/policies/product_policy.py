"""
Product Catalog Authorization Policy
"""

from .base_policy import BasePolicy


class ProductPolicy(BasePolicy):
    """Authorization policy for catalog products."""

    @classmethod
    def can_create(cls, user):
        return cls.is_farmer(user) and cls.is_active(user)

    @classmethod
    def can_edit(cls, user, product):
        """Active farmers edit their own listings only."""
        return cls.is_farmer(user) and cls.is_active(user) and product.seller_id == user.pk

    @classmethod
    def can_delete(cls, user, product):
        """
        Access Rules:
        - Active farmer: own listings
        - Admin: any listing (moderation)
        """
        if cls.is_admin(user):
            return True
        return cls.can_edit(user, product)

    @classmethod
    def can_like(cls, user, product):
        """Community likes: farmers like other farmers' products."""
        return cls.is_farmer(user) and product.seller_id != user.pk
