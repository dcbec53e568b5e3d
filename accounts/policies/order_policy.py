"""
Order & Rating Authorization Policy

Defines which actor may perform which order lifecycle transition.
"""

from .base_policy import BasePolicy


class OrderPolicy(BasePolicy):
    """Authorization policy for marketplace orders."""

    @classmethod
    def scope(cls, user, queryset):
        """
        Access Rules:
        - Admin: all orders
        - Farmer: orders received (seller)
        - Consumer: orders placed (buyer)
        """
        if cls.is_admin(user):
            return queryset
        if cls.is_farmer(user):
            return queryset.filter(seller=user)
        if cls.is_consumer(user):
            return queryset.filter(buyer=user)
        return queryset.none()

    @classmethod
    def can_view(cls, user, order):
        if cls.is_admin(user):
            return True
        return cls.is_signed_in(user) and user.pk in (order.buyer_id, order.seller_id)

    @classmethod
    def can_checkout(cls, user):
        """Only active consumers can turn a cart into orders."""
        return cls.is_consumer(user) and cls.is_active(user)

    @classmethod
    def can_cancel(cls, user, order):
        """
        Access Rules:
        - Admin: any order
        - Consumer: own orders only
        - Farmer: never (farmers can only mark delivered)
        """
        if cls.is_admin(user):
            return True
        return cls.is_consumer(user) and order.buyer_id == user.pk

    @classmethod
    def can_mark_delivered(cls, user, order):
        """Only the seller who owns the order."""
        return cls.is_farmer(user) and order.seller_id == user.pk


class RatingPolicy(BasePolicy):
    """Authorization policy for seller ratings."""

    @classmethod
    def scope(cls, user, queryset):
        if cls.is_admin(user):
            return queryset
        if cls.is_farmer(user):
            return queryset.filter(seller=user)
        if cls.is_consumer(user):
            return queryset.filter(buyer=user)
        return queryset.none()

    @classmethod
    def can_rate(cls, user, order):
        """Only the consumer who bought the order."""
        return cls.is_consumer(user) and order.buyer_id == user.pk

    @classmethod
    def can_delete(cls, user, rating):
        """Review moderation is admin only."""
        return cls.is_admin(user)
