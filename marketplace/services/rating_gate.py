"""
Rating Gate

Decides which of a consumer's orders may be rated and records ratings.

An order is eligible when it belongs to the consumer, is delivered, and has
no rating yet. One rating per order is enforced twice: an application check
before the write, and the one-to-one ``Rating.order`` column in storage.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from accounts.policies import RatingPolicy
from ..exceptions import (
    DuplicateRatingError,
    InvalidRatingError,
    MissingRatingError,
    OrderNotFoundError,
    RatingNotAllowedError,
    RatingPermissionError,
)
from ..models import Order, Rating

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


def validate_stars(stars):
    """
    Check a star value before anything touches storage.

    Raises:
        MissingRatingError: no rating selected (None or 0)
        InvalidRatingError: not a whole number from 1 to 5
    """
    if stars is None or stars == 0:
        raise MissingRatingError()

    if isinstance(stars, bool) or not isinstance(stars, int):
        raise InvalidRatingError()

    if not MIN_STARS <= stars <= MAX_STARS:
        raise InvalidRatingError()

    return stars


class RatingGate:
    """
    Rating operations for one buyer.

    Orders rated through this instance drop out of ``eligible_orders()``
    immediately, without waiting for a re-read.
    """

    def __init__(self, buyer):
        self.buyer = buyer
        self._rated_order_ids = set()

    def eligible_orders(self):
        """The buyer's delivered orders that have no rating yet."""
        queryset = (
            Order.objects
            .filter(buyer=self.buyer, status=Order.Status.DELIVERED, rating__isnull=True)
            .order_by('-delivered_at', '-created_at')
        )
        if self._rated_order_ids:
            queryset = queryset.exclude(pk__in=self._rated_order_ids)
        return queryset

    def submit(self, order, stars, comment=''):
        """
        Rate a delivered order.

        Args:
            order: Order instance or its id
            stars: 1..5
            comment: optional free text

        Returns:
            The stored Rating
        """
        stars = validate_stars(stars)

        if not isinstance(order, Order):
            try:
                order = Order.objects.get(pk=order)
            except (Order.DoesNotExist, ValidationError, ValueError):
                raise OrderNotFoundError()

        if not RatingPolicy.can_rate(self.buyer, order):
            logger.warning(f"{self.buyer.email} tried to rate order {order.order_number}")
            raise RatingPermissionError()

        if order.status != Order.Status.DELIVERED:
            raise RatingNotAllowedError()

        if order.pk in self._rated_order_ids or Rating.objects.filter(order=order).exists():
            raise DuplicateRatingError()

        try:
            with transaction.atomic():
                rating = Rating.objects.create(
                    order=order,
                    seller_id=order.seller_id,
                    seller_name=order.seller_name,
                    buyer=self.buyer,
                    buyer_name=self.buyer.get_display_name(),
                    product_name=order.product_name,
                    stars=stars,
                    comment=(comment or '').strip(),
                )
        except IntegrityError:
            # Another request rated the same order first
            raise DuplicateRatingError()

        self._rated_order_ids.add(order.pk)

        logger.info(
            f"{self.buyer.email} rated order {order.order_number} {stars} stars"
        )
        return rating
