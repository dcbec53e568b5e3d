"""
Order Lifecycle Manager

Turns a consumer's cart into orders and moves orders through their status
machine:

    pending -> delivered   (seller)
    pending -> cancelled   (buyer or admin)

Both end states are terminal.

Checkout writes one order per cart line, in cart order, each in its own
savepoint. It is not atomic as a whole: when a write fails part way, the
orders already written are kept, the cart is left as it was, and
PartialCheckoutError reports both. The cart is cleared only after every
order was written.

Status changes are compare-and-set updates filtered on the expected current
status, so two actors racing on the same order cannot both win.
"""

from typing import Dict, List
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from accounts.policies import OrderPolicy
from ..exceptions import (
    EmptyCartError,
    InvalidOrderTransitionError,
    OrderNotFoundError,
    OrderPermissionError,
    PartialCheckoutError,
)
from ..models import Order, Product

logger = logging.getLogger(__name__)


# Valid status transitions for Order
ORDER_STATUS_TRANSITIONS = {
    Order.Status.PENDING: [Order.Status.DELIVERED, Order.Status.CANCELLED],
    Order.Status.DELIVERED: [],  # Terminal state
    Order.Status.CANCELLED: [],  # Terminal state
}


def validate_status_transition(current_status: str, new_status: str,
                               transitions: Dict[str, List[str]] = ORDER_STATUS_TRANSITIONS) -> bool:
    """
    Validate that a status transition is allowed.

    Args:
        current_status: Current status of the order
        new_status: Proposed new status
        transitions: Dict mapping status to list of valid next statuses

    Returns:
        True if transition is valid

    Raises:
        InvalidOrderTransitionError if transition is invalid
    """
    valid_transitions = transitions.get(current_status, [])

    if new_status not in valid_transitions:
        raise InvalidOrderTransitionError(
            f"Order is {current_status} and cannot be marked {new_status}."
        )

    return True


class OrderLifecycleService:
    """
    Order operations on behalf of one actor.

    Usage:
        service = OrderLifecycleService(request.user)
        orders = service.checkout(cart)
        service.mark_delivered(order_id)
    """

    def __init__(self, actor):
        self.actor = actor

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def checkout(self, cart):
        """
        Create one pending order per cart line.

        Args:
            cart: marketplace.cart.CartStore

        Returns:
            List of created orders, in cart order

        Raises:
            OrderPermissionError: actor is not an active consumer
            EmptyCartError: nothing to check out (no writes happen)
            PartialCheckoutError: a write failed; earlier orders are kept
        """
        if not OrderPolicy.can_checkout(self.actor):
            raise OrderPermissionError("Only active consumers can check out.")

        lines = cart.lines()
        if not lines:
            raise EmptyCartError()

        created = []
        for line in lines:
            try:
                with transaction.atomic():
                    order = self._create_order(line)
            except DatabaseError as e:
                logger.error(
                    f"Checkout for {self.actor.email} failed on {line.product_name} "
                    f"after {len(created)} of {len(lines)} orders: {str(e)}"
                )
                raise PartialCheckoutError(created, line) from e
            created.append(order)

        cart.clear()

        logger.info(f"Checkout by {self.actor.email}: {len(created)} orders placed")
        return created

    def _create_order(self, line):
        product = Product.objects.filter(pk=line.product_id).first()

        return Order.objects.create(
            product=product,
            product_name=line.product_name,
            seller_id=line.seller_id,
            seller_name=line.seller_name,
            buyer=self.actor,
            buyer_name=self.actor.get_display_name(),
            buyer_email=self.actor.email,
            quantity=line.quantity,
            unit_price=line.unit_price,
            status=Order.Status.PENDING,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def cancel(self, order_id):
        """
        Cancel a pending order. Buyer (own orders) or admin.
        """
        order = self._get_order(order_id)

        if not OrderPolicy.can_cancel(self.actor, order):
            logger.warning(f"{self.actor.email} tried to cancel order {order.order_number}")
            raise OrderPermissionError("You can only cancel your own orders.")

        return self._transition(order, Order.Status.CANCELLED, 'cancelled_at')

    def mark_delivered(self, order_id):
        """
        Mark a pending order delivered. The order's seller only.
        """
        order = self._get_order(order_id)

        if not OrderPolicy.can_mark_delivered(self.actor, order):
            logger.warning(f"{self.actor.email} tried to deliver order {order.order_number}")
            raise OrderPermissionError("Only the seller can mark this order delivered.")

        return self._transition(order, Order.Status.DELIVERED, 'delivered_at')

    def _get_order(self, order_id):
        try:
            return Order.objects.get(pk=order_id)
        except (Order.DoesNotExist, ValidationError, ValueError):
            raise OrderNotFoundError()

    def _transition(self, order, new_status, timestamp_field):
        expected_status = order.status
        validate_status_transition(expected_status, new_status)

        updated = Order.objects.filter(
            pk=order.pk,
            status=expected_status
        ).update(status=new_status, **{timestamp_field: timezone.now()})

        order.refresh_from_db()

        if not updated:
            logger.warning(
                f"Order {order.order_number} changed to {order.status} before "
                f"{self.actor.email} could mark it {new_status}"
            )
            raise InvalidOrderTransitionError(
                f"Order is already {order.status}."
            )

        logger.info(f"Order {order.order_number}: {expected_status} -> {new_status} by {self.actor.email}")
        return order
