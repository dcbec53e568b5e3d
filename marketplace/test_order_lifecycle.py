"""
Tests for checkout and order status transitions.
"""
from decimal import Decimal
from unittest.mock import patch
import re

import pytest
from django.db import DatabaseError
from django.db.models import ProtectedError

from marketplace.cart import CartStore, InMemoryCartPersistence
from marketplace.exceptions import (
    EmptyCartError,
    InvalidOrderTransitionError,
    OrderNotFoundError,
    OrderPermissionError,
    PartialCheckoutError,
)
from marketplace.models import Order
from marketplace.services.order_lifecycle import (
    ORDER_STATUS_TRANSITIONS,
    OrderLifecycleService,
    validate_status_transition,
)


@pytest.fixture
def cart(product, other_product):
    cart = CartStore(InMemoryCartPersistence())
    cart.add_or_increment(product)
    cart.set_quantity(product.pk, 3)
    cart.add_or_increment(other_product)
    cart.set_quantity(other_product.pk, 2)
    return cart


@pytest.fixture
def pending_order(db, consumer, farmer, product):
    return Order.objects.create(
        product=product,
        product_name=product.name,
        seller=farmer,
        seller_name=farmer.display_name,
        buyer=consumer,
        buyer_name=consumer.display_name,
        buyer_email=consumer.email,
        quantity=2,
        unit_price=Decimal('2.00'),
    )


class TestStatusMachine:

    def test_pending_moves_to_either_end_state(self):
        assert validate_status_transition('pending', 'delivered')
        assert validate_status_transition('pending', 'cancelled')

    @pytest.mark.parametrize('current', ['delivered', 'cancelled'])
    @pytest.mark.parametrize('new', ['pending', 'delivered', 'cancelled'])
    def test_end_states_are_terminal(self, current, new):
        with pytest.raises(InvalidOrderTransitionError):
            validate_status_transition(current, new)

    def test_table_covers_every_status(self):
        assert set(ORDER_STATUS_TRANSITIONS) == set(Order.Status.values)


@pytest.mark.django_db
class TestCheckout:

    def test_one_order_per_line(self, consumer, farmer, other_farmer, cart):
        orders = OrderLifecycleService(consumer).checkout(cart)

        assert len(orders) == 2
        tomato, rice = orders
        assert tomato.product_name == 'Tomato'
        assert tomato.total_price == Decimal('6.00')
        assert tomato.seller == farmer
        assert rice.product_name == 'Rice'
        assert rice.total_price == Decimal('10.00')
        assert rice.seller == other_farmer
        assert all(order.status == 'pending' for order in orders)
        assert all(order.buyer_email == consumer.email for order in orders)
        assert cart.is_empty

    def test_order_number_format(self, consumer, cart):
        orders = OrderLifecycleService(consumer).checkout(cart)

        assert re.match(r'^AC-\d{8}-[0-9A-HJ-NP-Z]{6}$', orders[0].order_number)

    def test_order_number_clash_draws_again(self, consumer, cart):
        with patch('marketplace.models.get_random_string', side_effect=['AAAAAA', 'AAAAAA', 'BBBBBB']):
            orders = OrderLifecycleService(consumer).checkout(cart)

        assert [order.order_number[-6:] for order in orders] == ['AAAAAA', 'BBBBBB']
        assert cart.is_empty

    def test_order_number_gives_up_after_repeated_clashes(self, consumer, cart):
        with patch('marketplace.models.get_random_string', return_value='AAAAAA'):
            with pytest.raises(PartialCheckoutError):
                OrderLifecycleService(consumer).checkout(cart)

        assert Order.objects.count() == 1
        assert len(cart.lines()) == 2

    def test_empty_cart_writes_nothing(self, consumer):
        with pytest.raises(EmptyCartError):
            OrderLifecycleService(consumer).checkout(CartStore(InMemoryCartPersistence()))

        assert Order.objects.count() == 0

    def test_farmer_cannot_check_out(self, farmer, cart):
        with pytest.raises(OrderPermissionError):
            OrderLifecycleService(farmer).checkout(cart)

        assert Order.objects.count() == 0

    def test_inactive_consumer_cannot_check_out(self, consumer, cart):
        consumer.account_status = 'inactive'
        consumer.save()

        with pytest.raises(OrderPermissionError):
            OrderLifecycleService(consumer).checkout(cart)

    def test_partial_failure_keeps_created_orders_and_cart(self, consumer, cart):
        original = OrderLifecycleService._create_order
        calls = []

        def fail_on_second(service, line):
            calls.append(line.product_name)
            if len(calls) == 2:
                raise DatabaseError('store unavailable')
            return original(service, line)

        with patch.object(OrderLifecycleService, '_create_order', autospec=True, side_effect=fail_on_second):
            with pytest.raises(PartialCheckoutError) as exc_info:
                OrderLifecycleService(consumer).checkout(cart)

        error = exc_info.value
        assert [order.product_name for order in error.created_orders] == ['Tomato']
        assert error.failed_line.product_name == 'Rice'
        assert Order.objects.count() == 1
        assert len(cart.lines()) == 2

    def test_deleted_product_still_checks_out(self, consumer, cart, product):
        product.delete()

        orders = OrderLifecycleService(consumer).checkout(cart)

        assert orders[0].product is None
        assert orders[0].product_name == 'Tomato'

    def test_total_price_fixed_at_insert(self, pending_order):
        pending_order.unit_price = Decimal('100.00')
        pending_order.save()
        pending_order.refresh_from_db()

        assert pending_order.total_price == Decimal('4.00')

    def test_orders_cannot_be_deleted(self, pending_order):
        with pytest.raises(ProtectedError):
            pending_order.delete()


@pytest.mark.django_db
class TestTransitions:

    def test_buyer_cancels(self, consumer, pending_order):
        order = OrderLifecycleService(consumer).cancel(pending_order.pk)

        assert order.status == 'cancelled'
        assert order.cancelled_at is not None

    def test_admin_cancels_any_order(self, admin_user, pending_order):
        order = OrderLifecycleService(admin_user).cancel(pending_order.pk)

        assert order.status == 'cancelled'

    def test_other_consumer_cannot_cancel(self, other_consumer, pending_order):
        with pytest.raises(OrderPermissionError):
            OrderLifecycleService(other_consumer).cancel(pending_order.pk)

        pending_order.refresh_from_db()
        assert pending_order.status == 'pending'

    def test_seller_cannot_cancel(self, farmer, pending_order):
        with pytest.raises(OrderPermissionError):
            OrderLifecycleService(farmer).cancel(pending_order.pk)

    def test_seller_marks_delivered(self, farmer, pending_order):
        order = OrderLifecycleService(farmer).mark_delivered(pending_order.pk)

        assert order.status == 'delivered'
        assert order.delivered_at is not None

    def test_other_farmer_cannot_deliver(self, other_farmer, pending_order):
        with pytest.raises(OrderPermissionError):
            OrderLifecycleService(other_farmer).mark_delivered(pending_order.pk)

    def test_cancel_delivered_order_fails_and_keeps_status(self, consumer, farmer, pending_order):
        OrderLifecycleService(farmer).mark_delivered(pending_order.pk)

        with pytest.raises(InvalidOrderTransitionError):
            OrderLifecycleService(consumer).cancel(pending_order.pk)

        pending_order.refresh_from_db()
        assert pending_order.status == 'delivered'

    def test_deliver_cancelled_order_fails_and_keeps_status(self, consumer, farmer, pending_order):
        OrderLifecycleService(consumer).cancel(pending_order.pk)

        with pytest.raises(InvalidOrderTransitionError):
            OrderLifecycleService(farmer).mark_delivered(pending_order.pk)

        pending_order.refresh_from_db()
        assert pending_order.status == 'cancelled'

    def test_stale_read_loses_the_race(self, consumer, farmer, pending_order):
        service = OrderLifecycleService(farmer)
        stale = Order.objects.get(pk=pending_order.pk)

        # The buyer cancels after the farmer's copy was read
        OrderLifecycleService(consumer).cancel(pending_order.pk)

        with patch.object(OrderLifecycleService, '_get_order', return_value=stale):
            with pytest.raises(InvalidOrderTransitionError):
                service.mark_delivered(pending_order.pk)

        assert stale.status == 'cancelled'
        pending_order.refresh_from_db()
        assert pending_order.status == 'cancelled'
        assert pending_order.delivered_at is None

    def test_unknown_order(self, consumer):
        with pytest.raises(OrderNotFoundError):
            OrderLifecycleService(consumer).cancel('00000000-0000-0000-0000-000000000000')
