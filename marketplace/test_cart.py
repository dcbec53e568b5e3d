"""
Tests for the cart store and its persistence adapters.
"""
from decimal import Decimal
from types import SimpleNamespace
import uuid

import pytest

from marketplace.cart import (
    CartStore,
    InMemoryCartPersistence,
    SessionCartPersistence,
)
from marketplace.exceptions import CartLineNotFoundError, OutOfStockError


def make_product(name='Tomato', price='2.00', quantity=5):
    return SimpleNamespace(
        pk=uuid.uuid4(),
        name=name,
        price_per_unit=Decimal(price),
        image_url='https://img.test/tomato.jpg',
        seller_id=uuid.uuid4(),
        seller_name='Yaw Farms',
        quantity=quantity,
    )


@pytest.fixture
def persistence():
    return InMemoryCartPersistence()


@pytest.fixture
def cart(persistence):
    return CartStore(persistence)


class TestAddOrIncrement:

    def test_new_line_starts_at_one(self, cart):
        product = make_product()

        line = cart.add_or_increment(product)

        assert line.quantity == 1
        assert line.quantity_ceiling == 5
        assert len(cart.lines()) == 1

    def test_existing_line_increments(self, cart):
        product = make_product()

        cart.add_or_increment(product)
        cart.add_or_increment(product)

        assert cart.get(product.pk).quantity == 2
        assert len(cart.lines()) == 1

    def test_increment_clamped_to_ceiling(self, cart):
        product = make_product(quantity=2)

        for _ in range(5):
            cart.add_or_increment(product)

        assert cart.get(product.pk).quantity == 2

    def test_out_of_stock_rejected_without_persisting(self, cart, persistence):
        with pytest.raises(OutOfStockError):
            cart.add_or_increment(make_product(quantity=0))

        assert cart.is_empty
        assert persistence.save_count == 0

    def test_every_mutation_persists(self, cart, persistence):
        product = make_product()

        cart.add_or_increment(product)
        cart.set_quantity(product.pk, 3)
        cart.remove(product.pk)

        assert persistence.save_count == 3
        assert persistence.lines == []


class TestSetQuantity:

    @pytest.mark.parametrize('requested, expected', [
        (-10, 1),
        (0, 1),
        (1, 1),
        (3, 3),
        (5, 5),
        (6, 5),
        (1000, 5),
    ])
    def test_clamped_to_range(self, cart, requested, expected):
        product = make_product(quantity=5)
        cart.add_or_increment(product)

        line = cart.set_quantity(product.pk, requested)

        assert line.quantity == expected

    def test_unknown_line(self, cart):
        with pytest.raises(CartLineNotFoundError):
            cart.set_quantity(uuid.uuid4(), 2)


class TestRemoveClearTotal:

    def test_remove_unknown_is_noop(self, cart):
        cart.add_or_increment(make_product())

        cart.remove(uuid.uuid4())

        assert len(cart.lines()) == 1

    def test_total_is_sum_of_lines(self, cart):
        tomato = make_product('Tomato', '2.00', 10)
        rice = make_product('Rice', '5.00', 10)
        cart.add_or_increment(tomato)
        cart.set_quantity(tomato.pk, 3)
        cart.add_or_increment(rice)
        cart.set_quantity(rice.pk, 2)

        assert cart.total() == Decimal('16.00')
        assert cart.item_count == 5

    def test_total_independent_of_line_order(self):
        products = [make_product(f'P{i}', f'{i}.25', 10) for i in range(1, 4)]

        forward = CartStore(InMemoryCartPersistence())
        backward = CartStore(InMemoryCartPersistence())
        for product in products:
            forward.add_or_increment(product)
        for product in reversed(products):
            backward.add_or_increment(product)

        assert forward.total() == backward.total() == Decimal('6.75')

    def test_empty_total_is_zero(self, cart):
        assert cart.total() == Decimal('0')

    def test_clear(self, cart, persistence):
        cart.add_or_increment(make_product())

        cart.clear()

        assert cart.is_empty
        assert persistence.lines == []


class TestReload:

    def test_cart_survives_reload(self, persistence):
        product = make_product(price='3.50')
        CartStore(persistence).add_or_increment(product)

        reloaded = CartStore(persistence)

        line = reloaded.get(product.pk)
        assert line.quantity == 1
        assert line.unit_price == Decimal('3.50')

    def test_session_persistence_saves_immediately(self):
        class FakeSession(dict):
            modified = False
            saves = 0

            def save(self):
                self.saves += 1

        session = FakeSession()
        cart = CartStore(SessionCartPersistence(session, key='cart'))

        cart.add_or_increment(make_product())

        assert session.saves == 1
        assert len(session['cart']) == 1
        assert CartStore(SessionCartPersistence(session, key='cart')).item_count == 1
