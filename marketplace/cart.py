"""
Cart Store

Holds a consumer's pending purchase lines, one per product, and persists the
whole cart after every mutation so a reload never loses a confirmed change.

Lines are stored as JSON-serialisable dicts through a persistence port:
- InMemoryCartPersistence: plain list, used by tests and scripts
- SessionCartPersistence: Django session, saved synchronously on each write

The cart has a single writer (one user's browser), so no locking is done.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
import logging

from django.conf import settings

from .exceptions import CartLineNotFoundError, OutOfStockError

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    product_id: str
    product_name: str
    unit_price: Decimal
    image_ref: str
    seller_id: str
    seller_name: str
    quantity: int
    quantity_ceiling: int

    @classmethod
    def from_product(cls, product, quantity=1):
        return cls(
            product_id=str(product.pk),
            product_name=product.name,
            unit_price=Decimal(product.price_per_unit),
            image_ref=product.image_url or '',
            seller_id=str(product.seller_id),
            seller_name=product.seller_name,
            quantity=quantity,
            quantity_ceiling=product.quantity,
        )

    @classmethod
    def from_dict(cls, data):
        return cls(
            product_id=data['product_id'],
            product_name=data['product_name'],
            unit_price=Decimal(str(data['unit_price'])),
            image_ref=data.get('image_ref', ''),
            seller_id=data['seller_id'],
            seller_name=data.get('seller_name', ''),
            quantity=int(data['quantity']),
            quantity_ceiling=int(data['quantity_ceiling']),
        )

    def to_dict(self):
        data = asdict(self)
        data['unit_price'] = str(self.unit_price)
        return data

    @property
    def line_total(self):
        return self.unit_price * self.quantity


class CartPersistence:
    """Port for the cart's backing store."""

    def load(self):
        raise NotImplementedError("Subclasses must implement load()")

    def save(self, lines):
        raise NotImplementedError("Subclasses must implement save()")


class InMemoryCartPersistence(CartPersistence):

    def __init__(self, lines=None):
        self.lines = list(lines or [])
        self.save_count = 0

    def load(self):
        return list(self.lines)

    def save(self, lines):
        self.lines = list(lines)
        self.save_count += 1


class SessionCartPersistence(CartPersistence):
    """Stores the cart in the Django session under CART_SESSION_KEY."""

    def __init__(self, session, key=None):
        self.session = session
        self.key = key or getattr(settings, 'CART_SESSION_KEY', 'cart')

    def load(self):
        return list(self.session.get(self.key, []))

    def save(self, lines):
        self.session[self.key] = list(lines)
        self.session.modified = True
        self.session.save()


class CartStore:
    """
    A consumer's cart.

    Usage:
        cart = CartStore(SessionCartPersistence(request.session))
        cart.add_or_increment(product)
        cart.set_quantity(product_id, 3)
    """

    def __init__(self, persistence):
        self.persistence = persistence
        self._lines = [CartLine.from_dict(data) for data in persistence.load()]

    def _persist(self):
        self.persistence.save([line.to_dict() for line in self._lines])

    def lines(self):
        return list(self._lines)

    def get(self, product_id):
        product_id = str(product_id)
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    @property
    def is_empty(self):
        return not self._lines

    @property
    def item_count(self):
        return sum(line.quantity for line in self._lines)

    def add_or_increment(self, product):
        """
        Add one unit of ``product``.

        An existing line goes up by one, clamped to its ceiling. A new line
        starts at quantity 1.

        Raises:
            OutOfStockError: the product has no stock to sell
        """
        if product.quantity < 1:
            raise OutOfStockError(f"{product.name} is out of stock.")

        line = self.get(product.pk)
        if line is None:
            line = CartLine.from_product(product)
            self._lines.append(line)
        else:
            line.quantity = min(line.quantity + 1, line.quantity_ceiling)

        self._persist()
        return line

    def set_quantity(self, product_id, quantity):
        """
        Set a line's quantity, clamped to [1, quantity_ceiling].

        Raises:
            CartLineNotFoundError: no line for ``product_id``
        """
        line = self.get(product_id)
        if line is None:
            raise CartLineNotFoundError()

        line.quantity = max(1, min(int(quantity), line.quantity_ceiling))
        self._persist()
        return line

    def remove(self, product_id):
        product_id = str(product_id)
        self._lines = [line for line in self._lines if line.product_id != product_id]
        self._persist()

    def total(self):
        return sum((line.line_total for line in self._lines), Decimal('0'))

    def clear(self):
        self._lines = []
        self._persist()
        logger.debug("Cart cleared")
