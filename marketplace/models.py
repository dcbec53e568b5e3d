"""
Marketplace Models

Farmers list produce, consumers order it, and consumers rate delivered orders.

Key Design Decisions:
- One Order per product line; a checkout of N cart lines writes N orders
- Orders carry name snapshots so they survive product edits and deletion
- Orders are never deleted; cancelled orders stay for reporting
- Payments happen off-platform
"""

from decimal import Decimal
import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import IntegrityError, models
from django.utils import timezone
from django.utils.crypto import get_random_string

# Uppercase alphanumerics without I or O
ORDER_NUMBER_CHARS = '0123456789ABCDEFGHJKLMNPQRSTUVWXYZ'
ORDER_NUMBER_ATTEMPTS = 10


class ProductCategory(models.TextChoices):
    VEGETABLES = 'vegetables', 'Vegetables'
    FRUITS = 'fruits', 'Fruits'
    GRAINS = 'grains', 'Grains'
    DAIRY = 'dairy', 'Dairy'
    HERBS = 'herbs', 'Herbs'
    OTHER = 'other', 'Other'


class Product(models.Model):
    """
    Marketplace product listing.

    Each product belongs to one farmer. ``quantity`` is the stock on hand and
    the ceiling for cart quantities; checkout does not decrement it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='products',
        limit_choices_to={'role': 'farmer'},
        help_text='The farmer who owns this listing'
    )
    seller_name = models.CharField(max_length=150, blank=True)

    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    category = models.CharField(
        max_length=20,
        choices=ProductCategory.choices,
        default=ProductCategory.OTHER
    )

    price_per_unit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    unit = models.CharField(max_length=20, default='kg')
    quantity = models.PositiveIntegerField(default=0)

    image_url = models.URLField(max_length=500, blank=True)
    likes = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['seller', '-created_at'], name='products_seller_created_idx'),
            models.Index(fields=['category'], name='products_category_idx'),
        ]

    def __str__(self):
        return f"{self.name} - {self.seller_name}"

    def save(self, *args, **kwargs):
        if not self.seller_name and self.seller_id:
            self.seller_name = self.seller.get_display_name()
        super().save(*args, **kwargs)

    @property
    def is_in_stock(self):
        return self.quantity > 0


class ProductLike(models.Model):
    """A farmer's like on another farmer's product. At most one per user."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='product_likes'
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='product_likes'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'product_likes'
        constraints = [
            models.UniqueConstraint(fields=['user', 'product'], name='unique_like_per_user'),
        ]


class SuggestedPrice(models.Model):
    """Admin-curated reference price, matched to products by exact name."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product_name = models.CharField(max_length=200, unique=True)
    suggested_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'suggested_prices'
        ordering = ['product_name']

    def __str__(self):
        return f"{self.product_name}: {self.suggested_price}"


class Order(models.Model):
    """
    A consumer's order for a single product line.

    Status machine: pending -> delivered | cancelled (both terminal).
    ``total_price`` is set once when the order is inserted.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        DELIVERED = 'delivered', 'Delivered'
        CANCELLED = 'cancelled', 'Cancelled'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=20, unique=True, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )
    product_name = models.CharField(max_length=200)

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='orders_received'
    )
    seller_name = models.CharField(max_length=150, blank=True)

    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='orders_placed'
    )
    buyer_name = models.CharField(max_length=150, blank=True)
    buyer_email = models.EmailField(blank=True)

    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, editable=False)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['buyer', '-created_at'], name='orders_buyer_created_idx'),
            models.Index(fields=['seller', '-created_at'], name='orders_seller_created_idx'),
            models.Index(fields=['seller', 'status'], name='orders_seller_status_idx'),
        ]

    def __str__(self):
        return f"Order {self.order_number} - {self.product_name} x {self.quantity}"

    def save(self, *args, **kwargs):
        if self._state.adding:
            if not self.order_number:
                self.order_number = self._generate_order_number()
            self.total_price = self.unit_price * self.quantity
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise models.ProtectedError("Orders cannot be deleted.", {self})

    def _generate_order_number(self):
        """
        Generate unique order number: AC-YYYYMMDD-XXXXXX

        Draws again while the number is already taken.
        """
        date_part = timezone.now().strftime('%Y%m%d')
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            random_part = get_random_string(6, allowed_chars=ORDER_NUMBER_CHARS)
            order_number = f"AC-{date_part}-{random_part}"
            if not Order.objects.filter(order_number=order_number).exists():
                return order_number

        raise IntegrityError(
            f"Could not generate a free order number after {ORDER_NUMBER_ATTEMPTS} attempts"
        )

    @property
    def is_pending(self):
        return self.status == self.Status.PENDING


class Rating(models.Model):
    """
    A consumer's 1-5 star rating of a delivered order.

    ``order`` is one-to-one, so the database rejects a second rating for the
    same order.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name='rating'
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='ratings_received'
    )
    seller_name = models.CharField(max_length=150, blank=True)
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='ratings_given'
    )
    buyer_name = models.CharField(max_length=150, blank=True)
    product_name = models.CharField(max_length=200)

    stars = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ratings'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['seller'], name='ratings_seller_idx'),
        ]

    def __str__(self):
        return f"{self.stars}* for {self.seller_name} ({self.product_name})"
