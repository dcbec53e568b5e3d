"""
Marketplace Serializers

Serializers for products, the cart, orders, ratings and suggested prices.
Ownership fields (seller, buyer) are never writable; views fill them from the
request user.
"""

from rest_framework import serializers

from .models import Order, Product, Rating, SuggestedPrice


class ProductListSerializer(serializers.ModelSerializer):
    """
    Lightweight serializer for product list views.
    """
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    is_in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'category', 'category_display',
            'price_per_unit', 'unit', 'quantity', 'is_in_stock',
            'image_url', 'likes', 'seller', 'seller_name', 'created_at'
        ]
        read_only_fields = fields


class ProductDetailSerializer(serializers.ModelSerializer):
    """
    Full serializer for product detail/create/update.

    The seller is read-only and set from the request user. ``image`` is an
    optional upload; the stored value is the image host URL.
    """
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    is_in_stock = serializers.BooleanField(read_only=True)
    suggested_price = serializers.SerializerMethodField()
    image = serializers.ImageField(write_only=True, required=False)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'description', 'category', 'category_display',
            'price_per_unit', 'unit', 'quantity', 'is_in_stock',
            'image_url', 'image', 'likes', 'suggested_price',
            'seller', 'seller_name', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'image_url', 'likes', 'seller', 'seller_name',
            'created_at', 'updated_at'
        ]

    def get_suggested_price(self, obj):
        suggested = self.context.get('suggested_prices', {}).get(obj.name)
        return str(suggested) if suggested is not None else None


class CartLineSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    product_name = serializers.CharField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    image_ref = serializers.CharField(allow_blank=True)
    seller_id = serializers.CharField()
    seller_name = serializers.CharField(allow_blank=True)
    quantity = serializers.IntegerField()
    quantity_ceiling = serializers.IntegerField()
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartAddSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()


class CartQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class OrderSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    is_rated = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'product', 'product_name',
            'seller', 'seller_name', 'buyer', 'buyer_name', 'buyer_email',
            'quantity', 'unit_price', 'total_price',
            'status', 'status_display', 'is_rated',
            'created_at', 'delivered_at', 'cancelled_at'
        ]
        read_only_fields = fields

    def get_is_rated(self, obj):
        return hasattr(obj, 'rating')


class RatingSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source='order.order_number', read_only=True)

    class Meta:
        model = Rating
        fields = [
            'id', 'order', 'order_number', 'seller', 'seller_name',
            'buyer', 'buyer_name', 'product_name', 'stars', 'comment',
            'created_at'
        ]
        read_only_fields = fields


class RatingSubmitSerializer(serializers.Serializer):
    """
    Stars are validated by the rating gate so that a missing rating and an
    out-of-range rating get their own messages.
    """
    order_id = serializers.UUIDField()
    stars = serializers.IntegerField(required=False, allow_null=True)
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class SuggestedPriceSerializer(serializers.ModelSerializer):

    class Meta:
        model = SuggestedPrice
        fields = ['id', 'product_name', 'suggested_price', 'updated_at']
        read_only_fields = ['id', 'updated_at']
        extra_kwargs = {
            # Duplicates are rejected by create_suggested_price
            'product_name': {'validators': []},
        }
