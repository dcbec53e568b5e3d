from django.contrib import admin

from .models import Order, Product, ProductLike, Rating, SuggestedPrice


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'seller_name', 'category', 'price_per_unit', 'unit', 'quantity', 'likes', 'created_at']
    list_filter = ['category', 'created_at']
    search_fields = ['name', 'description', 'seller_name']
    readonly_fields = ['likes', 'created_at', 'updated_at']


@admin.register(ProductLike)
class ProductLikeAdmin(admin.ModelAdmin):
    list_display = ['product', 'user', 'created_at']
    readonly_fields = ['created_at']


@admin.register(SuggestedPrice)
class SuggestedPriceAdmin(admin.ModelAdmin):
    list_display = ['product_name', 'suggested_price', 'updated_at']
    search_fields = ['product_name']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders are a permanent record. Status changes go through the API so the
    lifecycle rules apply; the admin site is read-only for them.
    """
    list_display = [
        'order_number', 'product_name', 'seller_name', 'buyer_name',
        'quantity', 'total_price', 'status', 'created_at'
    ]
    list_filter = ['status', 'created_at']
    search_fields = ['order_number', 'product_name', 'seller_name', 'buyer_name', 'buyer_email']
    readonly_fields = [
        'order_number', 'product', 'product_name', 'seller', 'seller_name',
        'buyer', 'buyer_name', 'buyer_email', 'quantity', 'unit_price',
        'total_price', 'status', 'created_at', 'delivered_at', 'cancelled_at'
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        # Orders are never deleted
        return False


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ['seller_name', 'buyer_name', 'product_name', 'stars', 'created_at']
    list_filter = ['stars', 'created_at']
    search_fields = ['seller_name', 'buyer_name', 'product_name', 'comment']
    readonly_fields = ['order', 'seller', 'buyer', 'created_at']
