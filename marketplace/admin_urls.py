"""
Admin Marketplace URL Configuration
"""

from django.urls import path
from .admin_views import (
    AdminOrderListView,
    AdminOrderCancelView,
    AdminProductListView,
    AdminProductDeleteView,
    AdminReviewListView,
    AdminReviewDeleteView,
    AdminSuggestedPriceListCreateView,
    AdminSuggestedPriceDetailView,
)

app_name = 'marketplace_admin'

urlpatterns = [
    # Orders
    path('orders/', AdminOrderListView.as_view(), name='admin-order-list'),
    path('orders/<uuid:order_id>/cancel/', AdminOrderCancelView.as_view(), name='admin-order-cancel'),

    # Products
    path('products/', AdminProductListView.as_view(), name='admin-product-list'),
    path('products/<uuid:product_id>/', AdminProductDeleteView.as_view(), name='admin-product-delete'),

    # Reviews
    path('reviews/', AdminReviewListView.as_view(), name='admin-review-list'),
    path('reviews/<uuid:rating_id>/', AdminReviewDeleteView.as_view(), name='admin-review-delete'),

    # Suggested prices
    path('suggested-prices/', AdminSuggestedPriceListCreateView.as_view(), name='admin-suggested-price-list'),
    path('suggested-prices/<uuid:price_id>/', AdminSuggestedPriceDetailView.as_view(), name='admin-suggested-price-detail'),
]
