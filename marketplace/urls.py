from django.urls import path

from .views import (
    ProductListView,
    ProductDetailView,
    MyProductListCreateView,
    MyProductDetailView,
    CommunityProductListView,
    ProductLikeView,
    SuggestedPriceListView,
)
from .cart_views import CartView, CartLineView
from .order_views import (
    CheckoutView,
    MyOrderListView,
    ReceivedOrderListView,
    OrderDetailView,
    OrderCancelView,
    OrderDeliverView,
)
from .rating_views import EligibleOrdersView, RatingSubmitView

app_name = 'marketplace'

urlpatterns = [
    # Public catalog
    path('products/', ProductListView.as_view(), name='product-list'),
    path('products/<uuid:product_id>/', ProductDetailView.as_view(), name='product-detail'),

    # Farmer listings
    path('my-products/', MyProductListCreateView.as_view(), name='my-product-list'),
    path('my-products/<uuid:product_id>/', MyProductDetailView.as_view(), name='my-product-detail'),
    path('suggested-prices/', SuggestedPriceListView.as_view(), name='suggested-price-list'),

    # Farmer community
    path('community/', CommunityProductListView.as_view(), name='community-list'),
    path('community/<uuid:product_id>/like/', ProductLikeView.as_view(), name='product-like'),

    # Cart
    path('cart/', CartView.as_view(), name='cart'),
    path('cart/<uuid:product_id>/', CartLineView.as_view(), name='cart-line'),

    # Orders
    path('orders/checkout/', CheckoutView.as_view(), name='checkout'),
    path('orders/mine/', MyOrderListView.as_view(), name='my-orders'),
    path('orders/received/', ReceivedOrderListView.as_view(), name='received-orders'),
    path('orders/<uuid:order_id>/', OrderDetailView.as_view(), name='order-detail'),
    path('orders/<uuid:order_id>/cancel/', OrderCancelView.as_view(), name='order-cancel'),
    path('orders/<uuid:order_id>/deliver/', OrderDeliverView.as_view(), name='order-deliver'),

    # Ratings
    path('ratings/', RatingSubmitView.as_view(), name='rating-submit'),
    path('ratings/eligible/', EligibleOrdersView.as_view(), name='rating-eligible'),
]
