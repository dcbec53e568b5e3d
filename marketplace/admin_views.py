"""
Admin Marketplace Views

Oversight endpoints for admins:
- Orders: list, search, filter by status, cancel
- Products: list, search, delete
- Reviews: list, search, delete
- Suggested prices: create, update, delete
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdmin
from accounts.policies import OrderPolicy, ProductPolicy, RatingPolicy
from .exceptions import MarketplaceError, status_code_for
from .models import Order, Product, Rating, SuggestedPrice
from .order_views import order_error_response
from .serializers import (
    OrderSerializer,
    ProductListSerializer,
    RatingSerializer,
    SuggestedPriceSerializer,
)
from .services.catalog import create_suggested_price
from .services.order_lifecycle import OrderLifecycleService

logger = logging.getLogger(__name__)


class AdminOrderListView(generics.ListAPIView):
    """
    GET /api/admin/marketplace/orders/

    Query Parameters:
    - status: pending, delivered, cancelled
    - search: product name, seller name, buyer name or buyer email
    - ordering: created_at, total_price
    """
    permission_classes = [IsAdmin]
    serializer_class = OrderSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status']
    search_fields = ['product_name', 'seller_name', 'buyer_name', 'buyer_email', 'order_number']
    ordering_fields = ['created_at', 'total_price']
    ordering = ['-created_at']

    def get_queryset(self):
        return OrderPolicy.scope(self.request.user, Order.objects.select_related('rating'))


class AdminOrderCancelView(APIView):
    """
    POST /api/admin/marketplace/orders/<id>/cancel/
    """
    permission_classes = [IsAdmin]

    def post(self, request, order_id):
        try:
            order = OrderLifecycleService(request.user).cancel(order_id)
        except MarketplaceError as e:
            return order_error_response(e)

        return Response({
            'message': 'Order cancelled',
            'order': OrderSerializer(order).data,
        })


class AdminProductListView(generics.ListAPIView):
    """
    GET /api/admin/marketplace/products/
    """
    permission_classes = [IsAdmin]
    serializer_class = ProductListSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category']
    search_fields = ['name', 'seller_name']
    ordering_fields = ['created_at', 'price_per_unit', 'likes']
    ordering = ['-created_at']

    def get_queryset(self):
        return Product.objects.all()


class AdminProductDeleteView(APIView):
    """
    DELETE /api/admin/marketplace/products/<id>/

    Orders for the product keep their snapshot and lose the product link.
    """
    permission_classes = [IsAdmin]

    def delete(self, request, product_id):
        try:
            product = Product.objects.get(pk=product_id)
        except Product.DoesNotExist:
            return Response(
                {'error': 'Product not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        if not ProductPolicy.can_delete(request.user, product):
            return Response(
                {'error': 'You cannot delete this product'},
                status=status.HTTP_403_FORBIDDEN
            )

        logger.info(f"Admin {request.user.email} deleted product {product.name} ({product.pk})")
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminReviewListView(generics.ListAPIView):
    """
    GET /api/admin/marketplace/reviews/
    """
    permission_classes = [IsAdmin]
    serializer_class = RatingSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['stars']
    search_fields = ['product_name', 'seller_name', 'buyer_name', 'comment']
    ordering_fields = ['created_at', 'stars']
    ordering = ['-created_at']

    def get_queryset(self):
        return RatingPolicy.scope(self.request.user, Rating.objects.select_related('order'))


class AdminReviewDeleteView(APIView):
    """
    DELETE /api/admin/marketplace/reviews/<id>/

    The order becomes eligible for rating again.
    """
    permission_classes = [IsAdmin]

    def delete(self, request, rating_id):
        try:
            rating = Rating.objects.get(pk=rating_id)
        except Rating.DoesNotExist:
            return Response(
                {'error': 'Review not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        if not RatingPolicy.can_delete(request.user, rating):
            return Response(
                {'error': 'You cannot delete this review'},
                status=status.HTTP_403_FORBIDDEN
            )

        logger.info(f"Admin {request.user.email} deleted review {rating.pk} for {rating.seller_name}")
        rating.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminSuggestedPriceListCreateView(generics.ListCreateAPIView):
    """
    GET  /api/admin/marketplace/suggested-prices/
    POST /api/admin/marketplace/suggested-prices/
    """
    permission_classes = [IsAdmin]
    serializer_class = SuggestedPriceSerializer
    pagination_class = None

    def get_queryset(self):
        return SuggestedPrice.objects.all()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            suggestion = create_suggested_price(
                serializer.validated_data['product_name'],
                serializer.validated_data['suggested_price']
            )
        except MarketplaceError as e:
            return Response({'error': e.message}, status=status_code_for(e))

        return Response(
            self.get_serializer(suggestion).data,
            status=status.HTTP_201_CREATED
        )


class AdminSuggestedPriceDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET/PATCH/DELETE /api/admin/marketplace/suggested-prices/<id>/
    """
    permission_classes = [IsAdmin]
    serializer_class = SuggestedPriceSerializer
    queryset = SuggestedPrice.objects.all()
    lookup_url_kwarg = 'price_id'

    def perform_update(self, serializer):
        product_name = serializer.validated_data.get('product_name')
        if product_name and SuggestedPrice.objects.filter(
            product_name=product_name
        ).exclude(pk=serializer.instance.pk).exists():
            raise ValidationError({'error': 'A suggested price for this product already exists.'})
        serializer.save()
