"""
Catalog Views

Public product browsing, farmer listing management, the farmer community
feed with likes, and the suggested price list.
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsFarmer
from accounts.policies import ProductPolicy
from core.image_host_service import ImageUploadError
from .exceptions import MarketplaceError, status_code_for
from .models import Product, SuggestedPrice
from .serializers import (
    ProductDetailSerializer,
    ProductListSerializer,
    SuggestedPriceSerializer,
)
from .services.catalog import ProductCatalogService, like_product, suggested_price_for

logger = logging.getLogger(__name__)


class ProductListView(generics.ListAPIView):
    """
    Public product catalog.

    GET /api/marketplace/products/

    Query Parameters:
    - category: vegetables, fruits, grains, dairy, herbs, other
    - search: Search in product name and description
    - ordering: price_per_unit, created_at, likes
    """
    permission_classes = [AllowAny]
    serializer_class = ProductListSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category']
    search_fields = ['name', 'description']
    ordering_fields = ['price_per_unit', 'created_at', 'likes']
    ordering = ['-created_at']

    def get_queryset(self):
        return Product.objects.all()


class ProductDetailView(generics.RetrieveAPIView):
    """
    Public product detail, including the suggested price for the product name.

    GET /api/marketplace/products/<id>/
    """
    permission_classes = [AllowAny]
    serializer_class = ProductDetailSerializer
    queryset = Product.objects.all()
    lookup_url_kwarg = 'product_id'

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if 'product_id' in self.kwargs:
            product = self.get_object()
            context['suggested_prices'] = {product.name: suggested_price_for(product.name)}
        return context


class MyProductListCreateView(generics.ListCreateAPIView):
    """
    Farmer's own listings.

    GET  /api/marketplace/my-products/
    POST /api/marketplace/my-products/   (multipart when an image is attached)
    """
    permission_classes = [IsFarmer]
    serializer_class = ProductDetailSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        return Product.objects.filter(seller=self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        image = data.pop('image', None)

        try:
            product = ProductCatalogService(request.user).create_product(data, image=image)
        except ImageUploadError as e:
            return Response(
                {'error': f'Image upload failed: {str(e)}'},
                status=status.HTTP_502_BAD_GATEWAY
            )
        except MarketplaceError as e:
            return Response({'error': e.message}, status=status_code_for(e))

        return Response(
            self.get_serializer(product).data,
            status=status.HTTP_201_CREATED
        )


class MyProductDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET/PATCH/DELETE /api/marketplace/my-products/<id>/

    Farmers only see their own listings here, so another farmer's product
    is a 404.
    """
    permission_classes = [IsFarmer]
    serializer_class = ProductDetailSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    lookup_url_kwarg = 'product_id'

    def get_queryset(self):
        return Product.objects.filter(seller=self.request.user)

    def update(self, request, *args, **kwargs):
        product = self.get_object()
        serializer = self.get_serializer(
            product,
            data=request.data,
            partial=kwargs.pop('partial', False)
        )
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        image = data.pop('image', None)

        try:
            product = ProductCatalogService(request.user).update_product(product, data, image=image)
        except ImageUploadError as e:
            return Response(
                {'error': f'Image upload failed: {str(e)}'},
                status=status.HTTP_502_BAD_GATEWAY
            )
        except MarketplaceError as e:
            return Response({'error': e.message}, status=status_code_for(e))

        return Response(self.get_serializer(product).data)

    def perform_destroy(self, instance):
        if not ProductPolicy.can_delete(self.request.user, instance):
            raise PermissionDenied("Only active farmers can delete their own products.")
        logger.info(f"{self.request.user.email} deleted product {instance.name} ({instance.pk})")
        instance.delete()


class CommunityProductListView(generics.ListAPIView):
    """
    Other farmers' products, for the farmer community page.

    GET /api/marketplace/community/
    """
    permission_classes = [IsFarmer]
    serializer_class = ProductListSerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ['name', 'seller_name']

    def get_queryset(self):
        return Product.objects.exclude(seller=self.request.user).order_by('-likes', '-created_at')


class ProductLikeView(APIView):
    """
    POST /api/marketplace/community/<id>/like/
    """
    permission_classes = [IsFarmer]

    def post(self, request, product_id):
        try:
            product = Product.objects.get(pk=product_id)
        except Product.DoesNotExist:
            return Response(
                {'error': 'Product not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        try:
            product = like_product(request.user, product)
        except MarketplaceError as e:
            return Response({'error': e.message}, status=status_code_for(e))

        return Response({'id': str(product.pk), 'likes': product.likes})


class SuggestedPriceListView(generics.ListAPIView):
    """
    Suggested prices, for farmers pricing their listings.

    GET /api/marketplace/suggested-prices/
    """
    permission_classes = [IsFarmer]
    serializer_class = SuggestedPriceSerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ['product_name']
    pagination_class = None

    def get_queryset(self):
        return SuggestedPrice.objects.all()
