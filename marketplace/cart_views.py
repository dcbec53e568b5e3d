"""
Cart API Views (consumer only)

The cart lives in the consumer's Django session and is saved on every change.
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsConsumer
from .cart import CartStore, SessionCartPersistence
from .exceptions import MarketplaceError, status_code_for
from .models import Product
from .serializers import CartAddSerializer, CartLineSerializer, CartQuantitySerializer


def get_cart(request):
    return CartStore(SessionCartPersistence(request.session))


def cart_payload(cart):
    lines = [dict(line.to_dict(), line_total=line.line_total) for line in cart.lines()]
    return {
        'lines': CartLineSerializer(lines, many=True).data,
        'item_count': cart.item_count,
        'total': str(cart.total()),
    }


class CartView(APIView):
    """
    GET    /api/marketplace/cart/        Cart lines and total
    POST   /api/marketplace/cart/        Add one unit of a product
    DELETE /api/marketplace/cart/        Empty the cart
    """
    permission_classes = [IsConsumer]

    def get(self, request):
        return Response(cart_payload(get_cart(request)))

    def post(self, request):
        serializer = CartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            product = Product.objects.get(pk=serializer.validated_data['product_id'])
        except Product.DoesNotExist:
            return Response(
                {'error': 'Product not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        cart = get_cart(request)
        try:
            cart.add_or_increment(product)
        except MarketplaceError as e:
            return Response({'error': e.message}, status=status_code_for(e))

        return Response(cart_payload(cart), status=status.HTTP_200_OK)

    def delete(self, request):
        cart = get_cart(request)
        cart.clear()
        return Response(cart_payload(cart))


class CartLineView(APIView):
    """
    PATCH  /api/marketplace/cart/<product_id>/   Set quantity (clamped to stock)
    DELETE /api/marketplace/cart/<product_id>/   Remove the line
    """
    permission_classes = [IsConsumer]

    def patch(self, request, product_id):
        serializer = CartQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = get_cart(request)
        try:
            cart.set_quantity(product_id, serializer.validated_data['quantity'])
        except MarketplaceError as e:
            return Response({'error': e.message}, status=status_code_for(e))

        return Response(cart_payload(cart))

    def delete(self, request, product_id):
        cart = get_cart(request)
        cart.remove(product_id)
        return Response(cart_payload(cart))
