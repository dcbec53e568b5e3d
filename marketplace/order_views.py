"""
Order API Views

Consumers check out and cancel their own orders, farmers see the orders they
received and mark them delivered.
"""

import logging

from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsConsumer, IsFarmer, IsSignedIn
from accounts.policies import OrderPolicy, authorize
from .cart_views import cart_payload, get_cart
from .exceptions import (
    MarketplaceError,
    OrderNotFoundError,
    OrderPermissionError,
    PartialCheckoutError,
    status_code_for,
)
from .models import Order
from .serializers import OrderSerializer
from .services.order_lifecycle import OrderLifecycleService

logger = logging.getLogger(__name__)


def order_error_response(error):
    body = {'error': error.message}
    if isinstance(error, PartialCheckoutError):
        body['created_orders'] = OrderSerializer(error.created_orders, many=True).data
        body['failed_product_id'] = error.failed_line.product_id
        body['failed_product_name'] = error.failed_line.product_name
    return Response(body, status=status_code_for(error))


class CheckoutView(APIView):
    """
    POST /api/marketplace/orders/checkout/

    Turns the session cart into one pending order per line. On success the
    cart is emptied; on a partial failure the created orders are returned
    with status 502 and the cart is kept.
    """
    permission_classes = [IsConsumer]

    def post(self, request):
        cart = get_cart(request)
        service = OrderLifecycleService(request.user)

        try:
            orders = service.checkout(cart)
        except MarketplaceError as e:
            return order_error_response(e)

        return Response({
            'message': f'{len(orders)} order(s) placed',
            'orders': OrderSerializer(orders, many=True).data,
            'cart': cart_payload(cart),
        }, status=status.HTTP_201_CREATED)


class MyOrderListView(generics.ListAPIView):
    """
    GET /api/marketplace/orders/mine/

    Query Parameters:
    - status: pending, delivered, cancelled
    """
    permission_classes = [IsConsumer]
    serializer_class = OrderSerializer

    def get_queryset(self):
        queryset = OrderPolicy.scope(self.request.user, Order.objects.select_related('rating'))
        if order_status := self.request.query_params.get('status'):
            queryset = queryset.filter(status=order_status)
        return queryset.order_by('-created_at')


class ReceivedOrderListView(MyOrderListView):
    """
    GET /api/marketplace/orders/received/
    """
    permission_classes = [IsFarmer]


class OrderDetailView(APIView):
    """
    GET /api/marketplace/orders/<id>/

    Visible to the order's buyer and seller, and to admins.
    """
    permission_classes = [IsSignedIn]

    def get(self, request, order_id):
        order = Order.objects.select_related('rating').filter(pk=order_id).first()
        if order is None:
            return order_error_response(OrderNotFoundError())

        if not authorize(request.user, 'view', order):
            logger.warning(f"{request.user.email} tried to view order {order.order_number}")
            return order_error_response(OrderPermissionError("You can only view your own orders."))

        return Response(OrderSerializer(order).data)


class OrderCancelView(APIView):
    """
    POST /api/marketplace/orders/<id>/cancel/
    """
    permission_classes = [IsConsumer]

    def post(self, request, order_id):
        try:
            order = OrderLifecycleService(request.user).cancel(order_id)
        except MarketplaceError as e:
            return order_error_response(e)

        return Response({
            'message': 'Order cancelled',
            'order': OrderSerializer(order).data,
        })


class OrderDeliverView(APIView):
    """
    POST /api/marketplace/orders/<id>/deliver/
    """
    permission_classes = [IsFarmer]

    def post(self, request, order_id):
        try:
            order = OrderLifecycleService(request.user).mark_delivered(order_id)
        except MarketplaceError as e:
            return order_error_response(e)

        return Response({
            'message': 'Order marked as delivered',
            'order': OrderSerializer(order).data,
        })
