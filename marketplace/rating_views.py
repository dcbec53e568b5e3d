"""
Rating API Views (consumer only)
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsConsumer
from .exceptions import MarketplaceError, status_code_for
from .serializers import OrderSerializer, RatingSerializer, RatingSubmitSerializer
from .services.rating_gate import RatingGate


class EligibleOrdersView(APIView):
    """
    GET /api/marketplace/ratings/eligible/

    Delivered orders the consumer has not rated yet.
    """
    permission_classes = [IsConsumer]

    def get(self, request):
        orders = RatingGate(request.user).eligible_orders()
        return Response(OrderSerializer(orders, many=True).data)


class RatingSubmitView(APIView):
    """
    POST /api/marketplace/ratings/

    Body: {"order_id": "...", "stars": 1-5, "comment": "..."}
    """
    permission_classes = [IsConsumer]

    def post(self, request):
        serializer = RatingSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        gate = RatingGate(request.user)
        try:
            rating = gate.submit(
                serializer.validated_data['order_id'],
                serializer.validated_data.get('stars'),
                serializer.validated_data.get('comment', '')
            )
        except MarketplaceError as e:
            return Response({'error': e.message}, status=status_code_for(e))

        return Response(RatingSerializer(rating).data, status=status.HTTP_201_CREATED)
