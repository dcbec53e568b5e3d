"""
Admin Dashboard & Report API Views

GET /api/admin/dashboard/              Headline numbers (all time)
GET /api/admin/reports/?range=         Report for week, month, year or all
GET /api/admin/reports/top-sellers/    Sellers ranked by mean rating
"""

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdmin
from .services.marketplace_reports import DATE_RANGES, MarketplaceReportService


class BaseReportView(APIView):
    """Shared range parsing for report endpoints."""
    permission_classes = [IsAdmin]

    def get_date_range(self, request):
        return request.query_params.get('range', 'all')

    def bad_range_response(self, date_range):
        return Response(
            {'error': f"Invalid range '{date_range}'. Use one of: {', '.join(DATE_RANGES)}"},
            status=status.HTTP_400_BAD_REQUEST
        )


class AdminDashboardView(BaseReportView):
    """
    Admin Dashboard

    Returns farmer, consumer, product and order counts plus delivered revenue.
    """

    def get(self, request):
        service = MarketplaceReportService()
        return Response(service.get_dashboard_stats(), status=status.HTTP_200_OK)


class AdminReportView(BaseReportView):
    """
    Admin Report

    Query Parameters:
    - range: week, month, year, all (default: all)
    """

    def get(self, request):
        date_range = self.get_date_range(request)
        if date_range not in DATE_RANGES:
            return self.bad_range_response(date_range)

        service = MarketplaceReportService(date_range=date_range)
        data = service.get_report()
        data['top_sellers'] = service.get_top_sellers()
        return Response(data, status=status.HTTP_200_OK)


class TopSellersView(BaseReportView):
    """
    Query Parameters:
    - limit: number of sellers (default: TOP_SELLERS_LIMIT)
    """

    def get(self, request):
        limit = request.query_params.get('limit')
        if limit is not None:
            try:
                limit = int(limit)
            except ValueError:
                return Response(
                    {'error': 'limit must be an integer'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            if limit < 1:
                return Response(
                    {'error': 'limit must be at least 1'},
                    status=status.HTTP_400_BAD_REQUEST
                )

        service = MarketplaceReportService()
        return Response({'top_sellers': service.get_top_sellers(limit)})
