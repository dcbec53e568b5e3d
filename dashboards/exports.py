"""
Report Export Views

CSV download of the admin report.
"""

from django.http import HttpResponse
import csv
import logging

from .services.marketplace_reports import DATE_RANGES, MarketplaceReportService
from .views import BaseReportView

logger = logging.getLogger(__name__)


class ExportReportCSVView(BaseReportView):
    """
    GET /api/admin/reports/export/csv/?range=

    Downloads agriconnect-report-<range>-<YYYY-MM-DD>.csv
    """

    def get(self, request):
        date_range = self.get_date_range(request)
        if date_range not in DATE_RANGES:
            return self.bad_range_response(date_range)

        service = MarketplaceReportService(date_range=date_range)
        report = service.get_report()
        top_sellers = service.get_top_sellers()

        filename = f"agriconnect-report-{date_range}-{service.now.strftime('%Y-%m-%d')}.csv"
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'

        writer = csv.writer(response)

        writer.writerow(['AgriConnect Report'])
        writer.writerow(['Range', date_range])
        writer.writerow(['Generated', report['generated_at']])
        writer.writerow([])

        writer.writerow(['Metric', 'Value'])
        writer.writerow(['Total Users', report['users']['total']])
        writer.writerow(['Farmers', report['users']['farmers']])
        writer.writerow(['Consumers', report['users']['consumers']])
        writer.writerow(['Admins', report['users']['admins']])
        writer.writerow(['Products', report['total_products']])
        writer.writerow(['Orders', report['orders']['total']])
        writer.writerow(['Pending Orders', report['orders']['pending']])
        writer.writerow(['Delivered Orders', report['orders']['delivered']])
        writer.writerow(['Cancelled Orders', report['orders']['cancelled']])
        writer.writerow(['Revenue', f"{report['revenue']:.2f}"])
        writer.writerow(['Average Order Value', f"{report['average_order_value']:.2f}"])
        writer.writerow([])

        writer.writerow(['Top Sellers'])
        writer.writerow(['Seller', 'Average Rating', 'Reviews'])
        for seller in top_sellers:
            writer.writerow([
                seller['seller_name'],
                seller['average_rating'],
                seller['review_count'],
            ])

        logger.info(f"Admin {request.user.email} exported {date_range} report")
        return response
