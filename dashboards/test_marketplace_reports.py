"""
Tests for marketplace reporting: pure aggregations, date range cutoffs, the
report service and the admin report endpoints.
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
import csv
import io

import pytest
from django.test import override_settings
from django.utils import timezone
from rest_framework import status

from dashboards.services.marketplace_reports import (
    MarketplaceReportService,
    average_order_value,
    count_by_role,
    count_by_status,
    date_range_cutoff,
    delivered_revenue,
    filter_by_cutoff,
    top_rated_sellers,
)
from marketplace.models import Order, Rating


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


ORDERS = [
    {'id': 'A', 'status': 'delivered', 'total_price': Decimal('30.00')},
    {'id': 'B', 'status': 'pending', 'total_price': Decimal('50.00')},
    {'id': 'C', 'status': 'cancelled', 'total_price': Decimal('20.00')},
]


class TestRevenue:

    def test_only_delivered_orders_count(self):
        assert delivered_revenue(ORDERS) == Decimal('30.00')
        assert average_order_value(ORDERS) == Decimal('30.00')

    def test_no_delivered_orders(self):
        assert delivered_revenue(ORDERS[1:]) == Decimal('0')
        assert average_order_value([]) == Decimal('0')

    def test_average_rounded_to_cents(self):
        orders = [
            {'status': 'delivered', 'total_price': Decimal('10.00')},
            {'status': 'delivered', 'total_price': Decimal('10.00')},
            {'status': 'delivered', 'total_price': Decimal('10.01')},
        ]

        assert average_order_value(orders) == Decimal('10.00')


class TestCounts:

    def test_count_by_status_has_every_status(self):
        assert count_by_status(ORDERS[:1]) == {'pending': 0, 'delivered': 1, 'cancelled': 0}

    def test_count_by_role(self):
        users = [{'role': 'farmer'}, {'role': 'farmer'}, {'role': 'consumer'}]

        assert count_by_role(users) == {'consumer': 1, 'farmer': 2, 'admin': 0}


class TestTopRatedSellers:

    def rating(self, seller_id, stars, name=None):
        return {'seller_id': seller_id, 'seller_name': name or seller_id, 'stars': stars}

    def test_ranked_by_mean(self):
        ratings = [
            self.rating('s1', 3), self.rating('s1', 4),
            self.rating('s2', 5),
            self.rating('s3', 1), self.rating('s3', 2),
        ]

        result = top_rated_sellers(ratings)

        assert [row['seller_id'] for row in result] == ['s2', 's1', 's3']
        assert result[1]['average_rating'] == 3.5
        assert result[1]['review_count'] == 2

    def test_ties_keep_first_seen_order(self):
        ratings = [self.rating('late', 4), self.rating('early', 4), self.rating('best', 5)]

        result = top_rated_sellers(ratings)

        assert [row['seller_id'] for row in result] == ['best', 'late', 'early']

    def test_limit(self):
        ratings = [self.rating(f's{i}', 5 - i % 5) for i in range(8)]

        assert len(top_rated_sellers(ratings, limit=3)) == 3

    @override_settings(TOP_SELLERS_LIMIT=2)
    def test_default_limit_from_settings(self):
        ratings = [self.rating(f's{i}', 4) for i in range(4)]

        assert len(top_rated_sellers(ratings)) == 2

    def test_no_ratings(self):
        assert top_rated_sellers([]) == []

    def test_average_rounded_to_two_places(self):
        ratings = [self.rating('s1', 5), self.rating('s1', 4), self.rating('s1', 4)]

        assert top_rated_sellers(ratings)[0]['average_rating'] == 4.33


class TestDateRangeCutoff:

    def test_week(self):
        now = utc(2024, 3, 15, 12, 0)

        assert date_range_cutoff('week', now) == utc(2024, 3, 8, 12, 0)

    @pytest.mark.parametrize('now, expected', [
        (utc(2024, 3, 15, 9, 30), utc(2024, 2, 15, 9, 30)),
        (utc(2024, 3, 31), utc(2024, 2, 29)),
        (utc(2023, 3, 31), utc(2023, 2, 28)),
        (utc(2024, 1, 10), utc(2023, 12, 10)),
    ])
    def test_month(self, now, expected):
        assert date_range_cutoff('month', now) == expected

    @pytest.mark.parametrize('now, expected', [
        (utc(2024, 6, 1), utc(2023, 6, 1)),
        (utc(2024, 2, 29), utc(2023, 2, 28)),
    ])
    def test_year(self, now, expected):
        assert date_range_cutoff('year', now) == expected

    def test_all_has_no_cutoff(self):
        assert date_range_cutoff('all', utc(2024, 1, 1)) is None

    def test_unknown_range(self):
        with pytest.raises(ValueError):
            date_range_cutoff('decade')

    def test_filter_includes_cutoff_boundary(self):
        cutoff = utc(2024, 3, 8)
        records = [
            {'id': 1, 'created_at': utc(2024, 3, 7, 23, 59)},
            {'id': 2, 'created_at': cutoff},
            {'id': 3, 'created_at': utc(2024, 3, 10)},
        ]

        assert [r['id'] for r in filter_by_cutoff(records, cutoff)] == [2, 3]
        assert len(filter_by_cutoff(records, None)) == 3


def make_order(buyer, seller, status, total, created_at=None):
    order = Order.objects.create(
        product_name='Tomato',
        seller=seller,
        seller_name=seller.display_name,
        buyer=buyer,
        buyer_name=buyer.display_name,
        buyer_email=buyer.email,
        quantity=1,
        unit_price=Decimal(total),
        status=status,
    )
    if created_at is not None:
        Order.objects.filter(pk=order.pk).update(created_at=created_at)
    return order


@pytest.fixture
def marketplace_data(consumer, farmer, other_farmer, admin_user, product, other_product):
    now = timezone.now()
    make_order(consumer, farmer, 'delivered', '30.00')
    make_order(consumer, farmer, 'pending', '50.00')
    make_order(consumer, other_farmer, 'cancelled', '20.00')
    old = make_order(consumer, other_farmer, 'delivered', '100.00', created_at=now - timedelta(days=60))

    Rating.objects.create(
        order=old, seller=other_farmer, seller_name='Esi Gardens',
        buyer=consumer, product_name='Rice', stars=5,
    )
    return now


@pytest.mark.django_db
class TestReportService:

    def test_dashboard_stats_are_all_time(self, marketplace_data):
        stats = MarketplaceReportService().get_dashboard_stats()

        assert stats['total_farmers'] == 2
        assert stats['total_consumers'] == 1
        assert stats['total_products'] == 2
        assert stats['total_orders'] == 4
        assert stats['delivered_orders'] == 2
        assert stats['total_revenue'] == Decimal('130.00')

    def test_month_report_drops_older_orders(self, marketplace_data):
        report = MarketplaceReportService('month', now=marketplace_data).get_report()

        assert report['orders'] == {'total': 3, 'pending': 1, 'delivered': 1, 'cancelled': 1}
        assert report['revenue'] == Decimal('30.00')
        assert report['average_order_value'] == Decimal('30.00')
        assert report['users'] == {'total': 4, 'farmers': 2, 'consumers': 1, 'admins': 1}

    def test_all_report(self, marketplace_data):
        report = MarketplaceReportService('all').get_report()

        assert report['cutoff'] is None
        assert report['orders']['total'] == 4
        assert report['average_order_value'] == Decimal('65.00')

    def test_top_sellers(self, marketplace_data):
        sellers = MarketplaceReportService().get_top_sellers()

        assert sellers == [{
            'seller_id': str(Rating.objects.get().seller_id),
            'seller_name': 'Esi Gardens',
            'average_rating': 5.0,
            'review_count': 1,
        }]


@pytest.mark.django_db
class TestReportApi:

    def test_dashboard(self, admin_client, marketplace_data):
        response = admin_client.get('/api/admin/dashboard/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_orders'] == 4

    def test_report_with_range(self, admin_client, marketplace_data):
        response = admin_client.get('/api/admin/reports/', {'range': 'week'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['date_range'] == 'week'
        assert response.data['orders']['total'] == 3
        assert response.data['top_sellers'][0]['seller_name'] == 'Esi Gardens'

    def test_invalid_range(self, admin_client):
        response = admin_client.get('/api/admin/reports/', {'range': 'decade'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.parametrize('limit', ['0', 'abc'])
    def test_invalid_top_sellers_limit(self, admin_client, limit):
        response = admin_client.get('/api/admin/reports/top-sellers/', {'limit': limit})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_non_admin_forbidden(self, farmer_client):
        response = farmer_client.get('/api/admin/dashboard/')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_csv_export(self, admin_client, marketplace_data):
        response = admin_client.get('/api/admin/reports/export/csv/', {'range': 'month'})

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'text/csv'
        today = timezone.now().strftime('%Y-%m-%d')
        assert f'agriconnect-report-month-{today}.csv' in response['Content-Disposition']

        rows = list(csv.reader(io.StringIO(response.content.decode())))
        assert ['Revenue', '30.00'] in rows
        assert ['Average Order Value', '30.00'] in rows
        assert ['Esi Gardens', '5.0', '1'] in rows
