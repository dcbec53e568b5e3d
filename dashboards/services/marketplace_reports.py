"""
Marketplace Reporting Service

Read-side figures for the admin dashboard and reports page. Everything is
recomputed from the full collections on every call; nothing is cached.

The module-level functions are pure: they take iterables of records (model
instances or dicts) and return plain values, so they can be tested without a
database.

Rules:
- Revenue counts delivered orders only.
- Average order value = revenue / delivered orders (0 when none).
- Top sellers rank by mean star rating; ties keep first-seen order.
- Date ranges include orders with created_at >= cutoff.
"""

from collections import Counter
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
import calendar
import logging
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from marketplace.models import Order, Product, Rating

logger = logging.getLogger(__name__)

DATE_RANGES = ('week', 'month', 'year', 'all')

ROLES = ('consumer', 'farmer', 'admin')
ORDER_STATUSES = ('pending', 'delivered', 'cancelled')


def _field(record, name):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


# =============================================================================
# PURE AGGREGATIONS
# =============================================================================

def count_by_role(users: Iterable[Any]) -> Dict[str, int]:
    counts = Counter(_field(user, 'role') for user in users)
    result = {role: counts.get(role, 0) for role in ROLES}
    for role, count in counts.items():
        if role not in result:
            result[role] = count
    return result


def count_by_status(orders: Iterable[Any]) -> Dict[str, int]:
    counts = Counter(_field(order, 'status') for order in orders)
    result = {order_status: counts.get(order_status, 0) for order_status in ORDER_STATUSES}
    for order_status, count in counts.items():
        if order_status not in result:
            result[order_status] = count
    return result


def delivered_revenue(orders: Iterable[Any]) -> Decimal:
    """Sum of total_price over delivered orders."""
    return sum(
        (Decimal(_field(order, 'total_price')) for order in orders
         if _field(order, 'status') == 'delivered'),
        Decimal('0')
    )


def average_order_value(orders: Iterable[Any]) -> Decimal:
    """Delivered revenue divided by the number of delivered orders, to the cent."""
    delivered = [order for order in orders if _field(order, 'status') == 'delivered']
    if not delivered:
        return Decimal('0')
    revenue = delivered_revenue(delivered)
    return (revenue / len(delivered)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def top_rated_sellers(ratings: Iterable[Any], limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Sellers ranked by mean star rating.

    Groups are kept in the order a seller is first seen, and the sort is
    stable, so equal means keep that order.

    Returns:
        [{'seller_id', 'seller_name', 'average_rating', 'review_count'}, ...]
    """
    if limit is None:
        limit = getattr(settings, 'TOP_SELLERS_LIMIT', 5)

    groups: Dict[str, Dict[str, Any]] = {}
    for rating in ratings:
        seller_id = str(_field(rating, 'seller_id'))
        group = groups.setdefault(seller_id, {
            'seller_id': seller_id,
            'seller_name': _field(rating, 'seller_name') or '',
            'total_stars': 0,
            'review_count': 0,
        })
        group['total_stars'] += int(_field(rating, 'stars'))
        group['review_count'] += 1

    ranked = sorted(
        groups.values(),
        key=lambda group: group['total_stars'] / group['review_count'],
        reverse=True
    )

    # sorted(reverse=True) keeps ties in their original order
    return [
        {
            'seller_id': group['seller_id'],
            'seller_name': group['seller_name'],
            'average_rating': round(group['total_stars'] / group['review_count'], 2),
            'review_count': group['review_count'],
        }
        for group in ranked[:max(limit, 0)]
    ]


def date_range_cutoff(date_range: str, now=None):
    """
    Earliest created_at included for a date range.

    - week: 7 days before now
    - month: same day of the previous month, clamped to that month's length
    - year: same date a year earlier (29 Feb becomes 28 Feb)
    - all: None (no cutoff)

    Raises:
        ValueError: unknown range
    """
    if date_range not in DATE_RANGES:
        raise ValueError(f"Unknown date range '{date_range}'. Use one of: {', '.join(DATE_RANGES)}")

    now = now or timezone.now()

    if date_range == 'all':
        return None

    if date_range == 'week':
        return now - timedelta(days=7)

    if date_range == 'month':
        year, month = (now.year - 1, 12) if now.month == 1 else (now.year, now.month - 1)
        day = min(now.day, calendar.monthrange(year, month)[1])
        return now.replace(year=year, month=month, day=day)

    year = now.year - 1
    day = min(now.day, calendar.monthrange(year, now.month)[1])
    return now.replace(year=year, day=day)


def filter_by_cutoff(records: Iterable[Any], cutoff, field: str = 'created_at') -> List[Any]:
    if cutoff is None:
        return list(records)
    return [record for record in records if _field(record, field) is not None and _field(record, field) >= cutoff]


# =============================================================================
# SERVICE
# =============================================================================

class MarketplaceReportService:
    """
    Dashboard and report figures for marketplace admins.

    Usage:
        service = MarketplaceReportService(date_range='month')
        report = service.get_report()
    """

    def __init__(self, date_range: str = 'all', now=None):
        self.date_range = date_range
        self.now = now or timezone.now()
        self.cutoff = date_range_cutoff(date_range, self.now)

    def _users(self):
        User = get_user_model()
        return list(User.objects.only('id', 'role'))

    def _orders(self):
        return list(Order.objects.only('id', 'status', 'total_price', 'created_at'))

    def get_dashboard_stats(self) -> Dict[str, Any]:
        """All-time headline numbers for the admin dashboard."""
        roles = count_by_role(self._users())
        orders = self._orders()
        statuses = count_by_status(orders)

        return {
            'total_farmers': roles['farmer'],
            'total_consumers': roles['consumer'],
            'total_products': Product.objects.count(),
            'total_orders': len(orders),
            'pending_orders': statuses['pending'],
            'delivered_orders': statuses['delivered'],
            'cancelled_orders': statuses['cancelled'],
            'total_revenue': delivered_revenue(orders),
        }

    def get_report(self) -> Dict[str, Any]:
        """Report for the selected date range; orders are filtered by created_at."""
        users = self._users()
        roles = count_by_role(users)
        orders = filter_by_cutoff(self._orders(), self.cutoff)
        statuses = count_by_status(orders)

        logger.debug(f"Marketplace report for range={self.date_range}: {len(orders)} orders")

        return {
            'date_range': self.date_range,
            'cutoff': self.cutoff.isoformat() if self.cutoff else None,
            'generated_at': self.now.isoformat(),
            'users': {
                'total': len(users),
                'farmers': roles['farmer'],
                'consumers': roles['consumer'],
                'admins': roles['admin'],
            },
            'total_products': Product.objects.count(),
            'orders': {
                'total': len(orders),
                'pending': statuses['pending'],
                'delivered': statuses['delivered'],
                'cancelled': statuses['cancelled'],
            },
            'revenue': delivered_revenue(orders),
            'average_order_value': average_order_value(orders),
        }

    def get_top_sellers(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        ratings = Rating.objects.only('seller_id', 'seller_name', 'stars', 'created_at').order_by('created_at', 'id')
        return top_rated_sellers(ratings, limit)
