"""
Rating flow across roles: delivery unlocks rating, one rating per order,
ratings feed the admin top sellers report, and review moderation reopens
the order for rating.

Run with: pytest tests/integration/test_rating_flow.py -v
"""

from decimal import Decimal

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.models import Order


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def place_order(consumer, seller, name):
    return Order.objects.create(
        product_name=name,
        seller=seller,
        seller_name=seller.display_name,
        buyer=consumer,
        buyer_name=consumer.display_name,
        buyer_email=consumer.email,
        quantity=1,
        unit_price=Decimal('4.00'),
    )


@pytest.mark.django_db
class TestRatingFlow:

    def test_delivery_unlocks_rating(self, consumer, farmer):
        buyer = client_for(consumer)
        seller = client_for(farmer)
        order = place_order(consumer, farmer, 'Tomato')

        assert buyer.get('/api/marketplace/ratings/eligible/').data == []

        early = buyer.post('/api/marketplace/ratings/', {'order_id': str(order.pk), 'stars': 5}, format='json')
        assert early.status_code == status.HTTP_409_CONFLICT

        seller.post(f'/api/marketplace/orders/{order.pk}/deliver/')

        eligible = buyer.get('/api/marketplace/ratings/eligible/').data
        assert [row['id'] for row in eligible] == [str(order.pk)]

        rated = buyer.post('/api/marketplace/ratings/', {'order_id': str(order.pk), 'stars': 5}, format='json')
        assert rated.status_code == status.HTTP_201_CREATED

        mine = buyer.get('/api/marketplace/orders/mine/')
        assert mine.data['results'][0]['is_rated'] is True
        assert buyer.get('/api/marketplace/ratings/eligible/').data == []

    def test_ratings_rank_sellers_and_moderation_reopens(self, consumer, farmer, other_farmer, admin_user):
        buyer = client_for(consumer)
        admin = client_for(admin_user)

        orders = []
        for seller, name in [(farmer, 'Tomato'), (other_farmer, 'Rice'), (farmer, 'Okra')]:
            order = place_order(consumer, seller, name)
            client_for(seller).post(f'/api/marketplace/orders/{order.pk}/deliver/')
            orders.append(order)

        for order, stars in zip(orders, [3, 5, 4]):
            response = buyer.post('/api/marketplace/ratings/', {
                'order_id': str(order.pk),
                'stars': stars,
            }, format='json')
            assert response.status_code == status.HTTP_201_CREATED

        top = admin.get('/api/admin/reports/top-sellers/').data['top_sellers']
        assert [(row['seller_name'], row['average_rating']) for row in top] == [
            ('Esi Gardens', 5.0),
            ('Yaw Farms', 3.5),
        ]

        reviews = admin.get('/api/admin/marketplace/reviews/', {'search': 'Rice'}).data['results']
        assert len(reviews) == 1
        response = admin.delete(f"/api/admin/marketplace/reviews/{reviews[0]['id']}/")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        eligible = buyer.get('/api/marketplace/ratings/eligible/').data
        assert [row['product_name'] for row in eligible] == ['Rice']

        top = admin.get('/api/admin/reports/top-sellers/').data['top_sellers']
        assert [row['seller_name'] for row in top] == ['Yaw Farms']
