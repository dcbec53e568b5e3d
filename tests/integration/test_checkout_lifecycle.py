"""
End-to-end checkout and fulfilment across roles.

A consumer signs in, fills a cart from two farmers, checks out; each farmer
sees only their order and marks it delivered; the admin dashboard reflects
the delivered revenue.

Run with: pytest tests/integration/test_checkout_lifecycle.py -v
"""

from decimal import Decimal

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.models import Order


# =============================================================================
# FIXTURES
# =============================================================================

def signed_in_client(email, password='testpass123'):
    client = APIClient()
    response = client.post('/api/auth/login/', {'email': email, 'password': password}, format='json')
    assert response.status_code == status.HTTP_200_OK
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['tokens']['access']}")
    return client


@pytest.fixture
def buyer(consumer):
    return signed_in_client(consumer.email)


@pytest.fixture
def tomato_seller(farmer):
    return signed_in_client(farmer.email)


@pytest.fixture
def rice_seller(other_farmer):
    return signed_in_client(other_farmer.email)


@pytest.fixture
def admin(admin_user):
    return signed_in_client(admin_user.email)


# =============================================================================
# TESTS
# =============================================================================

@pytest.mark.django_db
class TestCheckoutLifecycle:

    def checkout(self, buyer, product, other_product):
        buyer.post('/api/marketplace/cart/', {'product_id': str(product.pk)}, format='json')
        buyer.patch(f'/api/marketplace/cart/{product.pk}/', {'quantity': 3}, format='json')
        buyer.post('/api/marketplace/cart/', {'product_id': str(other_product.pk)}, format='json')
        buyer.patch(f'/api/marketplace/cart/{other_product.pk}/', {'quantity': 2}, format='json')

        cart = buyer.get('/api/marketplace/cart/')
        assert cart.data['total'] == '16.00'

        response = buyer.post('/api/marketplace/orders/checkout/')
        assert response.status_code == status.HTTP_201_CREATED
        return response.data['orders']

    def test_full_flow(self, buyer, tomato_seller, rice_seller, admin, product, other_product):
        orders = self.checkout(buyer, product, other_product)
        tomato_order, rice_order = orders

        # Each seller sees only their own order
        received = tomato_seller.get('/api/marketplace/orders/received/')
        assert [row['id'] for row in received.data['results']] == [tomato_order['id']]
        received = rice_seller.get('/api/marketplace/orders/received/')
        assert [row['id'] for row in received.data['results']] == [rice_order['id']]

        # Sellers cannot touch each other's orders
        response = rice_seller.post(f"/api/marketplace/orders/{tomato_order['id']}/deliver/")
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = tomato_seller.post(f"/api/marketplace/orders/{tomato_order['id']}/deliver/")
        assert response.status_code == status.HTTP_200_OK

        # The buyer cancels the other one
        response = buyer.post(f"/api/marketplace/orders/{rice_order['id']}/cancel/")
        assert response.status_code == status.HTTP_200_OK

        mine = buyer.get('/api/marketplace/orders/mine/')
        statuses = {row['product_name']: row['status'] for row in mine.data['results']}
        assert statuses == {'Tomato': 'delivered', 'Rice': 'cancelled'}

        dashboard = admin.get('/api/admin/dashboard/')
        assert dashboard.data['total_orders'] == 2
        assert dashboard.data['delivered_orders'] == 1
        assert dashboard.data['cancelled_orders'] == 1
        assert dashboard.data['total_revenue'] == Decimal('6.00')

    def test_end_states_stay_put(self, buyer, tomato_seller, product, other_product):
        tomato_order, _ = self.checkout(buyer, product, other_product)

        tomato_seller.post(f"/api/marketplace/orders/{tomato_order['id']}/deliver/")
        response = buyer.post(f"/api/marketplace/orders/{tomato_order['id']}/cancel/")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert Order.objects.get(pk=tomato_order['id']).status == 'delivered'

    def test_price_change_after_checkout_does_not_touch_orders(self, buyer, tomato_seller, product, other_product):
        tomato_order, _ = self.checkout(buyer, product, other_product)

        tomato_seller.patch(
            f'/api/marketplace/my-products/{product.pk}/',
            {'price_per_unit': '9.99'},
            format='json'
        )

        order = Order.objects.get(pk=tomato_order['id'])
        assert order.unit_price == Decimal('2.00')
        assert order.total_price == Decimal('6.00')

    def test_logged_out_buyer_is_locked_out(self, consumer, product):
        client = APIClient()
        login = client.post('/api/auth/login/', {
            'email': consumer.email,
            'password': 'testpass123',
        }, format='json')
        tokens = login.data['tokens']
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        client.post('/api/auth/logout/', {'refresh_token': tokens['refresh']}, format='json')
        client.credentials()

        response = client.get('/api/marketplace/cart/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
