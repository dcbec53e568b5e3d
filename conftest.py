"""
Shared pytest fixtures for the marketplace test suite.
"""
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear cache before and after each test so cached profiles never leak."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def consumer(db):
    return User.objects.create_user(
        username='consumer',
        email='consumer@test.com',
        password='testpass123',
        display_name='Ama Consumer',
        role='consumer'
    )


@pytest.fixture
def other_consumer(db):
    return User.objects.create_user(
        username='consumer2',
        email='consumer2@test.com',
        password='testpass123',
        display_name='Kofi Consumer',
        role='consumer'
    )


@pytest.fixture
def farmer(db):
    return User.objects.create_user(
        username='farmer',
        email='farmer@test.com',
        password='testpass123',
        display_name='Yaw Farms',
        role='farmer'
    )


@pytest.fixture
def other_farmer(db):
    return User.objects.create_user(
        username='farmer2',
        email='farmer2@test.com',
        password='testpass123',
        display_name='Esi Gardens',
        role='farmer'
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin',
        email='admin@test.com',
        password='testpass123',
        display_name='Marketplace Admin',
        role='admin',
        is_staff=True
    )


@pytest.fixture
def product(db, farmer):
    from marketplace.models import Product

    return Product.objects.create(
        seller=farmer,
        name='Tomato',
        description='Fresh tomatoes',
        category='vegetables',
        price_per_unit=Decimal('2.00'),
        unit='kg',
        quantity=10
    )


@pytest.fixture
def other_product(db, other_farmer):
    from marketplace.models import Product

    return Product.objects.create(
        seller=other_farmer,
        name='Rice',
        description='Local rice',
        category='grains',
        price_per_unit=Decimal('5.00'),
        unit='bag',
        quantity=4
    )


@pytest.fixture
def consumer_client(api_client, consumer):
    api_client.force_authenticate(user=consumer)
    return api_client


@pytest.fixture
def farmer_client(api_client, farmer):
    api_client.force_authenticate(user=farmer)
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client
