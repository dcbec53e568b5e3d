"""
API tests for the marketplace: catalog, community, cart, orders, ratings and
admin oversight.
"""
from decimal import Decimal
from io import BytesIO
from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from PIL import Image
from rest_framework import status

from marketplace.models import Order, Product, ProductLike, Rating, SuggestedPrice
from marketplace.services.order_lifecycle import OrderLifecycleService

CART_URL = '/api/marketplace/cart/'
CHECKOUT_URL = '/api/marketplace/orders/checkout/'


def make_order(buyer, seller, status='pending', name='Tomato', quantity=1, unit_price='2.00'):
    return Order.objects.create(
        product_name=name,
        seller=seller,
        seller_name=seller.display_name,
        buyer=buyer,
        buyer_name=buyer.display_name,
        buyer_email=buyer.email,
        quantity=quantity,
        unit_price=Decimal(unit_price),
        status=status,
    )


def png_upload(name='tomato.png'):
    buffer = BytesIO()
    Image.new('RGB', (2, 2), color='red').save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


@pytest.mark.django_db
class TestCatalog:

    def test_public_list(self, api_client, product, other_product):
        response = api_client.get('/api/marketplace/products/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2

    def test_filter_by_category(self, api_client, product, other_product):
        response = api_client.get('/api/marketplace/products/', {'category': 'grains'})

        assert [row['name'] for row in response.data['results']] == ['Rice']

    def test_search(self, api_client, product, other_product):
        response = api_client.get('/api/marketplace/products/', {'search': 'tomat'})

        assert [row['name'] for row in response.data['results']] == ['Tomato']

    def test_detail_includes_suggested_price(self, api_client, product):
        SuggestedPrice.objects.create(product_name='Tomato', suggested_price=Decimal('2.50'))

        response = api_client.get(f'/api/marketplace/products/{product.pk}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['suggested_price'] == '2.50'
        assert response.data['seller_name'] == 'Yaw Farms'

    def test_detail_without_suggested_price(self, api_client, product):
        response = api_client.get(f'/api/marketplace/products/{product.pk}/')

        assert response.data['suggested_price'] is None


@pytest.mark.django_db
class TestFarmerListings:

    def test_create_product(self, farmer_client, farmer):
        response = farmer_client.post('/api/marketplace/my-products/', {
            'name': 'Okra',
            'category': 'vegetables',
            'price_per_unit': '3.00',
            'unit': 'kg',
            'quantity': 8,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        product = Product.objects.get(name='Okra')
        assert product.seller == farmer
        assert product.seller_name == 'Yaw Farms'

    @patch('marketplace.services.catalog.CloudinaryImageService.upload_image')
    def test_create_with_image(self, upload_image, farmer_client):
        upload_image.return_value = 'https://res.cloudinary.com/test-cloud/okra.png'

        response = farmer_client.post('/api/marketplace/my-products/', {
            'name': 'Okra',
            'price_per_unit': '3.00',
            'quantity': 8,
            'image': png_upload(),
        }, format='multipart')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['image_url'] == 'https://res.cloudinary.com/test-cloud/okra.png'
        upload_image.assert_called_once()

    def test_consumer_cannot_list_products(self, consumer_client):
        response = consumer_client.post('/api/marketplace/my-products/', {
            'name': 'Okra',
            'price_per_unit': '3.00',
            'quantity': 8,
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_only_own_products_listed(self, farmer_client, product, other_product):
        response = farmer_client.get('/api/marketplace/my-products/')

        assert [row['name'] for row in response.data['results']] == ['Tomato']

    def test_cannot_edit_other_farmers_product(self, farmer_client, other_product):
        response = farmer_client.patch(
            f'/api/marketplace/my-products/{other_product.pk}/',
            {'price_per_unit': '0.50'},
            format='json'
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_own_product(self, farmer_client, product):
        response = farmer_client.patch(
            f'/api/marketplace/my-products/{product.pk}/',
            {'price_per_unit': '2.75'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        product.refresh_from_db()
        assert product.price_per_unit == Decimal('2.75')

    def test_inactive_farmer_cannot_edit(self, farmer_client, farmer, product):
        farmer.account_status = 'inactive'
        farmer.save()

        response = farmer_client.patch(
            f'/api/marketplace/my-products/{product.pk}/',
            {'price_per_unit': '0.50'},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        product.refresh_from_db()
        assert product.price_per_unit == Decimal('2.00')

    def test_inactive_farmer_cannot_delete(self, farmer_client, farmer, product):
        farmer.account_status = 'inactive'
        farmer.save()

        response = farmer_client.delete(f'/api/marketplace/my-products/{product.pk}/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Product.objects.filter(pk=product.pk).exists()

    def test_suggested_prices_for_farmers(self, farmer_client):
        SuggestedPrice.objects.create(product_name='Tomato', suggested_price=Decimal('2.50'))

        response = farmer_client.get('/api/marketplace/suggested-prices/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['product_name'] == 'Tomato'


@pytest.mark.django_db
class TestCommunity:

    def test_excludes_own_products(self, farmer_client, product, other_product):
        response = farmer_client.get('/api/marketplace/community/')

        assert [row['name'] for row in response.data['results']] == ['Rice']

    def test_like_once(self, farmer_client, other_product):
        url = f'/api/marketplace/community/{other_product.pk}/like/'

        first = farmer_client.post(url)
        second = farmer_client.post(url)

        assert first.status_code == status.HTTP_200_OK
        assert first.data['likes'] == 1
        assert second.status_code == status.HTTP_409_CONFLICT
        other_product.refresh_from_db()
        assert other_product.likes == 1
        assert ProductLike.objects.count() == 1

    def test_cannot_like_own_product(self, farmer_client, product):
        response = farmer_client.post(f'/api/marketplace/community/{product.pk}/like/')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_consumers_have_no_community(self, consumer_client, other_product):
        response = consumer_client.get('/api/marketplace/community/')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestCartApi:

    def test_add_and_increment(self, consumer_client, product):
        consumer_client.post(CART_URL, {'product_id': str(product.pk)}, format='json')
        response = consumer_client.post(CART_URL, {'product_id': str(product.pk)}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['item_count'] == 2
        assert response.data['total'] == '4.00'

    def test_cart_persists_between_requests(self, consumer_client, product):
        consumer_client.post(CART_URL, {'product_id': str(product.pk)}, format='json')

        response = consumer_client.get(CART_URL)

        assert len(response.data['lines']) == 1
        assert response.data['lines'][0]['product_name'] == 'Tomato'

    def test_quantity_clamped_to_stock(self, consumer_client, other_product):
        consumer_client.post(CART_URL, {'product_id': str(other_product.pk)}, format='json')

        response = consumer_client.patch(f'{CART_URL}{other_product.pk}/', {'quantity': 99}, format='json')

        assert response.data['lines'][0]['quantity'] == 4

    def test_unknown_line_is_404(self, consumer_client, product):
        response = consumer_client.patch(f'{CART_URL}{product.pk}/', {'quantity': 2}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_out_of_stock_rejected(self, consumer_client, product):
        product.quantity = 0
        product.save()

        response = consumer_client.post(CART_URL, {'product_id': str(product.pk)}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert consumer_client.get(CART_URL).data['lines'] == []

    def test_remove_and_clear(self, consumer_client, product, other_product):
        consumer_client.post(CART_URL, {'product_id': str(product.pk)}, format='json')
        consumer_client.post(CART_URL, {'product_id': str(other_product.pk)}, format='json')

        response = consumer_client.delete(f'{CART_URL}{product.pk}/')
        assert [line['product_name'] for line in response.data['lines']] == ['Rice']

        response = consumer_client.delete(CART_URL)
        assert response.data['lines'] == []
        assert response.data['total'] == '0'

    def test_farmers_have_no_cart(self, farmer_client):
        response = farmer_client.get(CART_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestCheckoutApi:

    def fill_cart(self, client, product, other_product):
        client.post(CART_URL, {'product_id': str(product.pk)}, format='json')
        client.patch(f'{CART_URL}{product.pk}/', {'quantity': 3}, format='json')
        client.post(CART_URL, {'product_id': str(other_product.pk)}, format='json')
        client.patch(f'{CART_URL}{other_product.pk}/', {'quantity': 2}, format='json')

    def test_checkout_creates_orders_and_clears_cart(self, consumer_client, product, other_product):
        self.fill_cart(consumer_client, product, other_product)

        response = consumer_client.post(CHECKOUT_URL)

        assert response.status_code == status.HTTP_201_CREATED
        totals = [order['total_price'] for order in response.data['orders']]
        assert totals == ['6.00', '10.00']
        assert response.data['cart']['lines'] == []
        assert consumer_client.get(CART_URL).data['lines'] == []

    def test_empty_cart(self, consumer_client):
        response = consumer_client.post(CHECKOUT_URL)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Order.objects.count() == 0

    def test_partial_failure_is_502_and_keeps_cart(self, consumer_client, product, other_product):
        self.fill_cart(consumer_client, product, other_product)
        original = OrderLifecycleService._create_order

        def fail_on_rice(service, line):
            if line.product_name == 'Rice':
                raise DatabaseError('store unavailable')
            return original(service, line)

        with patch.object(OrderLifecycleService, '_create_order', autospec=True, side_effect=fail_on_rice):
            response = consumer_client.post(CHECKOUT_URL)

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert [order['product_name'] for order in response.data['created_orders']] == ['Tomato']
        assert response.data['failed_product_name'] == 'Rice'
        assert len(consumer_client.get(CART_URL).data['lines']) == 2


@pytest.mark.django_db
class TestOrderApi:

    def test_consumer_sees_own_orders(self, consumer_client, consumer, other_consumer, farmer):
        make_order(consumer, farmer)
        make_order(other_consumer, farmer)

        response = consumer_client.get('/api/marketplace/orders/mine/')

        assert response.data['count'] == 1
        assert response.data['results'][0]['buyer_email'] == 'consumer@test.com'

    def test_filter_by_status(self, consumer_client, consumer, farmer):
        make_order(consumer, farmer, status='pending')
        make_order(consumer, farmer, status='delivered')

        response = consumer_client.get('/api/marketplace/orders/mine/', {'status': 'delivered'})

        assert [row['status'] for row in response.data['results']] == ['delivered']

    def test_farmer_sees_received_orders(self, farmer_client, consumer, farmer, other_farmer):
        make_order(consumer, farmer)
        make_order(consumer, other_farmer)

        response = farmer_client.get('/api/marketplace/orders/received/')

        assert response.data['count'] == 1
        assert response.data['results'][0]['seller_name'] == 'Yaw Farms'

    def test_buyer_and_seller_see_order_detail(self, api_client, consumer, farmer, admin_user):
        order = make_order(consumer, farmer)

        for user in (consumer, farmer, admin_user):
            api_client.force_authenticate(user=user)
            response = api_client.get(f'/api/marketplace/orders/{order.pk}/')

            assert response.status_code == status.HTTP_200_OK
            assert response.data['order_number'] == order.order_number

    def test_order_detail_hidden_from_other_users(self, api_client, consumer, other_consumer, farmer, other_farmer):
        order = make_order(consumer, farmer)

        for user in (other_consumer, other_farmer):
            api_client.force_authenticate(user=user)
            response = api_client.get(f'/api/marketplace/orders/{order.pk}/')

            assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_order_detail_is_404(self, consumer_client):
        response = consumer_client.get('/api/marketplace/orders/00000000-0000-0000-0000-000000000000/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_order_detail_requires_sign_in(self, api_client, consumer, farmer):
        order = make_order(consumer, farmer)

        response = api_client.get(f'/api/marketplace/orders/{order.pk}/')

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_deliver(self, farmer_client, consumer, farmer):
        order = make_order(consumer, farmer)

        response = farmer_client.post(f'/api/marketplace/orders/{order.pk}/deliver/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['order']['status'] == 'delivered'

    def test_deliver_someone_elses_order_is_403(self, api_client, consumer, farmer, other_farmer):
        order = make_order(consumer, farmer)
        api_client.force_authenticate(user=other_farmer)

        response = api_client.post(f'/api/marketplace/orders/{order.pk}/deliver/')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cancel_delivered_is_409(self, consumer_client, consumer, farmer):
        order = make_order(consumer, farmer, status='delivered')

        response = consumer_client.post(f'/api/marketplace/orders/{order.pk}/cancel/')

        assert response.status_code == status.HTTP_409_CONFLICT
        order.refresh_from_db()
        assert order.status == 'delivered'

    def test_cancel_unknown_order_is_404(self, consumer_client):
        response = consumer_client.post('/api/marketplace/orders/00000000-0000-0000-0000-000000000000/cancel/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_farmer_cannot_cancel(self, farmer_client, consumer, farmer):
        order = make_order(consumer, farmer)

        response = farmer_client.post(f'/api/marketplace/orders/{order.pk}/cancel/')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestRatingApi:

    def test_eligible_orders(self, consumer_client, consumer, farmer):
        delivered = make_order(consumer, farmer, status='delivered')
        make_order(consumer, farmer, status='pending')

        response = consumer_client.get('/api/marketplace/ratings/eligible/')

        assert [row['id'] for row in response.data] == [str(delivered.pk)]

    def test_submit(self, consumer_client, consumer, farmer):
        order = make_order(consumer, farmer, status='delivered')

        response = consumer_client.post('/api/marketplace/ratings/', {
            'order_id': str(order.pk),
            'stars': 4,
            'comment': 'Fresh',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['stars'] == 4
        assert consumer_client.get('/api/marketplace/ratings/eligible/').data == []

    def test_missing_stars(self, consumer_client, consumer, farmer):
        order = make_order(consumer, farmer, status='delivered')

        response = consumer_client.post('/api/marketplace/ratings/', {
            'order_id': str(order.pk),
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Rating.objects.count() == 0

    def test_duplicate_is_409(self, consumer_client, consumer, farmer):
        order = make_order(consumer, farmer, status='delivered')
        payload = {'order_id': str(order.pk), 'stars': 5}

        consumer_client.post('/api/marketplace/ratings/', payload, format='json')
        response = consumer_client.post('/api/marketplace/ratings/', payload, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_pending_order_is_409(self, consumer_client, consumer, farmer):
        order = make_order(consumer, farmer)

        response = consumer_client.post('/api/marketplace/ratings/', {
            'order_id': str(order.pk),
            'stars': 5,
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.django_db
class TestAdminMarketplace:

    def test_order_search_and_filter(self, admin_client, consumer, other_consumer, farmer):
        make_order(consumer, farmer, name='Tomato')
        make_order(other_consumer, farmer, name='Maize', status='delivered')

        searched = admin_client.get('/api/admin/marketplace/orders/', {'search': 'consumer2@test.com'})
        filtered = admin_client.get('/api/admin/marketplace/orders/', {'status': 'delivered'})

        assert [row['product_name'] for row in searched.data['results']] == ['Maize']
        assert [row['product_name'] for row in filtered.data['results']] == ['Maize']

    def test_admin_cancels_order(self, admin_client, consumer, farmer):
        order = make_order(consumer, farmer)

        response = admin_client.post(f'/api/admin/marketplace/orders/{order.pk}/cancel/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['order']['status'] == 'cancelled'

    def test_delete_product_keeps_orders(self, admin_client, consumer, farmer, product):
        order = Order.objects.create(
            product=product,
            product_name=product.name,
            seller=farmer,
            buyer=consumer,
            quantity=1,
            unit_price=product.price_per_unit,
        )

        response = admin_client.delete(f'/api/admin/marketplace/products/{product.pk}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        order.refresh_from_db()
        assert order.product is None
        assert order.product_name == 'Tomato'

    def test_delete_review_reopens_order(self, admin_client, consumer, farmer):
        order = make_order(consumer, farmer, status='delivered')
        rating = Rating.objects.create(order=order, seller=farmer, buyer=consumer, stars=2)

        response = admin_client.delete(f'/api/admin/marketplace/reviews/{rating.pk}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Rating.objects.filter(order=order).exists()

    def test_suggested_price_crud(self, admin_client):
        url = '/api/admin/marketplace/suggested-prices/'

        created = admin_client.post(url, {'product_name': 'Tomato', 'suggested_price': '2.50'}, format='json')
        duplicate = admin_client.post(url, {'product_name': 'Tomato', 'suggested_price': '3.00'}, format='json')

        assert created.status_code == status.HTTP_201_CREATED
        assert duplicate.status_code == status.HTTP_400_BAD_REQUEST

        detail = f"{url}{created.data['id']}/"
        updated = admin_client.patch(detail, {'suggested_price': '2.75'}, format='json')
        assert updated.data['suggested_price'] == '2.75'

        assert admin_client.delete(detail).status_code == status.HTTP_204_NO_CONTENT
        assert SuggestedPrice.objects.count() == 0

    def test_farmer_cannot_use_admin_endpoints(self, farmer_client):
        response = farmer_client.get('/api/admin/marketplace/orders/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
