"""
API tests for signup, login, logout, profile and admin user management.
"""
import pytest
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import User


@pytest.mark.django_db
class TestRegistration:

    def test_register_consumer(self, api_client):
        response = api_client.post('/api/auth/register/', {
            'username': 'newbuyer',
            'email': 'newbuyer@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'display_name': 'New Buyer',
            'role': 'consumer',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['user']['role'] == 'consumer'
        assert 'access' in response.data['tokens']

    def test_register_farmer(self, api_client):
        response = api_client.post('/api/auth/register/', {
            'username': 'newfarmer',
            'email': 'newfarmer@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'role': 'farmer',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert User.objects.get(email='newfarmer@test.com').is_farmer

    def test_cannot_self_register_as_admin(self, api_client):
        response = api_client.post('/api/auth/register/', {
            'username': 'sneaky',
            'email': 'sneaky@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Str0ng-pass-123',
            'role': 'admin',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not User.objects.filter(email='sneaky@test.com').exists()

    def test_password_mismatch(self, api_client):
        response = api_client.post('/api/auth/register/', {
            'username': 'mismatch',
            'email': 'mismatch@test.com',
            'password': 'Str0ng-pass-123',
            'password_confirm': 'Different-pass-456',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestLoginLogout:

    def test_login_returns_tokens_and_profile(self, api_client, farmer):
        response = api_client.post('/api/auth/login/', {
            'email': 'farmer@test.com',
            'password': 'testpass123',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['profile']['role'] == 'farmer'
        assert response.data['tokens']['refresh']

    def test_login_wrong_password(self, api_client, farmer):
        response = api_client.post('/api/auth/login/', {
            'email': 'farmer@test.com',
            'password': 'nope',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_account(self, api_client, farmer):
        farmer.account_status = 'inactive'
        farmer.save()

        response = api_client.post('/api/auth/login/', {
            'email': 'farmer@test.com',
            'password': 'testpass123',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_blacklists_refresh_token(self, api_client, farmer):
        login = api_client.post('/api/auth/login/', {
            'email': 'farmer@test.com',
            'password': 'testpass123',
        }, format='json')
        tokens = login.data['tokens']

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = api_client.post('/api/auth/logout/', {'refresh_token': tokens['refresh']}, format='json')

        assert response.status_code == status.HTTP_200_OK

        refresh = APIClient().post('/api/auth/token/refresh/', {'refresh': tokens['refresh']}, format='json')
        assert refresh.status_code == status.HTTP_401_UNAUTHORIZED

    def test_session_endpoint(self, api_client, consumer):
        anonymous = api_client.get('/api/auth/session/')
        assert anonymous.data['status'] == 'anonymous'

        api_client.force_authenticate(user=consumer)
        response = api_client.get('/api/auth/session/')

        assert response.data['status'] == 'authenticated'
        assert response.data['profile']['role'] == 'consumer'


@pytest.mark.django_db
class TestProfile:

    def test_update_display_name(self, consumer_client, consumer):
        response = consumer_client.patch('/api/auth/profile/', {'display_name': 'Ama B.'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        consumer.refresh_from_db()
        assert consumer.display_name == 'Ama B.'

    def test_role_cannot_be_changed_through_profile(self, consumer_client, consumer):
        consumer_client.patch('/api/auth/profile/', {'role': 'admin'}, format='json')

        consumer.refresh_from_db()
        assert consumer.role == 'consumer'

    def test_role_is_immutable_on_the_model(self, consumer):
        user = User.objects.get(pk=consumer.pk)
        user.role = 'farmer'

        with pytest.raises(ValidationError):
            user.save()


@pytest.mark.django_db
class TestAdminUserManagement:

    def test_list_and_filter_by_role(self, admin_client, consumer, farmer, other_farmer):
        response = admin_client.get('/api/admin/users/', {'role': 'farmer'})

        assert response.status_code == status.HTTP_200_OK
        emails = {row['email'] for row in response.data['results']}
        assert emails == {'farmer@test.com', 'farmer2@test.com'}

    def test_search_by_name(self, admin_client, consumer, farmer):
        response = admin_client.get('/api/admin/users/', {'search': 'Yaw'})

        assert [row['email'] for row in response.data['results']] == ['farmer@test.com']

    def test_toggle_status(self, admin_client, farmer):
        url = f'/api/admin/users/{farmer.pk}/status/'

        response = admin_client.post(url, {}, format='json')
        assert response.data['user']['account_status'] == 'inactive'

        response = admin_client.post(url, {}, format='json')
        assert response.data['user']['account_status'] == 'active'

    def test_set_explicit_status(self, admin_client, farmer):
        response = admin_client.post(
            f'/api/admin/users/{farmer.pk}/status/',
            {'account_status': 'inactive'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        farmer.refresh_from_db()
        assert farmer.account_status == 'inactive'

    def test_admin_cannot_deactivate_self(self, admin_client, admin_user):
        response = admin_client.post(f'/api/admin/users/{admin_user.pk}/status/', {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_non_admin_forbidden(self, farmer_client, consumer):
        response = farmer_client.get('/api/admin/users/')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestCreateAdminCommand:

    def test_creates_admin(self):
        call_command('create_admin', email='boss@test.com', password='testpass123')

        user = User.objects.get(email='boss@test.com')
        assert user.is_marketplace_admin
        assert user.check_password('testpass123')

    def test_refuses_to_promote_existing_user(self, farmer):
        with pytest.raises(CommandError):
            call_command('create_admin', email='farmer@test.com', password='x')
