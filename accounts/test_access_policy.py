"""
Tests for the access gate.

Covers every (required role x session state x profile role) combination,
the redirect targets, and the DRF permission wrapper.
"""
import pytest
from django.test import override_settings
from rest_framework import status

from accounts.policies import (
    AccessDecision,
    evaluate_access,
    redirect_target,
    role_home_route,
)
from accounts.session import Identity, Profile, SessionState

ROLES = ['consumer', 'farmer', 'admin']
REQUIRED_ROLES = [None, 'consumer', 'farmer', 'admin']

IDENTITY = Identity(subject_id='user-1', email='user@test.com')


def authenticated_state(role):
    profile = Profile(
        subject_id='user-1',
        email='user@test.com',
        display_name='User',
        role=role,
        account_status='active'
    )
    return SessionState.authenticated(IDENTITY, profile)


class TestEvaluateAccess:

    @pytest.mark.parametrize('required_role', REQUIRED_ROLES)
    def test_loading_session_waits(self, required_role):
        decision = evaluate_access(required_role, SessionState.loading(IDENTITY))
        assert decision == AccessDecision.WAIT

    @pytest.mark.parametrize('required_role', REQUIRED_ROLES)
    def test_anonymous_session_redirects_to_login(self, required_role):
        decision = evaluate_access(required_role, SessionState.anonymous())
        assert decision == AccessDecision.REDIRECT_LOGIN

    @pytest.mark.parametrize('required_role', REQUIRED_ROLES)
    @pytest.mark.parametrize('profile_role', ROLES)
    def test_authenticated_session(self, required_role, profile_role):
        decision = evaluate_access(required_role, authenticated_state(profile_role))

        if required_role is None or required_role == profile_role:
            assert decision == AccessDecision.RENDER
        else:
            assert decision == AccessDecision.REDIRECT_ROLE_HOME

    def test_consumer_on_farmer_view_is_never_rendered(self):
        decision = evaluate_access('farmer', authenticated_state('consumer'))
        assert decision != AccessDecision.RENDER
        assert decision == AccessDecision.REDIRECT_ROLE_HOME

    def test_authenticated_without_profile_is_sent_home_for_role_views(self):
        state = SessionState.authenticated(IDENTITY, profile=None)

        assert evaluate_access('farmer', state) == AccessDecision.REDIRECT_ROLE_HOME
        assert evaluate_access(None, state) == AccessDecision.RENDER

    def test_decision_depends_only_on_inputs(self):
        state = authenticated_state('farmer')
        decisions = {evaluate_access('admin', state) for _ in range(5)}
        assert decisions == {AccessDecision.REDIRECT_ROLE_HOME}


class TestRedirectTarget:

    @override_settings(LOGIN_ROUTE='/signin')
    def test_login_redirect(self):
        target = redirect_target(AccessDecision.REDIRECT_LOGIN, SessionState.anonymous())
        assert target == '/signin'

    @override_settings(ROLE_HOME_ROUTES={'farmer': '/farmer/home'})
    def test_role_home_redirect_uses_profile_role(self):
        target = redirect_target(AccessDecision.REDIRECT_ROLE_HOME, authenticated_state('farmer'))
        assert target == '/farmer/home'

    @pytest.mark.parametrize('decision', [AccessDecision.WAIT, AccessDecision.RENDER])
    def test_no_redirect_when_staying(self, decision):
        assert redirect_target(decision, authenticated_state('consumer')) is None

    @override_settings(ROLE_HOME_ROUTES={}, DEFAULT_HOME_ROUTE='/dashboard')
    def test_unknown_role_falls_back_to_default_home(self):
        assert role_home_route('unknown') == '/dashboard'


@pytest.mark.django_db
class TestRoleGatePermission:

    def test_anonymous_request_is_401(self, api_client):
        response = api_client.get('/api/marketplace/cart/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_wrong_role_is_403_with_redirect(self, api_client, consumer):
        api_client.force_authenticate(user=consumer)

        response = api_client.get('/api/marketplace/orders/received/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['decision'] == 'redirect_role_home'
        assert response.data['redirect'] == '/marketplace'

    def test_matching_role_renders(self, api_client, farmer):
        api_client.force_authenticate(user=farmer)

        response = api_client.get('/api/marketplace/orders/received/')

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
class TestAccessCheckEndpoint:

    def test_anonymous(self, api_client):
        response = api_client.get('/api/auth/access/', {'role': 'farmer'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['decision'] == 'redirect_login'
        assert response.data['redirect'] == '/login'

    def test_role_mismatch(self, api_client, farmer):
        api_client.force_authenticate(user=farmer)

        response = api_client.get('/api/auth/access/', {'role': 'admin'})

        assert response.data['decision'] == 'redirect_role_home'
        assert response.data['redirect'] == '/farmer/products'

    def test_render(self, api_client, admin_user):
        api_client.force_authenticate(user=admin_user)

        response = api_client.get('/api/auth/access/', {'role': 'admin'})

        assert response.data['decision'] == 'render'
        assert response.data['redirect'] is None

    def test_unknown_role_rejected(self, api_client, admin_user):
        api_client.force_authenticate(user=admin_user)

        response = api_client.get('/api/auth/access/', {'role': 'superuser'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
