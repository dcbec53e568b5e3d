"""
Access Policy Gate

Single decision point for role-gated views. Given the role a view requires
(or None) and the current session state, decide whether to render, wait,
or redirect.

Decision table:
- session loading                          -> wait (no redirect, avoids flicker)
- session anonymous                        -> redirect_login
- role required and profile role differs   -> redirect_role_home
- no role required, or role matches        -> render

The gate holds no state of its own; callers re-evaluate it on every
session change (every request, on the API side).
"""

from django.conf import settings
from django.db import models


class AccessDecision(models.TextChoices):
    WAIT = 'wait', 'Wait'
    RENDER = 'render', 'Render'
    REDIRECT_LOGIN = 'redirect_login', 'Redirect to Login'
    REDIRECT_ROLE_HOME = 'redirect_role_home', 'Redirect to Role Home'


def evaluate_access(required_role, session_state):
    """
    Decide what to do with a request for a protected view.

    Args:
        required_role: 'consumer', 'farmer', 'admin' or None
        session_state: accounts.session.SessionState

    Returns:
        AccessDecision
    """
    if session_state.is_loading:
        return AccessDecision.WAIT

    if session_state.is_anonymous:
        return AccessDecision.REDIRECT_LOGIN

    if required_role and session_state.role != required_role:
        return AccessDecision.REDIRECT_ROLE_HOME

    return AccessDecision.RENDER


def role_home_route(role):
    """Landing route for a role; unknown roles go to the generic dashboard."""
    routes = getattr(settings, 'ROLE_HOME_ROUTES', {})
    return routes.get(role, getattr(settings, 'DEFAULT_HOME_ROUTE', '/dashboard'))


def redirect_target(decision, session_state):
    """
    Route the client should navigate to for a decision, or None if it stays put.
    """
    if decision == AccessDecision.REDIRECT_LOGIN:
        return getattr(settings, 'LOGIN_ROUTE', '/login')
    if decision == AccessDecision.REDIRECT_ROLE_HOME:
        return role_home_route(session_state.role)
    return None
