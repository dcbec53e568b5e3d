"""
Role-gated permissions for the marketplace API.

Every permission here runs the access gate for the current request, so a
view body never executes for a session whose role does not match.
"""

from rest_framework import permissions
from rest_framework.exceptions import NotAuthenticated, PermissionDenied

from .policies import AccessDecision, evaluate_access, redirect_target
from .session import SessionProvider


class RoleGatePermission(permissions.BasePermission):
    """
    Base permission that evaluates the access gate.

    - redirect_login     -> 401
    - redirect_role_home -> 403 with the role's landing route in the body
    """
    required_role = None
    message = "You do not have access to this area."

    def has_permission(self, request, view):
        session = SessionProvider.from_request(request)
        session.load_profile()
        state = session.state()

        decision = evaluate_access(self.required_role, state)

        if decision == AccessDecision.RENDER:
            return True

        if decision == AccessDecision.REDIRECT_LOGIN:
            raise NotAuthenticated()

        raise PermissionDenied(detail={
            'error': self.message,
            'decision': decision.value,
            'redirect': redirect_target(decision, state),
        })


class IsSignedIn(RoleGatePermission):
    """Any signed-in user, whatever the role."""
    required_role = None


class IsConsumer(RoleGatePermission):
    """
    Permission for consumer-only areas (cart, my orders, ratings).
    """
    required_role = 'consumer'
    message = "Only consumers can access this area."


class IsFarmer(RoleGatePermission):
    """
    Permission for farmer-only areas (my products, orders received, community).
    """
    required_role = 'farmer'
    message = "Only farmers can access this area."


class IsAdmin(RoleGatePermission):
    """
    Permission for admin dashboards and management pages.
    """
    required_role = 'admin'
    message = "Only admins can access this area."
