"""
Admin API Views for user management

Provides administrative endpoints for:
- Listing and searching users
- Activating and deactivating accounts
"""

import logging

from django.db.models import Q
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import User
from .permissions import IsAdmin
from .policies.user_policy import UserPolicy
from .serializers import AccountStatusSerializer, AdminUserSerializer
from .session import SessionProvider

logger = logging.getLogger(__name__)


class AdminUserListView(APIView):
    """
    GET /api/admin/users/

    List users with filtering, search, and pagination.

    Query Params:
    - role: Filter by role
    - account_status: Filter by active/inactive
    - search: Search by display name or email
    - page: Page number (default: 1)
    - page_size: Results per page (default: 20)
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        queryset = UserPolicy.scope(request.user, User.objects.all())

        role = request.query_params.get('role')
        if role:
            queryset = queryset.filter(role=role)

        account_status = request.query_params.get('account_status')
        if account_status:
            queryset = queryset.filter(account_status=account_status)

        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(display_name__icontains=search) |
                Q(email__icontains=search) |
                Q(username__icontains=search)
            )

        try:
            page = max(int(request.query_params.get('page', 1)), 1)
            page_size = max(int(request.query_params.get('page_size', 20)), 1)
        except ValueError:
            return Response(
                {'error': 'page and page_size must be integers'},
                status=status.HTTP_400_BAD_REQUEST
            )

        start = (page - 1) * page_size
        end = start + page_size

        total = queryset.count()
        pages = (total + page_size - 1) // page_size
        users = queryset.order_by('-created_at')[start:end]

        serializer = AdminUserSerializer(users, many=True)

        return Response({
            'results': serializer.data,
            'pagination': {
                'page': page,
                'page_size': page_size,
                'total': total,
                'pages': pages,
                'has_next': page < pages,
                'has_previous': page > 1
            }
        })


class AdminUserStatusView(APIView):
    """
    POST /api/admin/users/{user_id}/status/

    Set or toggle a user's account status. With no body the status flips
    between active and inactive.
    """
    permission_classes = [IsAdmin]

    def post(self, request, user_id):
        try:
            target = User.objects.get(pk=user_id)
        except User.DoesNotExist:
            return Response(
                {'error': 'User not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        if not UserPolicy.can_change_status(request.user, target):
            return Response(
                {'error': 'You cannot change the status of this account'},
                status=status.HTTP_403_FORBIDDEN
            )

        serializer = AccountStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        new_status = serializer.validated_data.get('account_status')
        if not new_status:
            new_status = (
                User.AccountStatus.INACTIVE
                if target.is_account_active
                else User.AccountStatus.ACTIVE
            )

        target.account_status = new_status
        target.save(update_fields=['account_status', 'updated_at'])

        SessionProvider.invalidate_profile(str(target.pk))

        logger.info(
            f"Admin {request.user.email} set account {target.email} to {new_status}"
        )

        return Response({
            'message': f'Account is now {new_status}',
            'user': AdminUserSerializer(target).data,
        })
