"""
Admin User Management URL Configuration
"""

from django.urls import path
from .admin_views import (
    AdminUserListView,
    AdminUserStatusView,
)

app_name = 'admin_api'

urlpatterns = [
    # User Management
    path('users/', AdminUserListView.as_view(), name='admin-user-list'),
    path('users/<uuid:user_id>/status/', AdminUserStatusView.as_view(), name='admin-user-status'),
]
