from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    UserRegistrationView,
    LoginView,
    LogoutView,
    UserProfileView,
    SessionView,
    AccessCheckView,
)

app_name = 'accounts'

urlpatterns = [
    # Authentication endpoints
    path('register/', UserRegistrationView.as_view(), name='register'),
    path('login/', LoginView.as_view(), name='login'),
    path('logout/', LogoutView.as_view(), name='logout'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Session endpoints
    path('session/', SessionView.as_view(), name='session'),
    path('access/', AccessCheckView.as_view(), name='access'),

    # User profile endpoints
    path('profile/', UserProfileView.as_view(), name='profile'),
]
