"""
URL configuration for the AgriConnect marketplace backend.

Endpoint groups:
- /api/auth/                 - Signup, login, logout, profile, session and access gate
- /api/admin/                - Admin user management
- /api/admin/marketplace/    - Admin order, product, review and suggested price management
- /api/admin/               - Admin dashboard, reports and CSV export (dashboards app)
- /api/marketplace/          - Catalog, cart, orders, ratings, community (role scoped)
"""
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(url='/admin/', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),
    path('api/admin/', include('accounts.admin_urls')),
    path('api/admin/marketplace/', include('marketplace.admin_urls')),
    path('api/admin/', include('dashboards.urls')),
    path('api/marketplace/', include('marketplace.urls')),
]
