from django.urls import path

from .views import AdminDashboardView, AdminReportView, TopSellersView
from .exports import ExportReportCSVView

app_name = 'dashboards'

urlpatterns = [
    path('dashboard/', AdminDashboardView.as_view(), name='admin-dashboard'),
    path('reports/', AdminReportView.as_view(), name='admin-report'),
    path('reports/top-sellers/', TopSellersView.as_view(), name='top-sellers'),
    path('reports/export/csv/', ExportReportCSVView.as_view(), name='export-csv'),
]
